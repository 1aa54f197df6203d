from dataclasses import dataclass


@dataclass(frozen=True)
class FileBlob:
    """Raw bytes of an archived file, tagged with a MIME type."""
    data: bytes
    type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def text(self, encoding: str = "utf-8") -> str:
        return self.data.decode(encoding, errors="replace")
