# tar_reader.py
# Read-only access to the files of an indexed in-memory archive.

from typing import Any, Iterator, List, Optional, Sequence

from tarslayer.modules.finders.tar_parser import FileEntry, load_tar_file
from tarslayer.modules.keepers.blob import FileBlob
from tarslayer.modules.keepers.sources import get_array_buffer


class NotFound(LookupError):
    """No archive entry has the requested name."""

    def __init__(self, filename: str):
        super().__init__(f"File not found: {filename}")
        self.filename = filename


class TruncatedContent(ValueError):
    """An entry's content runs past the end of the archive buffer."""

    def __init__(self, entry: FileEntry, available: int):
        super().__init__(
            f"Content of {entry.name} is truncated: "
            f"expected {entry.size:,} bytes, archive holds {available:,}"
        )
        self.entry = entry
        self.available = available


def _content_view(buffer: memoryview, offset: int, size: int) -> memoryview:
    view = buffer[offset:offset + size]
    if len(view) < size:
        raise ValueError(f"Range {offset}+{size} is outside the buffer")
    return view


def read_text_file(buffer: memoryview, offset: int, size: int) -> str:
    """Decode `size` bytes at `offset` as UTF-8 text."""
    return bytes(_content_view(buffer, offset, size)).decode("utf-8", errors="replace")


def read_file_blob(buffer: memoryview, offset: int, size: int, mimetype: str = "") -> FileBlob:
    """Copy `size` bytes at `offset` into a FileBlob tagged with `mimetype`."""
    return FileBlob(data=bytes(_content_view(buffer, offset, size)), type=mimetype)


class TarReader:
    """
    An archive buffer together with its entry index.

    Both are fixed at construction; every method is a pure read, so a reader
    can be shared freely between callers.

    Usage:
        reader = await TarReader.load(source)
        for info in reader.file_infos:
            print(info.name, info.size)
        text = reader.get_text_file("etc/os-release")
    """

    def __init__(self, buffer: Any, file_infos: Sequence[FileEntry]):
        self._buffer = memoryview(bytes(buffer))
        self._file_infos = tuple(file_infos)

    @classmethod
    async def load(cls, source: Any) -> "TarReader":
        """Materialize `source` (see get_array_buffer) and index it."""
        buffer = await get_array_buffer(source)
        return cls.from_bytes(buffer)

    @classmethod
    def from_bytes(cls, buffer: Any) -> "TarReader":
        data = bytes(buffer)
        return cls(data, load_tar_file(data))

    @property
    def file_infos(self) -> List[FileEntry]:
        return list(self._file_infos)

    @property
    def buffer_size(self) -> int:
        return self._buffer.nbytes

    def __len__(self) -> int:
        return len(self._file_infos)

    def __iter__(self) -> Iterator[FileEntry]:
        return iter(self._file_infos)

    def __contains__(self, filename: object) -> bool:
        return self.find(filename) is not None

    def names(self) -> List[str]:
        return [info.name for info in self._file_infos]

    def find(self, filename: object) -> Optional[FileEntry]:
        """First entry named exactly `filename`, or None."""
        for info in self._file_infos:
            if info.name == filename:
                return info
        return None

    def _require(self, filename: str) -> FileEntry:
        item = self.find(filename)
        if item is None:
            raise NotFound(filename)

        available = max(0, min(item.size, self._buffer.nbytes - item.content_offset))
        if available < item.size:
            raise TruncatedContent(item, available)

        return item

    def get_file_bytes(self, filename: str) -> bytes:
        item = self._require(filename)
        return bytes(_content_view(self._buffer, item.content_offset, item.size))

    def get_text_file(self, filename: str) -> str:
        """
        Return the content of `filename` decoded as UTF-8.

        Raises:
            NotFound: if no entry has that exact name.
            TruncatedContent: if the archive ends inside the file's content.
        """
        item = self._require(filename)
        return read_text_file(self._buffer, item.content_offset, item.size)

    def get_file_blob(self, filename: str, mimetype: str = "") -> FileBlob:
        """
        Return the content of `filename` as a FileBlob of type `mimetype`.

        Raises:
            NotFound: if no entry has that exact name.
            TruncatedContent: if the archive ends inside the file's content.
        """
        item = self._require(filename)
        return read_file_blob(self._buffer, item.content_offset, item.size, mimetype)
