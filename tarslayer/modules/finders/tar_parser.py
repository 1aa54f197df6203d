# tar_parser.py
# In-memory USTAR header parser
#
# Walks an archive buffer one 512-byte block at a time and decodes the
# header fields of every entry into a FileEntry. Content bytes are never
# copied here; each entry only records where its header block starts.

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List, Optional, Union


BytesLike = Union[bytes, bytearray, memoryview]

BLOCK_SIZE = 512

# Header layout: (offset, length) relative to the start of the block
NAME_FIELD = (0, 100)
MODE_FIELD = (100, 8)
UID_FIELD = (108, 8)
GID_FIELD = (116, 8)
SIZE_FIELD = (124, 12)
TYPE_FIELD = (156, 1)
UNAME_FIELD = (265, 32)
GNAME_FIELD = (297, 32)


class TarFileType(IntEnum):
    """Type flag byte values, taken verbatim from header offset 156."""
    REGULAR_FILE_ALT = 0    # NUL, pre-POSIX regular file
    REGULAR_FILE = 48       # '0'
    HARDLINK = 49           # '1'
    SYMLINK = 50            # '2'
    CHAR_DEVICE = 51        # '3'
    BLOCK_DEVICE = 52       # '4'
    DIRECTORY = 53          # '5'
    FIFO = 54               # '6'
    CONTIGUOUS_FILE = 55    # '7'

    @staticmethod
    def is_regular_file_type(value: int) -> bool:
        return value in {TarFileType.REGULAR_FILE, TarFileType.REGULAR_FILE_ALT, TarFileType.CONTIGUOUS_FILE}

    @staticmethod
    def is_directory_type(value: int) -> bool:
        return value == TarFileType.DIRECTORY

    @staticmethod
    def is_symlink_type(value: int) -> bool:
        return value == TarFileType.SYMLINK

    @staticmethod
    def is_hardlink_type(value: int) -> bool:
        return value == TarFileType.HARDLINK


@dataclass(frozen=True)
class FileEntry:
    """A single archive entry. Metadata only; content stays in the buffer."""
    name: str
    type: int           # Raw type flag byte (see TarFileType)
    size: int           # Content length in bytes
    uid: int
    gid: int
    mode: int           # Decimal reading of the mode field (see permission_bits)
    user: str
    group: str
    header_offset: int  # Always a multiple of BLOCK_SIZE

    @property
    def content_offset(self) -> int:
        return self.header_offset + BLOCK_SIZE

    @property
    def next_header_offset(self) -> int:
        return self.header_offset + BLOCK_SIZE + BLOCK_SIZE * _blocks_for(self.size)

    @property
    def is_dir(self) -> bool:
        return TarFileType.is_directory_type(self.type) or self.name.endswith('/')

    @property
    def is_file(self) -> bool:
        return TarFileType.is_regular_file_type(self.type) and not self.name.endswith('/')

    @property
    def is_symlink(self) -> bool:
        return TarFileType.is_symlink_type(self.type)

    @property
    def permission_bits(self) -> int:
        """
        Permission bits for display purposes.

        `mode` holds the mode field read as a decimal number, so its digits are
        the octal digits the archiver wrote. Re-reading them in base 8 recovers
        the real permission bits; 0 if any digit is not a valid octal digit.
        """
        try:
            return int(str(abs(self.mode)), 8)
        except ValueError:
            return 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "type": int(self.type),
            "size": self.size,
            "uid": self.uid,
            "gid": self.gid,
            "mode": self.mode,
            "user": self.user,
            "group": self.group,
            "header_offset": self.header_offset,
        }


def _blocks_for(size: int) -> int:
    """Number of whole blocks needed to hold `size` bytes of content."""
    return (size + BLOCK_SIZE - 1) // BLOCK_SIZE


def _parse_int_prefix(data: BytesLike, base: int) -> Optional[int]:
    """
    Parse the leading number of an ASCII numeric field.

    Leading whitespace is skipped and an optional sign is accepted. Digits are
    consumed up to the first character that is not valid in `base`; whatever
    follows (NUL or space terminators, garbage) is ignored.

    Returns None if no digit could be read at all.
    """
    text = bytes(data).decode('utf-8', errors='replace').lstrip()

    sign = 1
    if text[:1] in ('+', '-'):
        sign = -1 if text[0] == '-' else 1
        text = text[1:]

    digits = ''
    for char in text:
        if not char.isascii() or not char.isdigit() or int(char) >= base:
            break
        digits += char

    if not digits:
        return None

    return sign * int(digits, base)


def _field(buffer: BytesLike, offset: int, field: tuple) -> memoryview:
    start, length = field
    return memoryview(buffer)[offset + start:offset + start + length]


# =============================================================================
# Field Decoders
# =============================================================================

def read_string(buffer: BytesLike, offset: int, max_size: int) -> str:
    """Decode a NUL-terminated string of at most `max_size` bytes as UTF-8."""
    view = bytes(memoryview(buffer)[offset:offset + max_size])
    end = view.find(b'\x00')
    if end >= 0:
        view = view[:end]
    return view.decode('utf-8', errors='replace')


def read_file_name(buffer: BytesLike, offset: int) -> str:
    return read_string(buffer, offset + NAME_FIELD[0], NAME_FIELD[1])


def read_file_type(buffer: BytesLike, offset: int) -> int:
    code = _field(buffer, offset, TYPE_FIELD)[0]
    try:
        return TarFileType(code)
    except ValueError:
        return code


def read_file_size(buffer: BytesLike, offset: int) -> Optional[int]:
    """Octal content size, or None if the field holds no usable number."""
    size = _parse_int_prefix(_field(buffer, offset, SIZE_FIELD), 8)
    if size is None or size < 0:
        return None
    return size


def read_file_uid(buffer: BytesLike, offset: int) -> int:
    uid = _parse_int_prefix(_field(buffer, offset, UID_FIELD), 8)
    return 0 if uid is None else uid


def read_file_gid(buffer: BytesLike, offset: int) -> int:
    gid = _parse_int_prefix(_field(buffer, offset, GID_FIELD), 8)
    return 0 if gid is None else gid


def read_file_mode(buffer: BytesLike, offset: int) -> int:
    # Base 10, unlike uid/gid/size. FileEntry.permission_bits has the octal value.
    mode = _parse_int_prefix(_field(buffer, offset, MODE_FIELD), 10)
    return 0 if mode is None else mode


def read_file_uname(buffer: BytesLike, offset: int) -> str:
    return read_string(buffer, offset + UNAME_FIELD[0], UNAME_FIELD[1])


def read_file_gname(buffer: BytesLike, offset: int) -> str:
    return read_string(buffer, offset + GNAME_FIELD[0], GNAME_FIELD[1])


# =============================================================================
# Scanner
# =============================================================================

def parse_tar_header(buffer: BytesLike, offset: int = 0) -> Optional[FileEntry]:
    """
    Decode the 512-byte header block starting at `offset`.

    Tar header fields used (POSIX ustar):
    - 0-99: name (100 bytes, NUL-terminated)
    - 100-107: mode (8 bytes, read as decimal)
    - 108-115: uid (8 bytes octal)
    - 116-123: gid (8 bytes octal)
    - 124-135: size (12 bytes octal)
    - 156: typeflag (1 byte)
    - 265-296: uname (32 bytes, NUL-terminated)
    - 297-328: gname (32 bytes, NUL-terminated)

    Returns None if the name field is empty, which marks the end of the archive.
    A size field that cannot be parsed is reported as 0 here; use
    `iter_tar_headers` to also stop the scan on such entries.
    """
    name = read_file_name(buffer, offset)
    if not name:
        return None

    size = read_file_size(buffer, offset)

    return FileEntry(
        name=name,
        type=read_file_type(buffer, offset),
        size=0 if size is None else size,
        uid=read_file_uid(buffer, offset),
        gid=read_file_gid(buffer, offset),
        mode=read_file_mode(buffer, offset),
        user=read_file_uname(buffer, offset),
        group=read_file_gname(buffer, offset),
        header_offset=offset,
    )


def iter_tar_headers(buffer: BytesLike) -> Iterator[FileEntry]:
    """Yield the entries of an in-memory archive in archive order."""
    buffer_length = memoryview(buffer).nbytes
    offset = 0

    # Strict comparison: there must be room for a full header past the cursor
    while offset < buffer_length - BLOCK_SIZE:
        entry = parse_tar_header(buffer, offset)
        if entry is None:
            break

        yield entry

        if read_file_size(buffer, offset) is None:
            # Nothing after a corrupt size field can be located reliably
            break

        offset = entry.next_header_offset


def load_tar_file(buffer: BytesLike) -> List[FileEntry]:
    """
    Scan a whole archive buffer once and return its entries.

    An empty, truncated or otherwise unusable buffer yields an empty (or
    shortened) list; scanning never raises on bad data.
    """
    return list(iter_tar_headers(buffer))
