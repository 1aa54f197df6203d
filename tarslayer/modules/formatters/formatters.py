from pathlib import PurePosixPath

from tarslayer.modules.finders.tar_parser import TarFileType


#========= FORMATTER
def mode_to_string(mode_bits: int, type_code: int) -> str:
    """
    Convert permission bits to an ls-style permission string.

    Examples:
        0o755, TarFileType.DIRECTORY -> 'drwxr-xr-x'
        0o644, TarFileType.REGULAR_FILE -> '-rw-r--r--'
        0o777, TarFileType.SYMLINK -> 'lrwxrwxrwx'
    """
    type_char = {
        TarFileType.DIRECTORY: 'd',
        TarFileType.SYMLINK: 'l',
        TarFileType.HARDLINK: 'h',
        TarFileType.CHAR_DEVICE: 'c',
        TarFileType.BLOCK_DEVICE: 'b',
        TarFileType.FIFO: 'p',
    }.get(type_code, '-')

    perms = ''
    for shift in [6, 3, 0]:  # owner, group, other
        bits = (mode_bits >> shift) & 0o7
        perms += 'r' if bits & 4 else '-'
        perms += 'w' if bits & 2 else '-'
        perms += 'x' if bits & 1 else '-'

    return type_char + perms


def human_readable_size(size):
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


## Content types for returned files, by extension

CONTENT_TYPES = {
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".sh": "text/x-shellscript",
    ".py": "text/x-python",
    ".conf": "text/plain",
    ".cfg": "text/plain",
    ".ini": "text/plain",
    ".yml": "text/yaml",
    ".yaml": "text/yaml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_media_type(filename: str) -> str:
    return CONTENT_TYPES.get(PurePosixPath(filename).suffix.lower(), DEFAULT_CONTENT_TYPE)
