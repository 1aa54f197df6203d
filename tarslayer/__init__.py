"""In-memory USTAR archive indexing and file access."""

from tarslayer.modules.finders import FileEntry, TarFileType, BLOCK_SIZE, load_tar_file
from tarslayer.modules.keepers import TarReader, FileBlob, NotFound, TruncatedContent, get_array_buffer

__all__ = [
    "BLOCK_SIZE",
    "FileBlob",
    "FileEntry",
    "NotFound",
    "TarFileType",
    "TarReader",
    "TruncatedContent",
    "get_array_buffer",
    "load_tar_file",
]
