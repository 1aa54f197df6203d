from .tar_parser import (
    BLOCK_SIZE,
    FileEntry,
    TarFileType,
    iter_tar_headers,
    load_tar_file,
    parse_tar_header,
)
