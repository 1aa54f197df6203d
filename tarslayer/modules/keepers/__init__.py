from .blob import FileBlob
from .sources import get_array_buffer, download_tar, read_local_tar, fetch_tar_async
from .tar_reader import TarReader, NotFound, TruncatedContent, read_text_file, read_file_blob
from .display import Tee, format_entry_line, build_listing_table, display_listing
