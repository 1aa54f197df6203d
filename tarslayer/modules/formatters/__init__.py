from .formatters import (
    mode_to_string,
    human_readable_size,
    guess_media_type,
    CONTENT_TYPES,
    DEFAULT_CONTENT_TYPE,
)
