from .local import LocalStore
from .naming import extension_of, random_filename, random_name
from .sniff import (
    SNIFF_LEN,
    content_type_for,
    detect_content_type,
    extension_for,
    is_media_type,
    peek,
)

__all__ = [
    "LocalStore",
    "SNIFF_LEN",
    "content_type_for",
    "detect_content_type",
    "extension_for",
    "extension_of",
    "is_media_type",
    "peek",
    "random_filename",
    "random_name",
]
