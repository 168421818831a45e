"""
Content-type detection for uploads and served files.

`detect_content_type` looks only at leading bytes, never at client metadata.
`content_type_for` goes the other way and trusts the stored file's extension.
"""

from __future__ import annotations

from typing import AsyncIterator

from imghost.storage.naming import extension_of

SNIFF_LEN = 512
OCTET_STREAM = "application/octet-stream"

# (prefix, content type); first match wins
_PREFIXES: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
    (b"\x1aE\xdf\xa3", "video/webm"),
    (b"OggS\x00", "application/ogg"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
)

# ftyp major brands that decide the type on their own
_FTYP_BRANDS: dict[bytes, str] = {
    b"avif": "image/avif",
    b"avis": "image/avif",
    b"heic": "image/heic",
    b"heix": "image/heic",
    b"mif1": "image/heif",
    b"qt  ": "video/quicktime",
    b"M4V ": "video/x-m4v",
}

# control bytes that never show up in text
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)

EXTENSION_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "ico": "image/x-icon",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "avif": "image/avif",
    "heic": "image/heic",
    "mp4": "video/mp4",
    "m4v": "video/x-m4v",
    "mov": "video/quicktime",
    "webm": "video/webm",
    "mkv": "video/x-matroska",
    "avi": "video/avi",
    "ogv": "video/ogg",
}

# preferred extension per sniffed type, for uploads whose name has none
TYPE_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/x-icon": "ico",
    "image/tiff": "tiff",
    "image/avif": "avif",
    "image/heic": "heic",
    "image/heif": "heic",
    "video/mp4": "mp4",
    "video/x-m4v": "m4v",
    "video/quicktime": "mov",
    "video/webm": "webm",
    "video/avi": "avi",
}


def _sniff_riff(data: bytes) -> str | None:
    if len(data) < 12 or not data.startswith(b"RIFF"):
        return None
    kind = data[8:12]
    if kind == b"WEBP":
        return "image/webp"
    if kind == b"AVI ":
        return "video/avi"
    if kind == b"WAVE":
        return "audio/wave"
    return None


def _sniff_ftyp(data: bytes) -> str | None:
    # ISO base media: [size:4][b"ftyp"][major:4][minor:4][compatible brands...]
    if len(data) < 12 or data[4:8] != b"ftyp":
        return None
    box_size = int.from_bytes(data[0:4], "big")
    if box_size < 12 or box_size % 4 != 0:
        return None
    major = data[8:12]
    if major in _FTYP_BRANDS:
        return _FTYP_BRANDS[major]
    brands = [major]
    end = min(box_size, len(data))
    for off in range(16, end - 3, 4):
        brands.append(data[off:off + 4])
    if any(b.startswith((b"mp4", b"iso", b"avc1", b"dash")) for b in brands):
        return "video/mp4"
    return None


def _sniff_text(data: bytes) -> str | None:
    if not data:
        return None
    if data.startswith((b"\xef\xbb\xbf", b"\xfe\xff", b"\xff\xfe")):
        return "text/plain; charset=utf-8"
    if any(b in _BINARY_BYTES for b in data):
        return None
    head = data.lstrip(b" \t\r\n").lower()
    if head.startswith((b"<!doctype html", b"<html", b"<head", b"<body", b"<script")):
        return "text/html; charset=utf-8"
    if head.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    return "text/plain; charset=utf-8"


def detect_content_type(data: bytes) -> str:
    """
    Classify `data` by its leading bytes; only the first SNIFF_LEN count.

    Always returns a valid MIME type, falling back to application/octet-stream.
    """
    data = data[:SNIFF_LEN]
    for prefix, ctype in _PREFIXES:
        if data.startswith(prefix):
            return ctype
    return _sniff_riff(data) or _sniff_ftyp(data) or _sniff_text(data) or OCTET_STREAM


def is_media_type(content_type: str) -> bool:
    main = content_type.split(";", 1)[0].strip().lower()
    return main.startswith("image/") or main.startswith("video/")


def content_type_for(filename: str) -> str:
    return EXTENSION_TYPES.get(extension_of(filename), OCTET_STREAM)


def extension_for(content_type: str) -> str:
    return TYPE_EXTENSIONS.get(content_type.split(";", 1)[0].strip().lower(), "")


async def peek(
    chunks: AsyncIterator[bytes], size: int = SNIFF_LEN
) -> tuple[bytes, AsyncIterator[bytes]]:
    """
    Pull at least `size` bytes off `chunks` (fewer if it runs dry).

    Returns the buffered head and an iterator over the rest, so the caller
    can sniff first and still write every byte afterwards.
    """
    buf = bytearray()
    async for chunk in chunks:
        buf.extend(chunk)
        if len(buf) >= size:
            break

    async def _rest() -> AsyncIterator[bytes]:
        async for chunk in chunks:
            yield chunk

    return bytes(buf), _rest()
