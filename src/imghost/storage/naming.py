from __future__ import annotations

import re
import secrets
import string
from pathlib import PurePosixPath

LETTERS = string.ascii_letters
DEFAULT_NAME_LENGTH = 6

# Extensions kept on stored names; anything else falls back to the sniffed one.
_EXT_RE = re.compile(r"[a-z0-9]{1,16}")


def random_name(length: int = DEFAULT_NAME_LENGTH) -> str:
    if length < 1:
        raise ValueError("length must be >= 1")
    return "".join(secrets.choice(LETTERS) for _ in range(length))


def extension_of(filename: str | None) -> str:
    """
    Lower-cased final dot segment of the basename.

    Returns "" when there is none, or when it is not a short alphanumeric
    token that is safe in both a filename and a URL path.
    """
    if not filename:
        return ""
    base = PurePosixPath(filename.replace("\\", "/")).name
    stem, dot, ext = base.rpartition(".")
    if not dot or not stem.strip("."):
        return ""
    ext = ext.lower()
    return ext if _EXT_RE.fullmatch(ext) else ""


def random_filename(length: int, original: str | None, *, fallback_ext: str = "") -> str:
    """
    Build `<random>.<ext>` for a stored upload.

    The extension comes from `original`; `fallback_ext` is used when the
    original carries none. Without either, the bare random part is returned.
    """
    ext = extension_of(original) or fallback_ext.lower().lstrip(".")
    name = random_name(length)
    return f"{name}.{ext}" if ext else name
