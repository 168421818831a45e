from __future__ import annotations


class ImgHostError(Exception):
    """
    Base error for anything a request can fail with.

    Carries the HTTP status and the short human-readable message that the
    error handlers send back as plain text.
    """

    status_code: int = 500
    detail: str = "Internal Server Error"

    def __init__(self, detail: str | None = None, *, status_code: int | None = None):
        if detail is not None:
            self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.detail)


class InvalidUpload(ImgHostError):
    status_code = 400
    detail = "Error retrieving the file"


class UnsupportedMediaType(ImgHostError):
    status_code = 400
    detail = "Only image and video uploads are accepted"


class UploadTooLarge(ImgHostError):
    status_code = 413
    detail = "Upload exceeds the allowed size"


class RemoteFetchError(ImgHostError):
    status_code = 502
    detail = "Error fetching remote file"


class StoredFileNotFound(ImgHostError):
    status_code = 404
    detail = "File not found"


class StorageError(ImgHostError):
    status_code = 500
    detail = "Error creating the file"


class ConfigError(ImgHostError):
    """Raised at startup; never reaches a client."""

    detail = "Invalid configuration"


__all__ = [
    "ImgHostError",
    "InvalidUpload",
    "UnsupportedMediaType",
    "UploadTooLarge",
    "RemoteFetchError",
    "StoredFileNotFound",
    "StorageError",
    "ConfigError",
]
