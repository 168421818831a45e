from .client import get_default_timeout_seconds, new_async_httpx_client, new_httpx_client
from .fetch import RemoteFile, filename_from_url, open_remote

__all__ = [
    "RemoteFile",
    "filename_from_url",
    "get_default_timeout_seconds",
    "new_async_httpx_client",
    "new_httpx_client",
    "open_remote",
]
