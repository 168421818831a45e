from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator
from urllib.parse import unquote, urlsplit

import httpx

from imghost.exceptions import InvalidUpload, RemoteFetchError, UploadTooLarge

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class RemoteFile:
    url: str
    filename: str
    content_length: int | None
    chunks: AsyncIterator[bytes]


def filename_from_url(url: str) -> str:
    path = unquote(urlsplit(url).path)
    return path.rsplit("/", 1)[-1]


@asynccontextmanager
async def open_remote(
    client: httpx.AsyncClient, url: str, *, max_bytes: int
) -> AsyncIterator[RemoteFile]:
    """
    Stream a remote GET.

    Rejects non-2xx answers and declared lengths above `max_bytes` before
    any body byte is read. Transport failures, including ones raised while
    the caller consumes `chunks`, surface as RemoteFetchError.
    """
    try:
        async with client.stream("GET", url) as response:
            if not response.is_success:
                logger.warning("Remote %s answered %d", url, response.status_code)
                raise RemoteFetchError(
                    f"Error fetching remote file: upstream status {response.status_code}"
                )

            length: int | None = None
            declared = response.headers.get("content-length")
            if declared is not None:
                try:
                    length = int(declared)
                except ValueError:
                    length = None
            if length is not None and length > max_bytes:
                raise UploadTooLarge(f"Remote file exceeds {max_bytes} bytes")

            yield RemoteFile(
                url=str(response.url),
                filename=filename_from_url(url),
                content_length=length,
                chunks=response.aiter_bytes(CHUNK_SIZE),
            )
    except httpx.InvalidURL as exc:
        raise InvalidUpload(f"Invalid URL: {exc}") from exc
    except httpx.HTTPError as exc:
        logger.warning("Fetching %s failed: %s", url, exc)
        raise RemoteFetchError() from exc
