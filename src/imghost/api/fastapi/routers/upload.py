from __future__ import annotations

import logging
from typing import AsyncIterator
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, HttpUrl

from imghost.api.fastapi.dependencies import get_http_client, get_settings, get_store
from imghost.app.settings import HostSettings
from imghost.exceptions import InvalidUpload, UnsupportedMediaType
from imghost.http import open_remote
from imghost.storage import LocalStore, detect_content_type, extension_for, is_media_type, peek

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class RemoteUpload(BaseModel):
    url: HttpUrl


async def _iter_upload(file: UploadFile) -> AsyncIterator[bytes]:
    while chunk := await file.read(CHUNK_SIZE):
        yield chunk


async def _store_media(
    store: LocalStore,
    original: str | None,
    head: bytes,
    rest: AsyncIterator[bytes],
    *,
    max_bytes: int,
) -> str:
    ctype = detect_content_type(head)
    if not is_media_type(ctype):
        raise UnsupportedMediaType(f"Unsupported content type: {ctype.split(';')[0]}")
    return await store.save(original, head, rest, max_bytes=max_bytes, fallback_ext=extension_for(ctype))


def _redirect(settings: HostSettings, name: str) -> RedirectResponse:
    return RedirectResponse(f"{settings.serve_path}/{quote(name, safe='')}", status_code=303)


@router.post("/upload")
async def upload_file(
    file: UploadFile | None = File(None),
    settings: HostSettings = Depends(get_settings),
    store: LocalStore = Depends(get_store),
):
    if file is None or not file.filename:
        raise InvalidUpload()

    head, rest = await peek(_iter_upload(file))
    if not head:
        raise InvalidUpload("Error retrieving the file: empty upload")

    name = await _store_media(store, file.filename, head, rest, max_bytes=settings.max_upload_bytes)
    logger.info("Uploaded %s as %s", file.filename, name, extra={"stored_name": name})
    return _redirect(settings, name)


@router.post("/url")
async def upload_url(
    body: RemoteUpload,
    settings: HostSettings = Depends(get_settings),
    store: LocalStore = Depends(get_store),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    url = str(body.url)
    async with open_remote(client, url, max_bytes=settings.max_remote_bytes) as remote:
        head, rest = await peek(remote.chunks)
        if not head:
            raise InvalidUpload("Remote file is empty")
        name = await _store_media(store, remote.filename, head, rest, max_bytes=settings.max_remote_bytes)

    logger.info("Fetched %s as %s", url, name, extra={"stored_name": name})
    return _redirect(settings, name)
