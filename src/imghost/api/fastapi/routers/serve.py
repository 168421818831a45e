from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from imghost.api.fastapi.dependencies import get_store
from imghost.storage import LocalStore, content_type_for

router = APIRouter(tags=["serve"])


@router.get("/{name}")
async def serve_file(name: str, store: LocalStore = Depends(get_store)):
    """Stream a stored file; the type comes from its extension only."""
    path = store.resolve(name)
    return FileResponse(path, media_type=content_type_for(path.name))
