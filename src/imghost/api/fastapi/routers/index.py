from __future__ import annotations

import importlib.resources as pkg
from functools import lru_cache
from string import Template

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from imghost.api.fastapi.dependencies import get_settings
from imghost.app.settings import MIB, HostSettings

router = APIRouter(tags=["index"])


@lru_cache
def _template() -> Template:
    txt = pkg.files("imghost.templates").joinpath("index.html").read_text(encoding="utf-8")
    return Template(txt)


@router.get("/", response_class=HTMLResponse)
async def index(settings: HostSettings = Depends(get_settings)):
    html = _template().substitute(
        app_name=settings.name,
        static_path=settings.static_path,
        max_upload_mb=f"{settings.max_upload_bytes / MIB:g}",
    )
    return HTMLResponse(html)
