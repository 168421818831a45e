from __future__ import annotations

import httpx
from fastapi import Request

from imghost.app.settings import HostSettings
from imghost.storage.local import LocalStore


def get_settings(request: Request) -> HostSettings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("Settings not initialized; build the app with create_app()")
    return settings


def get_store(request: Request) -> LocalStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Storage not initialized; build the app with create_app()")
    return store


def get_http_client(request: Request) -> httpx.AsyncClient:
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise RuntimeError("HTTP client not initialized; build the app with create_app()")
    return client
