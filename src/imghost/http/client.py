from __future__ import annotations

import os

import httpx

DEFAULT_TIMEOUT_SECONDS = 10.0


def get_default_timeout_seconds() -> float:
    raw = os.getenv("HTTP_CLIENT_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS


def _default_headers() -> dict[str, str]:
    return {"User-Agent": "imghost/0.1 (+remote upload)"}


def new_httpx_client(**kwargs) -> httpx.Client:
    kwargs.setdefault("timeout", httpx.Timeout(get_default_timeout_seconds()))
    kwargs.setdefault("follow_redirects", True)
    kwargs.setdefault("headers", _default_headers())
    return httpx.Client(**kwargs)


def new_async_httpx_client(**kwargs) -> httpx.AsyncClient:
    kwargs.setdefault("timeout", httpx.Timeout(get_default_timeout_seconds()))
    kwargs.setdefault("follow_redirects", True)
    kwargs.setdefault("headers", _default_headers())
    return httpx.AsyncClient(**kwargs)
