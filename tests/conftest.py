"""
Root conftest.py for imghost tests.

This file provides:
1. Pytest markers for test categorization
2. Sample media payloads
3. App / client fixtures wired to a temporary upload directory
4. A mock remote web server for URL uploads
"""

from __future__ import annotations

from typing import Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from imghost.api.fastapi import create_app
from imghost.app.settings import HostSettings


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Tag tests by folder so `-m api` / `-m storage` select them."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")
        if "/tests/api/" in norm or "/tests/acceptance/" in norm:
            item.add_marker(pytest.mark.api)
        if "/tests/unit/storage/" in norm:
            item.add_marker(pytest.mark.storage)


def pytest_configure(config):
    for name, desc in [
        ("api", "HTTP-level tests against the ASGI app"),
        ("storage", "Naming, sniffing and disk store tests"),
        ("remote", "URL upload tests against a mocked remote server"),
        ("cli", "Command line tests"),
    ]:
        config.addinivalue_line("markers", f"{name}: {desc}")


# =============================================================================
# SAMPLE PAYLOADS
# =============================================================================

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00" + bytes(range(256)) * 4 + b"\xff\xd9"
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(256)) * 3
GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00" + b"\x00" * 64
MP4_BYTES = (
    b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"
    + b"\x00\x00\x00\x08free"
    + bytes(range(256)) * 2
)
TEXT_BYTES = b"just some plain text, definitely not a picture\n" * 4


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def mp4_bytes() -> bytes:
    return MP4_BYTES


@pytest.fixture
def text_bytes() -> bytes:
    return TEXT_BYTES


# =============================================================================
# SETTINGS / APP FIXTURES
# =============================================================================


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir) -> HostSettings:
    return HostSettings(upload_dir=upload_dir, max_upload_bytes=64 * 1024, max_remote_bytes=64 * 1024)


@pytest.fixture
def remote_routes() -> dict[str, httpx.Response | Exception]:
    """URL -> canned response (or exception to raise) for the mock remote server."""
    return {}


@pytest.fixture
def remote_transport(remote_routes) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        hit = remote_routes.get(str(request.url))
        if hit is None:
            return httpx.Response(404, text="no such remote file")
        if isinstance(hit, Exception):
            raise hit
        return hit

    return httpx.MockTransport(handler)


@pytest.fixture
def app(settings, remote_transport) -> FastAPI:
    return create_app(settings, http_transport=remote_transport)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def stored_files(upload_dir) -> Callable[[], list[str]]:
    """Names currently in the upload directory."""

    def _list() -> list[str]:
        if not upload_dir.exists():
            return []
        return sorted(p.name for p in upload_dir.iterdir())

    return _list
