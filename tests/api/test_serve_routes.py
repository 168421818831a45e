"""
Tests for GET <serve_path>/<name> and GET /<name>.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from imghost.api.fastapi import create_app
from imghost.app.settings import HostSettings


@pytest.mark.asyncio
class TestServe:
    async def test_serves_under_prefix_and_root(self, client, upload_dir, png_bytes):
        (upload_dir / "abcDEF.png").write_bytes(png_bytes)

        for path in ("/i/abcDEF.png", "/abcDEF.png"):
            response = await client.get(path)
            assert response.status_code == 200
            assert response.headers["content-type"] == "image/png"
            assert response.content == png_bytes

    async def test_type_comes_from_extension_only(self, client, upload_dir, png_bytes):
        (upload_dir / "qwerty.webm").write_bytes(png_bytes)
        (upload_dir / "zxcvbn.bin").write_bytes(png_bytes)

        assert (await client.get("/i/qwerty.webm")).headers["content-type"] == "video/webm"
        assert (await client.get("/i/zxcvbn.bin")).headers["content-type"] == "application/octet-stream"

    async def test_unknown_name_is_404(self, client):
        response = await client.get("/i/neverUploaded.png")

        assert response.status_code == 404
        assert response.text == "File not found"

    async def test_root_unknown_name_is_404(self, client):
        assert (await client.get("/nothing.jpg")).status_code == 404

    @pytest.mark.parametrize("path", ["/i/..%2F..%2Fetc%2Fpasswd", "/i/%2E%2E", "/i/../conftest.py"])
    async def test_traversal_does_not_escape(self, client, path):
        response = await client.get(path)
        assert response.status_code == 404

    async def test_custom_serve_path(self, tmp_path, png_bytes):
        settings = HostSettings(upload_dir=tmp_path, serve_path="media/")
        app = create_app(settings)
        (tmp_path / "abcdef.png").write_bytes(png_bytes)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
            upload = await c.post("/upload", files={"file": ("x.png", png_bytes, "image/png")})
            assert upload.headers["location"].startswith("/media/")
            assert (await c.get("/media/abcdef.png")).status_code == 200
            assert (await c.get("/i/abcdef.png")).status_code == 404


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_index_page_has_upload_form(client, settings):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert 'enctype="multipart/form-data"' in response.text
    assert 'name="file"' in response.text
    assert f"{settings.static_path}/style.css" in response.text
    assert "$" not in response.text.split("<script>")[0]


@pytest.mark.asyncio
async def test_static_assets(client):
    response = await client.get("/static/style.css")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/css")


@pytest.mark.asyncio
async def test_operation_ids_are_unique(app):
    schema = app.openapi()
    op_ids = [op["operationId"] for item in schema["paths"].values() for op in item.values()]
    assert len(op_ids) == len(set(op_ids))
