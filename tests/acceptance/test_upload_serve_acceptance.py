"""
End-to-end: full app with lifespan through TestClient, upload then fetch.
"""

import re

import httpx
import pytest
from fastapi.testclient import TestClient

from imghost.api.fastapi import create_app
from imghost.app.settings import HostSettings

JPEG = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + bytes(range(256)) * 8


@pytest.fixture
def remote():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/cat.webp":
            return httpx.Response(200, content=b"RIFF\x10\x00\x00\x00WEBPVP8 " + b"\x00" * 64)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def client(tmp_path, remote):
    settings = HostSettings(upload_dir=tmp_path / "store")
    with TestClient(create_app(settings, http_transport=remote)) as c:
        yield c


def test_photo_example(client, tmp_path):
    """A JPEG named photo.PNG is stored as <6 letters>.png and served back as image/png."""
    r = client.post("/upload", files={"file": ("photo.PNG", JPEG, "image/png")}, follow_redirects=False)
    assert r.status_code == 303
    name = r.headers["location"].rsplit("/", 1)[-1]
    assert re.fullmatch(r"[A-Za-z]{6}\.png", name)
    assert (tmp_path / "store" / name).read_bytes() == JPEG

    served = client.get(f"/i/{name}")
    assert served.status_code == 200
    assert served.headers["content-type"] == "image/png"
    assert served.content == JPEG


def test_redirect_is_followed_to_the_file(client):
    r = client.post("/upload", files={"file": ("pic.jpg", JPEG, "image/jpeg")})
    assert r.status_code == 200
    assert r.content == JPEG
    assert r.headers["content-type"] == "image/jpeg"


def test_remote_upload_round_trip(client):
    r = client.post("/url", json={"url": "https://img.example.org/cat.webp"}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"].endswith(".webp")

    served = client.get(r.headers["location"])
    assert served.headers["content-type"] == "image/webp"
    assert served.content.startswith(b"RIFF")


def test_rejected_upload_leaves_directory_empty(client, tmp_path):
    r = client.post("/upload", files={"file": ("notes.png", b"hello there\n", "image/png")})
    assert r.status_code == 400
    assert list((tmp_path / "store").iterdir()) == []


def test_never_uploaded_is_404(client):
    assert client.get("/i/AbCdEf.png").status_code == 404
    assert client.get("/AbCdEf.png").status_code == 404
