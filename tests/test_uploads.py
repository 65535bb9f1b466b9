"""
Tests for image uploads: type/size/count checks and the storage client.
"""

from __future__ import annotations

import httpx
import pytest

from core.errors import UploadError
from core.storage import StorageClient
from core.uploads import _safe_filename

from conftest import STORAGE_URL

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _files(*names: str, content_type: str = "image/png", data: bytes = PNG) -> list:
    return [("images", (name, data, content_type)) for name in names]


@pytest.mark.parametrize("resource", ["projects", "news"])
def test_upload_returns_public_urls_in_order(client, admin_headers, stored_objects, resource):
    resp = client.post(f"/api/v1/{resource}/upload", files=_files("a.png", "b.png"), headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Images uploaded successfully"
    urls = body["data"]
    assert len(urls) == 2
    assert urls[0].startswith(f"{STORAGE_URL}/storage/v1/object/public/images/{resource}/")
    assert urls[0].endswith("-a.png")
    assert urls[1].endswith("-b.png")
    assert {o["upsert"] for o in stored_objects} == {"false"}
    assert all(o["path"].startswith(f"/storage/v1/object/images/{resource}/") for o in stored_objects)


def test_upload_requires_admin(client, stored_objects):
    resp = client.post("/api/v1/projects/upload", files=_files("a.png"))

    assert resp.status_code == 401
    assert stored_objects == []


def test_wrong_type_rejects_whole_request(client, admin_headers, stored_objects):
    files = _files("a.png") + _files("notes.pdf", content_type="application/pdf")

    resp = client.post("/api/v1/projects/upload", files=files, headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json()["message"].startswith("Invalid file type. Allowed types: image/jpeg")
    assert stored_objects == []


def test_oversized_file_is_rejected(app, client, admin_headers, stored_objects):
    limit = app.state.settings.max_file_size
    resp = client.post(
        "/api/v1/projects/upload",
        files=_files("big.png", data=b"\x00" * (limit + 1)),
        headers=admin_headers,
    )

    assert resp.status_code == 400
    assert resp.json()["message"].startswith("File too large")
    assert stored_objects == []


def test_more_than_six_files_is_rejected(client, admin_headers, stored_objects):
    names = [f"{i}.png" for i in range(7)]

    resp = client.post("/api/v1/projects/upload", files=_files(*names), headers=admin_headers)

    assert resp.status_code == 400
    assert stored_objects == []


def test_storage_error_message_is_surfaced(app, client, admin_headers):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"statusCode": "409", "error": "Duplicate", "message": "The resource already exists"})

    app.state.storage = StorageClient(
        base_url=STORAGE_URL,
        api_key="k",
        bucket="images",
        transport=httpx.MockTransport(handler),
    )

    resp = client.post("/api/v1/projects/upload", files=_files("a.png"), headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "The resource already exists"


@pytest.mark.asyncio
async def test_storage_client_sends_service_credentials():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("authorization")
        seen["apikey"] = request.headers.get("apikey")
        seen["content_type"] = request.headers.get("content-type")
        return httpx.Response(200, json={})

    storage = StorageClient(base_url=STORAGE_URL + "/", api_key="svc", bucket="media", transport=httpx.MockTransport(handler))
    try:
        url = await storage.upload("news/1-photo one.png", b"data", content_type="image/png")
    finally:
        await storage.aclose()

    assert url == f"{STORAGE_URL}/storage/v1/object/public/media/news/1-photo%20one.png"
    assert seen == {"auth": "Bearer svc", "apikey": "svc", "content_type": "image/png"}


@pytest.mark.asyncio
async def test_unconfigured_storage_fails_with_500():
    storage = StorageClient(base_url="", api_key="", bucket="images")
    try:
        with pytest.raises(UploadError) as excinfo:
            await storage.upload("projects/a.png", b"x", content_type="image/png")
    finally:
        await storage.aclose()

    assert excinfo.value.status_code == 500


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("photo.png", "photo.png"), ("../../etc/passwd", "passwd"), ("C:\\Users\\me\\pic.jpg", "pic.jpg"), ("", "upload")],
)
def test_safe_filename(raw, expected):
    assert _safe_filename(raw) == expected
