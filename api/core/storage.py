"""
Object storage client (Supabase Storage REST API) over httpx.

Used endpoints:
- POST /storage/v1/object/{bucket}/{path}         -> upload one object
- GET  /storage/v1/object/public/{bucket}/{path}  -> public URL (not called, only built)

One `StorageClient` is created in the app lifespan and shared by requests;
`httpx.AsyncClient` is safe for concurrent use.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx
from fastapi import Request

from .errors import UploadError

logger = logging.getLogger(__name__)


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise UploadError("Object storage is not configured (SUPABASE_URL is empty).", status_code=500)
    return base_url.rstrip("/")


class StorageClient:
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        bucket: str,
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.bucket = bucket
        self._client = httpx.AsyncClient(
            base_url=self.base_url or "http://storage.invalid",
            timeout=timeout_s,
            headers={"Authorization": f"Bearer {api_key}", "apikey": api_key},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def public_url(self, path: str) -> str:
        base_url = _normalize_base_url(self.base_url)
        return f"{base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    async def upload(self, path: str, data: bytes, *, content_type: str) -> str:
        """
        Store `data` at `path` (never overwriting) and return its public URL.
        """
        _normalize_base_url(self.base_url)
        try:
            resp = await self._client.post(
                f"/storage/v1/object/{self.bucket}/{quote(path)}",
                content=data,
                headers={"Content-Type": content_type, "x-upsert": "false"},
            )
        except httpx.HTTPError as exc:
            raise UploadError(f"Storage upload failed: {exc}") from exc

        if resp.status_code not in (200, 201):
            message = _error_message(resp)
            logger.warning("storage_upload_failed path=%s status=%s message=%s", path, resp.status_code, message)
            raise UploadError(message)

        return self.public_url(path)


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return f"Storage upload failed: {resp.status_code} {resp.text[:300]}"
    if isinstance(data, dict):
        for key in ("message", "error"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return f"Storage upload failed: {resp.status_code}"


def get_storage(request: Request) -> StorageClient:
    return request.app.state.storage
