"""
Image upload handling shared by the project and news routers.

Every file in a request is checked (type and size) before anything is
stored, so a rejected request leaves the bucket untouched. Accepted files are
then uploaded independently: one failed upload does not remove files that
were already stored.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import PurePosixPath

from fastapi import UploadFile

from .config import Settings
from .errors import UploadError
from .storage import StorageClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingUpload:
    filename: str
    content_type: str
    data: bytes


def _safe_filename(filename: str | None) -> str:
    name = PurePosixPath((filename or "").replace("\\", "/")).name.strip()
    return name or "upload"


def validate_upload(file: UploadFile, *, allowed_types: tuple[str, ...]) -> str:
    """
    Return the declared MIME type if this upload is acceptable.
    """
    content_type = (file.content_type or "").strip().lower()
    if content_type not in allowed_types:
        raise UploadError(f"Invalid file type. Allowed types: {', '.join(allowed_types)}")
    return content_type


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise UploadError(f"File too large. Max is {max_bytes} bytes.")

    return bytes(buf)


async def collect_uploads(files: list[UploadFile], *, settings: Settings) -> list[PendingUpload]:
    if not files:
        raise UploadError("No files provided")
    if len(files) > settings.max_files_per_upload:
        raise UploadError(f"Too many files. Maximum is {settings.max_files_per_upload}.")

    pending: list[PendingUpload] = []
    for file in files:
        content_type = validate_upload(file, allowed_types=settings.allowed_file_types)
        data = await read_upload_bytes(file, settings.max_file_size)
        pending.append(PendingUpload(filename=_safe_filename(file.filename), content_type=content_type, data=data))
    return pending


async def upload_images(
    files: list[UploadFile],
    *,
    prefix: str,
    storage: StorageClient,
    settings: Settings,
) -> list[str]:
    """
    Validate then store `files` under `{prefix}/{epoch_ms}-{filename}`.

    Returns the public URL of every stored object, in request order.
    """
    pending = await collect_uploads(files, settings=settings)

    async def _store(item: PendingUpload) -> str:
        path = f"{prefix}/{int(time.time() * 1000)}-{item.filename}"
        url = await storage.upload(path, item.data, content_type=item.content_type)
        logger.info("image_uploaded path=%s size_bytes=%s", path, len(item.data))
        return url

    return list(await asyncio.gather(*(_store(item) for item in pending)))
