"""
News API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, UploadFile

from auth import dependencies as auth_dependencies
from core import uploads
from core.config import Settings, get_settings
from core.crud import TableRepository
from core.responses import ok
from core.storage import StorageClient, get_storage

from . import repository, schemas, service

router = APIRouter(prefix="/news", tags=["news"])


@router.get("", dependencies=[Depends(auth_dependencies.require_public)])
async def list_news(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.list_news(repo, limit=limit, offset=offset)


@router.post("/upload", dependencies=[Depends(auth_dependencies.require_admin)])
async def upload_images(
    images: list[UploadFile] = File(...),
    storage: StorageClient = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> dict:
    urls = await uploads.upload_images(images, prefix="news", storage=storage, settings=settings)
    return ok(urls, message="Images uploaded successfully")


@router.get("/{news_id}", dependencies=[Depends(auth_dependencies.require_public)])
async def get_news(
    news_id: str,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.get_news(repo, news_id)


@router.post("", status_code=201, dependencies=[Depends(auth_dependencies.require_admin)])
async def create_news(
    payload: schemas.NewsCreate,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.create_news(repo, payload)


@router.put("/{news_id}", dependencies=[Depends(auth_dependencies.require_admin)])
async def update_news(
    news_id: str,
    payload: schemas.NewsUpdate,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.update_news(repo, news_id, payload)


@router.delete("/{news_id}", dependencies=[Depends(auth_dependencies.require_admin)])
async def delete_news(
    news_id: str,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.delete_news(repo, news_id)
