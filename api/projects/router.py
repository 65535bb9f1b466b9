"""
Project API endpoints.

Reads are public; writes and image uploads need the admin credential.
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

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", dependencies=[Depends(auth_dependencies.require_public)])
async def list_projects(
    status: schemas.ProjectStatus | None = Query(default=None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    """
    List projects, newest first. `count` is the total matching `status`.
    """
    return await service.list_projects(repo, status=status, limit=limit, offset=offset)


@router.post("/upload", dependencies=[Depends(auth_dependencies.require_admin)])
async def upload_images(
    images: list[UploadFile] = File(...),
    storage: StorageClient = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> dict:
    urls = await uploads.upload_images(images, prefix="projects", storage=storage, settings=settings)
    return ok(urls, message="Images uploaded successfully")


@router.get("/{project_id}", dependencies=[Depends(auth_dependencies.require_public)])
async def get_project(
    project_id: str,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.get_project(repo, project_id)


@router.post("", status_code=201, dependencies=[Depends(auth_dependencies.require_admin)])
async def create_project(
    payload: schemas.ProjectCreate,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.create_project(repo, payload)


@router.put("/{project_id}", dependencies=[Depends(auth_dependencies.require_admin)])
async def update_project(
    project_id: str,
    payload: schemas.ProjectUpdate,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.update_project(repo, project_id, payload)


@router.delete("/{project_id}", dependencies=[Depends(auth_dependencies.require_admin)])
async def delete_project(
    project_id: str,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.delete_project(repo, project_id)
