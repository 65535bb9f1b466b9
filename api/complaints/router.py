"""
Complaint API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.crud import TableRepository

from . import repository, schemas, service

router = APIRouter(prefix="/complaints", tags=["complaints"])


@router.get("", dependencies=[Depends(auth_dependencies.require_admin)])
async def list_complaints(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.list_complaints(repo, limit=limit, offset=offset)


@router.get("/{complaint_id}", dependencies=[Depends(auth_dependencies.require_admin)])
async def get_complaint(
    complaint_id: str,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.get_complaint(repo, complaint_id)


@router.post("", status_code=201, dependencies=[Depends(auth_dependencies.require_public)])
async def submit_complaint(
    payload: schemas.ComplaintCreate,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.submit_complaint(repo, payload)


@router.delete("/{complaint_id}", dependencies=[Depends(auth_dependencies.require_admin)])
async def delete_complaint(
    complaint_id: str,
    repo: TableRepository = Depends(repository.get_repository),
) -> dict:
    return await service.delete_complaint(repo, complaint_id)
