"""
Project business logic.
"""

from __future__ import annotations

import logging

from core.crud import TableRepository, update_values
from core.errors import NotFoundError
from core.responses import ok

from . import schemas

logger = logging.getLogger(__name__)


async def list_projects(
    repo: TableRepository,
    *,
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> dict:
    page = await repo.list(filters={"status": status}, limit=limit, offset=offset)
    return ok(page.rows, count=page.total)


async def get_project(repo: TableRepository, project_id: str) -> dict:
    row = await repo.get(project_id)
    if row is None:
        raise NotFoundError("Project not found")
    return ok(row)


async def create_project(repo: TableRepository, payload: schemas.ProjectCreate) -> dict:
    values = payload.model_dump(exclude_none=True)
    row = await repo.insert(values)
    logger.info("project_created id=%s", row["id"])
    return ok(row, message="Project created successfully")


async def update_project(repo: TableRepository, project_id: str, payload: schemas.ProjectUpdate) -> dict:
    row = await repo.update(project_id, update_values(payload))
    if row is None:
        raise NotFoundError("Project not found")
    return ok(row, message="Project updated successfully")


async def delete_project(repo: TableRepository, project_id: str) -> dict:
    deleted = await repo.delete(project_id)
    logger.info("project_deleted id=%s existed=%s", project_id, deleted)
    return ok(message="Project deleted successfully")
