"""
Complaint business logic.

Complaints are a one-way channel: anyone may submit, only admins read or
delete, nobody edits.
"""

from __future__ import annotations

import logging

from core.crud import TableRepository
from core.errors import NotFoundError
from core.responses import ok

from . import schemas

logger = logging.getLogger(__name__)


async def list_complaints(repo: TableRepository, *, limit: int = 50, offset: int = 0) -> dict:
    page = await repo.list(limit=limit, offset=offset)
    return ok(page.rows, count=page.total)


async def get_complaint(repo: TableRepository, complaint_id: str) -> dict:
    row = await repo.get(complaint_id)
    if row is None:
        raise NotFoundError("Complaint not found")
    return ok(row)


async def submit_complaint(repo: TableRepository, payload: schemas.ComplaintCreate) -> dict:
    row = await repo.insert(payload.model_dump())
    logger.info("complaint_submitted id=%s", row["id"])
    return ok(row, message="Complaint submitted successfully. We will review it shortly.")


async def delete_complaint(repo: TableRepository, complaint_id: str) -> dict:
    deleted = await repo.delete(complaint_id)
    logger.info("complaint_deleted id=%s existed=%s", complaint_id, deleted)
    return ok(message="Complaint deleted successfully")
