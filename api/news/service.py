"""
News business logic.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from core.crud import TableRepository, update_values
from core.errors import NotFoundError
from core.responses import ok

from . import schemas

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    # Naive datetimes from clients are taken as UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


async def list_news(repo: TableRepository, *, limit: int = 50, offset: int = 0) -> dict:
    page = await repo.list(limit=limit, offset=offset)
    return ok(page.rows, count=page.total)


async def get_news(repo: TableRepository, news_id: str) -> dict:
    row = await repo.get(news_id)
    if row is None:
        raise NotFoundError("News article not found")
    return ok(row)


async def create_news(repo: TableRepository, payload: schemas.NewsCreate) -> dict:
    values = payload.model_dump(exclude_none=True)
    values["published_at"] = _as_aware(payload.published_at) if payload.published_at else _utc_now()
    row = await repo.insert(values)
    logger.info("news_created id=%s", row["id"])
    return ok(row, message="News article created successfully")


async def update_news(repo: TableRepository, news_id: str, payload: schemas.NewsUpdate) -> dict:
    values = update_values(payload)
    if "published_at" in values:
        values["published_at"] = _as_aware(values["published_at"])
    row = await repo.update(news_id, values)
    if row is None:
        raise NotFoundError("News article not found")
    return ok(row, message="News article updated successfully")


async def delete_news(repo: TableRepository, news_id: str) -> dict:
    deleted = await repo.delete(news_id)
    logger.info("news_deleted id=%s existed=%s", news_id, deleted)
    return ok(message="News article deleted successfully")
