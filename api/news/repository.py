"""
News persistence. Articles are listed by publish time, not creation time.
"""

from __future__ import annotations

from core.crud import TableRepository

COLUMNS = (
    "updated_at",
    "published_at",
    "title",
    "details",
    "event",
    "location",
    "images",
)

repository = TableRepository("news", columns=COLUMNS, order_by="published_at")


def get_repository() -> TableRepository:
    return repository
