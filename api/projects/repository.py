"""
Project persistence.
"""

from __future__ import annotations

from core.crud import TableRepository

COLUMNS = (
    "updated_at",
    "title",
    "description",
    "location",
    "lga",
    "ward",
    "status",
    "images",
)

repository = TableRepository("projects", columns=COLUMNS, order_by="created_at")


def get_repository() -> TableRepository:
    return repository
