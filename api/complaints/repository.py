"""
Complaint persistence.
"""

from __future__ import annotations

from core.crud import TableRepository

COLUMNS = ("name", "email", "subject", "description")

repository = TableRepository("complaints", columns=COLUMNS, order_by="created_at")


def get_repository() -> TableRepository:
    return repository
