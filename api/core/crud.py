"""
Table repository shared by every resource package.

Each feature builds one `TableRepository` for its table and exposes it to
its router through a FastAPI dependency, so routes depend on these five
operations instead of on SQL:

- list (equality filters, newest first, limit/offset, true total count)
- get by id
- insert
- partial update by id
- delete by id

Column names are checked against an allow-list before they are spliced into
SQL; values always travel as bound parameters.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from . import db
from .errors import ValidationError


@dataclass(frozen=True)
class Page:
    rows: list[dict[str, Any]]
    total: int


def update_values(payload: BaseModel) -> dict[str, Any]:
    """
    Columns explicitly set in a partial-update body. Nulls are ignored.
    """
    values = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not values:
        raise ValidationError("No fields provided to update")
    return values


def as_uuid(value: Any) -> uuid.UUID | None:
    """
    Coerce an id from the URL. Anything that is not a UUID matches no row.
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class TableRepository:
    def __init__(self, table: str, *, columns: tuple[str, ...], order_by: str = "created_at") -> None:
        self.table = table
        self.columns = frozenset(columns) | {"id", "created_at"}
        self.order_by = order_by
        self._check_columns([order_by])

    def _check_columns(self, names) -> None:
        unknown = [name for name in names if name not in self.columns]
        if unknown:
            raise ValueError(f"Unknown column(s) for {self.table}: {', '.join(sorted(unknown))}")

    def _where(self, filters: dict[str, Any] | None, *, start: int = 1) -> tuple[str, list[Any]]:
        active = {k: v for k, v in (filters or {}).items() if v is not None}
        if not active:
            return "", []
        self._check_columns(active)
        clauses = [f"{name} = ${start + i}" for i, name in enumerate(active)]
        return "WHERE " + " AND ".join(clauses), list(active.values())

    async def count(self, filters: dict[str, Any] | None = None) -> int:
        where, args = self._where(filters)
        value = await db.fetch_value(f"SELECT count(*) FROM {self.table} {where}", *args)
        return int(value or 0)

    async def list(
        self,
        *,
        filters: dict[str, Any] | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Page:
        where, args = self._where(filters)
        n = len(args)
        rows = await db.fetch_all(
            f"""
            SELECT *
            FROM {self.table}
            {where}
            ORDER BY {self.order_by} DESC, id DESC
            LIMIT ${n + 1}
            OFFSET ${n + 2}
            """,
            *args,
            limit,
            offset,
        )
        total = await self.count(filters)
        return Page(rows=rows, total=total)

    async def all(self, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """
        Every matching row, unpaginated. Only for bounded internal reads.
        """
        where, args = self._where(filters)
        return await db.fetch_all(
            f"SELECT * FROM {self.table} {where} ORDER BY {self.order_by} ASC, id ASC",
            *args,
        )

    async def get(self, row_id: Any) -> dict[str, Any] | None:
        key = as_uuid(row_id)
        if key is None:
            return None
        return await db.fetch_one(f"SELECT * FROM {self.table} WHERE id = $1", key)

    async def find_by(self, column: str, value: Any) -> dict[str, Any] | None:
        self._check_columns([column])
        return await db.fetch_one(f"SELECT * FROM {self.table} WHERE {column} = $1 LIMIT 1", value)

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        if not values:
            raise ValueError(f"insert into {self.table} called with no values.")
        self._check_columns(values)
        names = list(values)
        placeholders = ", ".join(f"${i + 1}" for i in range(len(names)))
        row = await db.fetch_one(
            f"""
            INSERT INTO {self.table} ({", ".join(names)})
            VALUES ({placeholders})
            RETURNING *
            """,
            *values.values(),
        )
        if row is None:
            raise RuntimeError(f"Failed to insert into {self.table}.")
        return row

    async def update(self, row_id: Any, values: dict[str, Any]) -> dict[str, Any] | None:
        """
        Return the updated row, or None when no row has this id.
        """
        key = as_uuid(row_id)
        if key is None:
            return None
        if not values:
            return await self.get(key)
        self._check_columns(values)
        assignments = ", ".join(f"{name} = ${i + 2}" for i, name in enumerate(values))
        return await db.fetch_one(
            f"""
            UPDATE {self.table}
            SET {assignments}
            WHERE id = $1
            RETURNING *
            """,
            key,
            *values.values(),
        )

    async def update_where(self, column: str, value: Any, values: dict[str, Any]) -> dict[str, Any] | None:
        self._check_columns([column, *values])
        assignments = ", ".join(f"{name} = ${i + 2}" for i, name in enumerate(values))
        return await db.fetch_one(
            f"""
            UPDATE {self.table}
            SET {assignments}
            WHERE {column} = $1
            RETURNING *
            """,
            value,
            *values.values(),
        )

    async def delete(self, row_id: Any) -> bool:
        """
        Delete by id. Returns False when nothing matched.
        """
        key = as_uuid(row_id)
        if key is None:
            return False
        row = await db.fetch_one(f"DELETE FROM {self.table} WHERE id = $1 RETURNING id", key)
        return row is not None

    async def first_id(self) -> Any:
        row = await db.fetch_one(f"SELECT id FROM {self.table} LIMIT 1")
        return None if row is None else row["id"]
