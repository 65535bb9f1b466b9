"""
In-memory stand-ins for the Postgres tables and the SMTP channel.

`InMemoryTable` overrides only the row primitives of `TableRepository`, so
column allow-list checks and any higher-level repository methods (see
`FakeSubscribers`) run exactly as they do against the database.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from core.config import EmailSettings
from core.crud import Page, TableRepository, as_uuid
from newsletter.mailer import Mailer, PreparedContent
from subscribers.repository import SubscriberRepository

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryTable(TableRepository):
    def __init__(self, table: str, *, columns: tuple[str, ...], order_by: str = "created_at") -> None:
        super().__init__(table, columns=columns, order_by=order_by)
        self.rows: list[dict[str, Any]] = []
        self._tick = 0

    def _matches(self, row: dict[str, Any], filters: dict[str, Any] | None) -> bool:
        active = {k: v for k, v in (filters or {}).items() if v is not None}
        self._check_columns(active)
        return all(row.get(k) == v for k, v in active.items())

    def _ordered(self, rows: list[dict[str, Any]], *, newest_first: bool) -> list[dict[str, Any]]:
        return sorted(rows, key=lambda r: (r[self.order_by], str(r["id"])), reverse=newest_first)

    def _find(self, row_id: Any) -> dict[str, Any] | None:
        key = as_uuid(row_id)
        return next((r for r in self.rows if r["id"] == key), None)

    async def count(self, filters: dict[str, Any] | None = None) -> int:
        return sum(1 for r in self.rows if self._matches(r, filters))

    async def list(self, *, filters=None, limit: int = 50, offset: int = 0) -> Page:
        matched = self._ordered([r for r in self.rows if self._matches(r, filters)], newest_first=True)
        return Page(rows=[dict(r) for r in matched[offset : offset + limit]], total=len(matched))

    async def all(self, filters=None) -> list[dict[str, Any]]:
        matched = [r for r in self.rows if self._matches(r, filters)]
        return [dict(r) for r in self._ordered(matched, newest_first=False)]

    async def get(self, row_id: Any) -> dict[str, Any] | None:
        row = self._find(row_id)
        return dict(row) if row is not None else None

    async def find_by(self, column: str, value: Any) -> dict[str, Any] | None:
        self._check_columns([column])
        row = next((r for r in self.rows if r.get(column) == value), None)
        return dict(row) if row is not None else None

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        self._check_columns(values)
        self._tick += 1
        row = {"id": uuid.uuid4(), "created_at": EPOCH + timedelta(seconds=self._tick), **values}
        self.rows.append(row)
        return dict(row)

    async def update(self, row_id: Any, values: dict[str, Any]) -> dict[str, Any] | None:
        self._check_columns(values)
        row = self._find(row_id)
        if row is None:
            return None
        row.update(values)
        return dict(row)

    async def update_where(self, column: str, value: Any, values: dict[str, Any]) -> dict[str, Any] | None:
        self._check_columns([column, *values])
        row = next((r for r in self.rows if r.get(column) == value), None)
        if row is None:
            return None
        row.update(values)
        return dict(row)

    async def delete(self, row_id: Any) -> bool:
        row = self._find(row_id)
        if row is None:
            return False
        self.rows.remove(row)
        return True

    async def first_id(self) -> Any:
        return self.rows[0]["id"] if self.rows else None


class FakeSubscribers(InMemoryTable, SubscriberRepository):
    pass


class FakeMailer(Mailer):
    """Records messages instead of talking SMTP. Addresses in `failing` raise."""

    def __init__(self, *, verified: bool = True, failing: tuple[str, ...] = ()) -> None:
        super().__init__(EmailSettings(user="mailer@example.com", password="app-password"))
        self.verified = verified
        self.failing = set(failing)
        self.sent: list[dict[str, str]] = []

    async def verify(self) -> bool:
        return self.verified

    async def deliver(self, *, to: str, subject: str, content: PreparedContent) -> None:
        if to in self.failing:
            raise ConnectionError(f"mailbox unavailable: {to}")
        self.sent.append({"to": to, "subject": subject, "html": content.html})
