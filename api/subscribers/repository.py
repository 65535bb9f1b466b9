"""
Newsletter subscriber persistence.

The table enforces `email` uniqueness; a subscriber row is never deleted
through the API, only flagged in or out.
"""

from __future__ import annotations

from typing import Any

from core.crud import TableRepository


class SubscriberRepository(TableRepository):
    async def get_by_email(self, email: str) -> dict[str, Any] | None:
        return await self.find_by("email", email)

    async def set_subscribed(self, email: str, subscribed: bool) -> dict[str, Any] | None:
        return await self.update_where("email", email, {"subscribed": subscribed})

    async def subscribed_emails(self) -> list[str]:
        rows = await self.all({"subscribed": True})
        return [str(row["email"]) for row in rows]


repository = SubscriberRepository("newsletter_subscribers", columns=("email", "subscribed"))


def get_repository() -> SubscriberRepository:
    return repository
