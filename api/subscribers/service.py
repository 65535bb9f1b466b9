"""
Subscription logic.

Subscribe is an upsert on the subscribed flag: a new address is inserted, a
previously unsubscribed one is flipped back on, and an active one is
rejected.
"""

from __future__ import annotations

import logging

from core.errors import NotFoundError, ValidationError
from core.responses import ok

from .repository import SubscriberRepository

logger = logging.getLogger(__name__)


async def list_subscribers(
    repo: SubscriberRepository,
    *,
    subscribed: bool | None = None,
    limit: int = 50,
    offset: int = 0,
) -> dict:
    page = await repo.list(filters={"subscribed": subscribed}, limit=limit, offset=offset)
    return ok(page.rows, count=page.total)


async def count_subscribers(repo: SubscriberRepository, *, subscribed: bool = True) -> dict:
    return ok(count=await repo.count({"subscribed": subscribed}))


async def subscribe(repo: SubscriberRepository, email: str) -> tuple[dict, bool]:
    """
    Returns (response body, created).
    """
    existing = await repo.get_by_email(email)
    if existing is not None:
        if existing.get("subscribed"):
            raise ValidationError("Email is already subscribed to the newsletter")
        row = await repo.set_subscribed(email, True)
        logger.info("subscriber_resubscribed id=%s", existing["id"])
        return ok(row, message="Successfully resubscribed to the newsletter"), False

    row = await repo.insert({"email": email, "subscribed": True})
    logger.info("subscriber_created id=%s", row["id"])
    return ok(row, message="Successfully subscribed to the newsletter"), True


async def unsubscribe(repo: SubscriberRepository, email: str) -> dict:
    row = await repo.set_subscribed(email, False)
    if row is None:
        raise NotFoundError("Email not found in our newsletter list")
    logger.info("subscriber_unsubscribed id=%s", row["id"])
    return ok(row, message="Successfully unsubscribed from the newsletter")
