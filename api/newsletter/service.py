"""
Newsletter orchestration.

Send flow:
1) Verify the SMTP channel (fail fast with 500 if it is down or unconfigured)
2) Wrap the caller's HTML in the branded layout
3) `test`: send one `[TEST]` copy, record nothing
4) `all`: batch-send to every subscribed address, then log one campaign row
"""

from __future__ import annotations

import logging

from core.config import Settings
from core.crud import TableRepository, update_values
from core.errors import EmailServiceError, NotFoundError, ValidationError
from core.responses import ok
from subscribers.repository import SubscriberRepository

from . import layout, schemas
from .mailer import Mailer

logger = logging.getLogger(__name__)

ERRORS_IN_RESPONSE = 5


def campaign_status(success: int, failed: int) -> str:
    if failed == 0:
        return "completed"
    if success == 0:
        return "failed"
    return "partial"


async def send_newsletter(
    payload: schemas.SendNewsletterRequest,
    *,
    mailer: Mailer,
    subscribers: SubscriberRepository,
    campaigns: TableRepository,
    settings: Settings,
) -> dict:
    if not await mailer.verify():
        raise EmailServiceError("Email service not configured properly. Please check your email settings.")

    wrapped_html = layout.wrap_newsletter(
        payload.html_content,
        unsubscribe_url=settings.newsletter_unsubscribe_url or None,
    )

    if payload.recipient_type == "test":
        if not payload.test_email:
            raise ValidationError(
                "Test email address is required for test sends",
                errors=[{"field": "testEmail", "message": "Test email address is required for test sends"}],
            )
        await mailer.send(to=payload.test_email, subject=f"[TEST] {payload.subject}", html=wrapped_html)
        return ok({"recipient": payload.test_email}, message="Test email sent successfully")

    emails = await subscribers.subscribed_emails()
    if not emails:
        raise NotFoundError("No active subscribers found")

    results = await mailer.send_bulk(
        emails,
        subject=payload.subject,
        html=wrapped_html,
        batch_size=settings.newsletter_batch_size,
        delay_s=settings.newsletter_batch_delay_s,
    )

    status = campaign_status(results.success, results.failed)
    campaign = await campaigns.insert(
        {
            "subject": payload.subject,
            "html_content": payload.html_content,
            "sent_to_count": results.success,
            "failed_count": results.failed,
            "status": status,
        }
    )
    logger.info(
        "campaign_recorded id=%s status=%s sent=%s failed=%s",
        campaign["id"],
        status,
        results.success,
        results.failed,
    )

    data = {
        "campaignId": campaign["id"],
        "status": status,
        "totalSubscribers": len(emails),
        "successfullySent": results.success,
        "failed": results.failed,
    }
    if results.errors:
        data["errors"] = results.errors[:ERRORS_IN_RESPONSE]
    return ok(data, message="Newsletter sent successfully")


async def list_templates(repo: TableRepository, *, limit: int = 50, offset: int = 0) -> dict:
    page = await repo.list(limit=limit, offset=offset)
    return ok(page.rows, count=page.total)


async def get_template(repo: TableRepository, template_id: str) -> dict:
    row = await repo.get(template_id)
    if row is None:
        raise NotFoundError("Template not found")
    return ok(row)


async def create_template(repo: TableRepository, payload: schemas.TemplateCreate) -> dict:
    row = await repo.insert(payload.model_dump(exclude_none=True))
    logger.info("template_created id=%s", row["id"])
    return ok(row, message="Template created successfully")


async def update_template(repo: TableRepository, template_id: str, payload: schemas.TemplateUpdate) -> dict:
    row = await repo.update(template_id, update_values(payload))
    if row is None:
        raise NotFoundError("Template not found")
    return ok(row, message="Template updated successfully")


async def delete_template(repo: TableRepository, template_id: str) -> dict:
    deleted = await repo.delete(template_id)
    logger.info("template_deleted id=%s existed=%s", template_id, deleted)
    return ok(message="Template deleted successfully")


async def list_campaigns(repo: TableRepository, *, limit: int = 50, offset: int = 0) -> dict:
    page = await repo.list(limit=limit, offset=offset)
    return ok(page.rows, count=page.total)
