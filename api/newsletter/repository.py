"""
Newsletter template and campaign persistence.

Campaign rows are a write-once log: the API only inserts and lists them.
"""

from __future__ import annotations

from core.crud import TableRepository

TEMPLATE_COLUMNS = ("updated_at", "name", "description", "html_content", "thumbnail")
CAMPAIGN_COLUMNS = ("subject", "html_content", "sent_to_count", "failed_count", "status")

templates = TableRepository("newsletter_templates", columns=TEMPLATE_COLUMNS)
campaigns = TableRepository("newsletter_campaigns", columns=CAMPAIGN_COLUMNS)


def get_template_repository() -> TableRepository:
    return templates


def get_campaign_repository() -> TableRepository:
    return campaigns
