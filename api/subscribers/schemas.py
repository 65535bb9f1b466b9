"""
Subscriber request schemas.
"""

from __future__ import annotations

from pydantic import BaseModel

from core.fields import EmailAddress


class SubscribeRequest(BaseModel):
    email: EmailAddress


class UnsubscribeRequest(BaseModel):
    email: EmailAddress
