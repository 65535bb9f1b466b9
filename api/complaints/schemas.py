"""
Complaint request schema.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from core.fields import EmailAddress


class ComplaintCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailAddress
    subject: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
