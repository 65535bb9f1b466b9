"""
Newsletter request schemas.

Bodies use the admin UI's camelCase keys (`htmlContent`, `recipientType`,
`testEmail`); the snake_case names are accepted too.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.fields import EmailAddress, Url

RecipientType = Literal["all", "test"]


class SendNewsletterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: str = Field(..., min_length=1, max_length=300)
    html_content: str = Field(..., min_length=1, alias="htmlContent")
    recipient_type: RecipientType = Field(..., alias="recipientType")
    test_email: EmailAddress | None = Field(default=None, alias="testEmail")


class TemplateCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    html_content: str = Field(..., min_length=1, alias="htmlContent")
    thumbnail: Url | None = None


class TemplateUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    html_content: str | None = Field(default=None, min_length=1, alias="htmlContent")
    thumbnail: Url | None = None
