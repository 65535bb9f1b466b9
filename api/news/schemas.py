"""
News request schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from core.fields import ImageList


class NewsCreate(BaseModel):
    title: str = Field(..., min_length=10, max_length=200)
    details: str = Field(..., min_length=20, max_length=10000)
    event: str = Field(..., min_length=10, max_length=200)
    location: str = Field(..., min_length=5, max_length=200)
    published_at: datetime | None = None
    images: ImageList = Field(default_factory=list)


class NewsUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=10, max_length=200)
    details: str | None = Field(default=None, min_length=20, max_length=10000)
    event: str | None = Field(default=None, min_length=10, max_length=200)
    location: str | None = Field(default=None, min_length=5, max_length=200)
    published_at: datetime | None = None
    images: ImageList | None = None
