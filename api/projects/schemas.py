"""
Project request schemas.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from core.fields import ImageList

ProjectStatus = Literal["in progress", "completed"]


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=10, max_length=200)
    # Rich-text HTML from the admin editor, stored as-is.
    description: str = Field(..., min_length=20, max_length=10000)
    location: str = Field(..., min_length=5, max_length=200)
    lga: str | None = Field(default=None, max_length=100)
    ward: str | None = Field(default=None, max_length=100)
    status: ProjectStatus = "in progress"
    images: ImageList = Field(default_factory=list)


class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=10, max_length=200)
    description: str | None = Field(default=None, min_length=20, max_length=10000)
    location: str | None = Field(default=None, min_length=5, max_length=200)
    lga: str | None = Field(default=None, max_length=100)
    ward: str | None = Field(default=None, max_length=100)
    status: ProjectStatus | None = None
    images: ImageList | None = None
