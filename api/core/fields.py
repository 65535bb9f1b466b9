"""
Reusable pydantic field types.

Values stay plain `str` after validation so they can be bound straight into
asyncpg parameters (text / text[] columns).
"""

from __future__ import annotations

from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, Field, HttpUrl, TypeAdapter

_http_url = TypeAdapter(HttpUrl)


def _check_url(value: str) -> str:
    value = value.strip()
    try:
        _http_url.validate_python(value)
    except ValueError as exc:
        raise ValueError("Invalid URL") from exc
    return value


def _check_email(value: str) -> str:
    value = value.strip()
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError("Invalid email address") from exc
    return value.lower()


Url = Annotated[str, AfterValidator(_check_url)]

EmailAddress = Annotated[str, Field(min_length=5, max_length=100), AfterValidator(_check_email)]

ImageList = Annotated[list[Url], Field(max_length=6)]
