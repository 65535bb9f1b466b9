"""
Auth dependencies for protected FastAPI routes.

- `require_public`: read-tier routes and public submissions
- `require_admin`: every write to curated content and every admin read
"""

from __future__ import annotations

from fastapi import Depends, Header

from core.config import Settings, get_settings
from core.errors import AuthorizationError

from . import security


async def get_credentials(
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None, alias=security.API_KEY_HEADER),
    x_admin_secret: str | None = Header(default=None, alias=security.ADMIN_SECRET_HEADER),
) -> list[str]:
    return security.request_credentials(
        authorization=authorization,
        api_key=x_api_key,
        admin_secret=x_admin_secret,
    )


async def require_public(
    credentials: list[str] = Depends(get_credentials),
    settings: Settings = Depends(get_settings),
) -> None:
    if not security.is_public_allowed(settings, credentials):
        raise AuthorizationError("Unauthorized. Valid API key required.")


async def require_admin(
    credentials: list[str] = Depends(get_credentials),
    settings: Settings = Depends(get_settings),
) -> None:
    if not security.is_admin(settings, credentials):
        raise AuthorizationError("Unauthorized. Admin access required.")
