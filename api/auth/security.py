"""
Shared-secret credential checks.

There is no per-user identity: a request is authorized when one of the
credentials it carries equals one of the configured secrets. Comparison is
constant-time; empty secrets never match.
"""

from __future__ import annotations

import secrets
from typing import Iterable

from core.config import Settings

API_KEY_HEADER = "x-api-key"
ADMIN_SECRET_HEADER = "x-admin-secret"


def extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    parts = raw.split(" ", 1)
    if len(parts) != 2 or parts[0].strip().lower() != "bearer":
        return ""
    return parts[1].strip()


def request_credentials(
    *,
    authorization: str | None,
    api_key: str | None,
    admin_secret: str | None,
) -> list[str]:
    """
    Every non-empty credential the request carries, in header priority order.
    """
    candidates = [extract_bearer_token(authorization), (api_key or "").strip(), (admin_secret or "").strip()]
    return [c for c in candidates if c]


def matches_any(credentials: Iterable[str], allowed: Iterable[str]) -> bool:
    secrets_list = [s.encode("utf-8") for s in allowed if s]
    matched = False
    for credential in credentials:
        raw = credential.encode("utf-8")
        for secret in secrets_list:
            # Keep scanning after a hit so timing does not depend on which secret matched.
            matched |= secrets.compare_digest(raw, secret)
    return matched


def admin_secrets(settings: Settings) -> tuple[str, ...]:
    return tuple(s for s in (settings.service_role_key, settings.admin_secret_key) if s)


def public_secrets(settings: Settings) -> tuple[str, ...]:
    return tuple(s for s in (settings.anon_key, *admin_secrets(settings)) if s)


def is_admin(settings: Settings, credentials: list[str]) -> bool:
    return matches_any(credentials, admin_secrets(settings))


def is_public_allowed(settings: Settings, credentials: list[str]) -> bool:
    if settings.public_access_mode == "open":
        return True
    return matches_any(credentials, public_secrets(settings))
