"""
Success envelope: `{"success": true, "message"?, "count"?, "data"?}`.
"""

from __future__ import annotations

from typing import Any

_UNSET: Any = object()


def ok(data: Any = _UNSET, *, message: str | None = None, count: int | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if count is not None:
        body["count"] = count
    if data is not _UNSET:
        body["data"] = data
    return body
