"""
Error taxonomy and the JSON error envelope.

Services raise one of the `AppError` subclasses; the handlers registered by
`register_exception_handlers()` are the only place an error is turned into a
response:

    {"success": false, "message": "...", "errors": [{"field", "message"}]}
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(RuntimeError):
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors


class ValidationError(AppError):
    status_code = 400


class AuthorizationError(AppError):
    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class StoreError(AppError):
    # Most store failures here are constraint violations caused by the caller.
    status_code = 400


class UploadError(AppError):
    status_code = 400


class EmailServiceError(AppError):
    status_code = 500


def error_body(message: str, *, errors: list[dict[str, str]] | None = None, detail: Any = None) -> dict:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if detail is not None:
        body["error"] = detail
    return body


def _field_name(loc: tuple | list) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


def _label(field: str) -> str:
    head = field.split(".", 1)[0].replace("_", " ").strip()
    return head[:1].upper() + head[1:] if head else "Value"


def describe_violation(error: dict) -> dict[str, str]:
    """
    Turn one pydantic error dict into a `{field, message}` pair.
    """
    field = _field_name(error.get("loc") or ())
    label = _label(field)
    kind = str(error.get("type") or "")
    ctx = error.get("ctx") or {}

    if kind == "missing":
        message = f"{label} is required"
    elif kind == "string_too_short":
        message = f"{label} must be at least {ctx.get('min_length')} characters"
    elif kind == "string_too_long":
        message = f"{label} must not exceed {ctx.get('max_length')} characters"
    elif kind == "too_long":
        message = f"Maximum {ctx.get('max_length')} {field.split('.', 1)[0]} allowed"
    elif kind == "literal_error":
        message = f"{label} must be one of: {ctx.get('expected')}"
    elif kind == "value_error":
        message = str(ctx.get("error") or error.get("msg") or "Invalid value")
    elif kind.startswith("url"):
        message = f"{label} must be a valid URL"
    elif kind.startswith("datetime"):
        message = f"{label} must be a valid ISO-8601 datetime"
    elif kind == "json_invalid":
        field = "body"
        message = "Request body is not valid JSON"
    else:
        message = str(error.get("msg") or "Invalid value")

    return {"field": field, "message": message}


def register_exception_handlers(app: FastAPI, *, expose_details: bool) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("app_error path=%s status=%s message=%s", request.url.path, exc.status_code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, errors=exc.errors),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=error_body(
                "Validation failed",
                errors=[describe_violation(e) for e in exc.errors()],
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Route {request.url.path} not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "Internal server error",
                detail=str(exc) if expose_details else None,
            ),
        )
