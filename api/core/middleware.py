"""
Cross-cutting request pipeline: security headers, CORS, body size ceilings,
request logging and per-client rate limiting.

`install_middleware()` adds them in inner-to-outer order, so CORS and the
security headers also wrap 413/429 responses.

Body ceilings:
- JSON, url-encoded and other bodies: `Settings.max_body_bytes` (10 MiB)
- multipart uploads: every allowed file at full size plus form overhead

Bytes are counted as they are received, so a chunked body without a
`Content-Length` header is held to the same ceiling.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .config import Settings
from .errors import error_body

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' cdn.jsdelivr.net 'unsafe-inline'; "
        "style-src 'self' cdn.jsdelivr.net 'unsafe-inline'; "
        "img-src 'self' data: https:; "
        "font-src 'self' https: data:; "
        "object-src 'none'; "
        "frame-ancestors 'self'"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
}


def build_limiter(settings: Settings) -> Limiter:
    # Application limits share one counter per client across every route.
    return Limiter(
        key_func=get_remote_address,
        application_limits=[settings.rate_limit],
        strategy="moving-window",
        headers_enabled=True,
    )


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # SlowAPIMiddleware calls this synchronously.
    logger.warning("rate_limited ip=%s path=%s limit=%s", get_remote_address(request), request.url.path, exc.detail)
    response = JSONResponse(
        status_code=429,
        content=error_body("Too many requests from this IP, please try again later."),
    )
    # Same header injection slowapi's own `_rate_limit_exceeded_handler` does;
    # `_inject_headers` is private, hence the slowapi<0.2 pin in pyproject.toml.
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


class BodyTooLarge(HTTPException):
    def __init__(self, limit: int) -> None:
        super().__init__(status_code=413, detail=f"Request body too large. Max is {limit} bytes.")


def body_limit(settings: Settings, content_type: str | None) -> int:
    if (content_type or "").lower().startswith("multipart/form-data"):
        return max(settings.max_multipart_bytes, settings.max_body_bytes)
    return settings.max_body_bytes


class BodySizeLimitMiddleware:
    """
    Rejects request bodies over `body_limit()` with a 413 envelope.

    A declared Content-Length over the limit is refused before the app runs.
    Otherwise bytes are counted as the app reads them, and `BodyTooLarge`
    surfaces through the regular HTTPException handler.
    """

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        self.app = app
        self.settings = settings

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        limit = body_limit(self.settings, headers.get("content-type"))

        declared = headers.get("content-length", "")
        if declared.isdigit() and int(declared) > limit:
            await self._reject(scope, receive, send, BodyTooLarge(limit))
            return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    raise BodyTooLarge(limit)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except BodyTooLarge as exc:
            if response_started:
                raise
            await self._reject(scope, receive, send, exc)

    @staticmethod
    async def _reject(scope: Scope, receive: Receive, send: Send, exc: BodyTooLarge) -> None:
        logger.warning("body_too_large path=%s detail=%s", scope.get("path", ""), exc.detail)
        response = JSONResponse(status_code=exc.status_code, content=error_body(exc.detail))
        await response(scope, receive, send)


def install_middleware(app: FastAPI, settings: Settings) -> None:
    app.state.limiter = build_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, settings=settings)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        logger.info(
            "method=%s path=%s status=%d duration_ms=%.1f ip=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            get_remote_address(request),
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 1),
                "client_ip": get_remote_address(request),
            },
        )
        return response

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    origins = list(settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
