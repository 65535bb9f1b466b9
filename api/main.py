import asyncio
import logging
import os
import signal
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI

from complaints import router as complaints_router
from core import db
from core.config import Settings
from core.errors import register_exception_handlers
from core.logging import configure_logging
from core.middleware import install_middleware
from core.storage import StorageClient
from keepalive.service import KeepAliveService
from news import router as news_router
from newsletter import router as newsletter_router
from newsletter.mailer import Mailer
from projects import repository as projects_repository
from projects import router as projects_router
from subscribers import router as subscribers_router

logger = logging.getLogger(__name__)

UNLIMITED_PATHS = {"/", "/health", "/api/docs", "/api/docs/oauth2-redirect", "/api/openapi.json"}


def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    # Unhandled task errors end the process; uvicorn drains on SIGTERM.
    logger.critical(
        "unhandled_task_error message=%s",
        context.get("message"),
        exc_info=context.get("exception"),
    )
    os.kill(os.getpid(), signal.SIGTERM)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    asyncio.get_running_loop().set_exception_handler(_loop_exception_handler)

    await db.init_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    app.state.storage = StorageClient(
        base_url=settings.supabase_url,
        api_key=settings.service_role_key,
        bucket=settings.storage_bucket,
    )
    app.state.mailer = Mailer(settings.email)
    if not app.state.mailer.is_configured:
        logger.warning("email_not_configured newsletter sends will fail until EMAIL_USER/EMAIL_PASSWORD are set")

    keepalive = None
    if settings.keep_alive_enabled:
        keepalive = KeepAliveService(
            server_url=settings.server_url,
            db_ping=projects_repository.repository.first_id,
            interval_minutes=settings.keep_alive_interval_minutes,
            initial_delay_s=settings.keep_alive_initial_delay_s,
        )
        keepalive.start()

    logger.info(
        "startup environment=%s api_base=%s docs=/api/docs",
        settings.node_env,
        settings.api_prefix,
    )
    try:
        yield
    finally:
        if keepalive is not None:
            keepalive.stop()
        await app.state.storage.aclose()
        await db.close_pool()
        logger.info("shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(level=settings.log_level, fmt=settings.log_format)

    app = FastAPI(
        title="LPRES Admin API",
        version=settings.api_version,
        lifespan=lifespan,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
        redoc_url=None,
    )
    app.state.settings = settings

    install_middleware(app, settings)
    register_exception_handlers(app, expose_details=not settings.is_production)

    prefix = settings.api_prefix
    app.include_router(projects_router.router, prefix=prefix)
    app.include_router(news_router.router, prefix=prefix)
    app.include_router(complaints_router.router, prefix=prefix)
    app.include_router(subscribers_router.router, prefix=prefix)
    app.include_router(newsletter_router.router, prefix=prefix)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict:
        return {
            "success": True,
            "message": "LPRES Admin API is running",
            "version": settings.api_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.node_env,
        }

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "success": True,
            "message": "LPRES Admin API",
            "version": settings.api_version,
            "environment": settings.node_env,
            "docs": "/api/docs",
            "health": "/health",
            "endpoints": {
                "projects": f"{prefix}/projects",
                "news": f"{prefix}/news",
                "complaints": f"{prefix}/complaints",
                "subscribers": f"{prefix}/subscribers",
                "newsletter": f"{prefix}/newsletter",
            },
        }

    limiter = app.state.limiter
    for route in app.routes:
        if getattr(route, "path", None) in UNLIMITED_PATHS:
            limiter.exempt(route.endpoint)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
