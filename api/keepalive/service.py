"""
Keep-alive pinger.

Free-tier hosts put idle instances to sleep and hosted Postgres drops idle
pooled connections. While enabled, this job periodically calls our own
`/health` route and runs a one-row read against the database.

Schedule:
- cron `minute=*/N` (N = KEEP_ALIVE_INTERVAL_MINUTES, default 14)
- one extra run KEEP_ALIVE_INITIAL_DELAY_SECONDS after startup

Each check is caught and logged on its own; a failed run never raises and
never affects the next one.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)

JOB_ID = "keepalive"
INITIAL_JOB_ID = "keepalive-initial"


class KeepAliveService:
    def __init__(
        self,
        *,
        server_url: str,
        db_ping: Callable[[], Awaitable[Any]],
        interval_minutes: int = 14,
        initial_delay_s: int = 60,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.db_ping = db_ping
        self.interval_minutes = max(1, interval_minutes)
        self.initial_delay_s = max(0, initial_delay_s)
        self.timeout_s = timeout_s
        self._transport = transport
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self._scheduler is not None:
            return None

        scheduler = AsyncIOScheduler(timezone=timezone.utc)
        if self.interval_minutes < 60:
            scheduler.add_job(
                self.perform_keepalive,
                "cron",
                minute=f"*/{self.interval_minutes}",
                id=JOB_ID,
                replace_existing=True,
                coalesce=True,
                max_instances=1,
            )
        else:
            scheduler.add_job(
                self.perform_keepalive,
                "interval",
                minutes=self.interval_minutes,
                id=JOB_ID,
                replace_existing=True,
                coalesce=True,
                max_instances=1,
            )
        scheduler.add_job(
            self.perform_keepalive,
            "date",
            run_date=datetime.now(timezone.utc) + timedelta(seconds=self.initial_delay_s),
            id=INITIAL_JOB_ID,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("keepalive_started interval_minutes=%s initial_delay_s=%s", self.interval_minutes, self.initial_delay_s)

    def stop(self) -> None:
        if self._scheduler is None:
            return None
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("keepalive_stopped")

    async def ping_server(self) -> str:
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            resp = await client.get(f"{self.server_url}/health")
        if resp.status_code != 200:
            raise RuntimeError(f"Server ping failed with status: {resp.status_code}")
        try:
            data = resp.json()
        except ValueError:
            return "OK"
        return str((data or {}).get("message") or "OK")

    async def ping_database(self) -> None:
        await self.db_ping()

    async def perform_keepalive(self) -> dict[str, bool]:
        """
        Run both checks. Returns which of them succeeded.
        """
        results = {"server": False, "database": False}

        try:
            message = await self.ping_server()
            results["server"] = True
            logger.info("keepalive_server_ok message=%s", message)
        except Exception as exc:
            logger.error("keepalive_server_failed url=%s/health error=%s", self.server_url, exc)

        try:
            await self.ping_database()
            results["database"] = True
            logger.info("keepalive_database_ok")
        except Exception as exc:
            logger.error("keepalive_database_failed error=%s", exc)

        return results
