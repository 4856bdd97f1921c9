"""
WellNest Backend — Database Keep-Alive
=======================================

What:  Background task that pings the database every N seconds.
Why:   Free-tier managed databases suspend idle instances; a periodic
       `SELECT 1` keeps the first real request of the morning from timing out.
How:   An asyncio task started in the lifespan and cancelled at shutdown.
       A failed ping is logged and the loop carries on; the task never
       takes the process down.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class DatabaseKeepAlive:
    def __init__(self, ping: Callable[[], Awaitable[None]], interval_seconds: int):
        self._ping = ping
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self.failures = 0
        self.successes = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Returns False (and starts nothing) when the interval is 0."""
        if self.interval_seconds <= 0:
            logger.info("Database keep-alive disabled")
            return False
        if self.running:
            return True
        self._task = asyncio.create_task(self._run(), name="db-keepalive")
        logger.info("Database keep-alive started (every %ds)", self.interval_seconds)
        return True

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Database keep-alive stopped")

    async def ping_once(self) -> bool:
        try:
            await self._ping()
        except Exception as e:
            self.failures += 1
            logger.warning("Keep-alive ping failed: %s", e)
            return False
        self.successes += 1
        logger.debug("Keep-alive ping ok")
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.ping_once()
