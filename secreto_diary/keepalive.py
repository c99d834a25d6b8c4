"""
Periodic keep-alive pings owned by the process lifecycle.

The task is started and stopped explicitly (the server does it from its
lifespan handler) rather than being tied to any client session.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class KeepAlive:
    """
    Runs `ping` once immediately and then every `interval` seconds.

    Ping failures are logged and never stop the loop.
    """

    def __init__(self, ping: Callable[[], Awaitable[object]], interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._ping = ping
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Keep-alive started, interval %ss", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Keep-alive stopped")

    async def _run(self) -> None:
        while True:
            try:
                result = await self._ping()
                logger.debug("Keep-alive ping ok: %s", result)
            except Exception:
                logger.exception("Keep-alive ping failed")
            await asyncio.sleep(self.interval)
