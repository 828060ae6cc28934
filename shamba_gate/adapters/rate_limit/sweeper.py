"""Background eviction of expired rate limit windows."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shamba_gate.adapters.rate_limit.base import AbstractRateLimitStore

logger = logging.getLogger(__name__)


class RateLimitSweeper:
    """Periodically calls ``store.sweep()`` on the running event loop.

    The sweep is housekeeping only: stores detect expired windows on access,
    so a stopped sweeper affects memory usage, never admission decisions.
    """

    def __init__(self, store: AbstractRateLimitStore, *, interval_seconds: float = 300) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._store = store
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info("rate_limit.sweeper_started", extra={"interval_s": self._interval})

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("rate_limit.sweeper_stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._store.sweep()
            except Exception:
                logger.exception("rate_limit.sweep_failed")
