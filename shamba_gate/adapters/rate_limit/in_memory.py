"""In-memory fixed-window rate limit store.

Notes:
- Per-process only: running multiple workers or instances multiplies the
  effective limit.
- Thread-safe: a lock guards the read-check-increment-write sequence.
- Windows start at the first request of an identifier (not aligned to the
  clock), so up to 2x ``max_requests`` may pass around a window boundary.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable

from shamba_gate.adapters.rate_limit.base import (
    AbstractRateLimitStore,
    RateLimitDecision,
    RateLimitPolicy,
    epoch_ms,
)
from shamba_gate.adapters.rate_limit.sweeper import RateLimitSweeper

logger = logging.getLogger(__name__)


@dataclass
class TrackingEntry:
    count: int
    reset_time: int


class InMemoryRateLimitStore(AbstractRateLimitStore):
    """Rate limit store keeping one fixed window per identifier.

    The store owns its entry map and, optionally, the background sweeper that
    evicts expired entries. Create one store per application (or per test)
    and inject it where it is needed.

    Important:
        Entries live in process memory. Restarting the process forgets every
        window, and separate instances never share budgets.
    """

    def __init__(self, *, clock: Callable[[], int] = epoch_ms) -> None:
        """Initialize an empty store.

        Args:
            clock: Time source returning UNIX epoch milliseconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, TrackingEntry] = {}
        self._sweeper: RateLimitSweeper | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryRateLimitStore(entries={len(self)})"

    def check(self, identifier: str, policy: RateLimitPolicy) -> RateLimitDecision:
        """Count one request for the identifier and decide admission.

        Args:
            identifier: Namespaced caller key.
            policy: Budget to enforce.

        Returns:
            RateLimitDecision with admission and quota metadata.

        Raises:
            ValueError: If identifier is empty.
        """
        if not identifier:
            raise ValueError("identifier must be a non-empty string")

        with self._lock:
            now = self._clock()
            entry = self._entries.get(identifier)

            if entry is None or entry.reset_time <= now:
                reset_time = now + policy.window_ms
                self._entries[identifier] = TrackingEntry(count=1, reset_time=reset_time)
                return RateLimitDecision(
                    admitted=True,
                    remaining=policy.max_requests - 1,
                    reset_time=reset_time,
                )

            # Stop counting once the threshold has been crossed
            if entry.count <= policy.max_requests:
                entry.count += 1

            if entry.count > policy.max_requests:
                return RateLimitDecision(
                    admitted=False,
                    remaining=0,
                    reset_time=entry.reset_time,
                )

            return RateLimitDecision(
                admitted=True,
                remaining=policy.max_requests - entry.count,
                reset_time=entry.reset_time,
            )

    def sweep(self, now: int | None = None) -> int:
        """Remove entries whose window ended strictly before ``now``.

        Args:
            now: Reference time in epoch ms; defaults to the store clock.

        Returns:
            Number of evicted entries.
        """
        with self._lock:
            if now is None:
                now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.reset_time < now]
            for key in expired:
                del self._entries[key]
            remaining = len(self._entries)

        logger.debug(
            "rate_limit.sweep",
            extra={"evicted": len(expired), "entries": remaining},
        )
        return len(expired)

    def get_entry(self, identifier: str) -> TrackingEntry | None:
        """Return a copy of the entry tracked for identifier, if any."""
        with self._lock:
            entry = self._entries.get(identifier)
            return replace(entry) if entry is not None else None

    def clear(self) -> None:
        """Forget every tracked window."""
        with self._lock:
            self._entries.clear()

    def start_sweeper(self, interval_seconds: float = 300) -> RateLimitSweeper:
        """Start the periodic eviction task on the running event loop.

        Calling it again while a sweeper runs returns the existing one.
        """
        if self._sweeper is None or not self._sweeper.running:
            self._sweeper = RateLimitSweeper(self, interval_seconds=interval_seconds)
            self._sweeper.start()
        return self._sweeper

    async def stop_sweeper(self) -> None:
        """Cancel the eviction task, if one was started."""
        if self._sweeper is not None:
            await self._sweeper.stop()
            self._sweeper = None
