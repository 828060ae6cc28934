"""Rate limiter interfaces.

Handlers depend on this abstraction (not the concrete implementation) so the
process-local store can later be swapped for a shared backend (e.g., Redis)
without touching the HTTP layer.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass


def epoch_ms() -> int:
    """Return the current wall-clock time as UNIX epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RateLimitPolicy:
    """Request budget for one endpoint class.

    Attributes:
        max_requests: Maximum admitted requests per window.
        window_ms: Window duration in milliseconds.

    Raises:
        ValueError: If either value is not a positive integer.
    """

    max_requests: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if self.window_ms < 1:
            raise ValueError("window_ms must be >= 1")


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of a rate limit check.

    Attributes:
        admitted: Whether the request may proceed.
        remaining: Requests left in the current window (0 when rejected).
        reset_time: UNIX epoch milliseconds when the current window expires.
    """

    admitted: bool
    remaining: int
    reset_time: int

    @property
    def limited(self) -> bool:
        return not self.admitted


class AbstractRateLimitStore(ABC):
    """Interface for rate limit stores."""

    @abstractmethod
    def check(self, identifier: str, policy: RateLimitPolicy) -> RateLimitDecision:
        """Count one request for ``identifier`` and decide admission.

        Args:
            identifier: Namespaced caller key (e.g., ``user:123``, ``ip:1.2.3.4``).
            policy: Budget to enforce.

        Returns:
            RateLimitDecision describing whether the request was admitted.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self, now: int | None = None) -> int:
        """Evict entries whose window expired before ``now``.

        Returns:
            Number of evicted entries.
        """
        raise NotImplementedError
