"""Rate limiting adapters.

This package provides a small abstraction layer so the service can start with
an in-memory store and later migrate to Redis or another shared store without
changing the API layer.
"""

from shamba_gate.adapters.rate_limit.base import (
    AbstractRateLimitStore,
    RateLimitDecision,
    RateLimitPolicy,
    epoch_ms,
)
from shamba_gate.adapters.rate_limit.in_memory import InMemoryRateLimitStore, TrackingEntry
from shamba_gate.adapters.rate_limit.sweeper import RateLimitSweeper

__all__ = [
    "AbstractRateLimitStore",
    "InMemoryRateLimitStore",
    "RateLimitDecision",
    "RateLimitPolicy",
    "RateLimitSweeper",
    "TrackingEntry",
    "epoch_ms",
]
