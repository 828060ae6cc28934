"""Application-level exception types.

This module defines domain errors used across the service, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict

from shamba_gate.adapters.rate_limit.base import RateLimitDecision


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    policy: str
    available_policies: list[str]
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class RateLimitExceeded(AppError):
    """Raised by the rate limit dependency when a request is rejected.

    The exception handler renders it as the standardized 429 response.
    """

    def __init__(self, decision: RateLimitDecision) -> None:
        self.decision = decision
        super().__init__(
            code="rate_limit_exceeded",
            message="Rate limit exceeded. Please try again later.",
        )
