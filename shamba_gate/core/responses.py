"""Standard HTTP responses for rate limited endpoints.

The 429 body and header names are a wire contract relied on by browser
clients; keep them byte-for-byte stable.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from fastapi import status
from fastapi.responses import JSONResponse

from shamba_gate.adapters.rate_limit.base import RateLimitDecision, epoch_ms

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

RATE_LIMIT_ERROR = "Too Many Requests"
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."


def format_reset_time(reset_time: int) -> str:
    """Format epoch milliseconds as ISO-8601 UTC with millisecond precision.

    Examples:
        >>> format_reset_time(0)
        '1970-01-01T00:00:00.000Z'
    """
    seconds, millis = divmod(reset_time, 1000)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"


def retry_after_seconds(reset_time: int, now: int | None = None) -> int:
    """Whole seconds until ``reset_time``, rounded up and never negative."""
    if now is None:
        now = epoch_ms()
    return max(0, math.ceil((reset_time - now) / 1000))


def rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    """Quota headers attached to admitted responses."""
    return {
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": format_reset_time(decision.reset_time),
    }


def build_rejection_response(
    remaining: int,
    reset_time: int,
    *,
    now: int | None = None,
) -> JSONResponse:
    """Build the 429 response returned when a caller is over budget.

    Args:
        remaining: Requests left in the window (0 when limited).
        reset_time: Epoch milliseconds when the window resets.
        now: Reference time in epoch ms; defaults to the wall clock.

    Returns:
        JSONResponse with status 429, the error payload and rate limit,
        Retry-After and CORS headers.
    """
    retry_after = retry_after_seconds(reset_time, now)
    headers = {
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": format_reset_time(reset_time),
        "Retry-After": str(retry_after),
        **CORS_HEADERS,
    }
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": RATE_LIMIT_ERROR,
            "message": RATE_LIMIT_MESSAGE,
            "retryAfter": retry_after,
        },
        headers=headers,
    )
