"""Pydantic schemas for rate limit endpoints."""

from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, Field


class PolicyInfo(BaseModel):
    """One named request budget."""

    max_requests: int = Field(..., ge=1, description="Maximum admitted requests per window.")
    window_ms: int = Field(..., ge=1, description="Window duration in milliseconds.")


class PolicyCatalogResponse(BaseModel):
    """All policies that endpoints can be protected with."""

    policies: Dict[str, PolicyInfo] = Field(
        ..., description="Policies keyed by name (AUTH, AI, API, EXPENSIVE)."
    )


class RateLimitCheckResponse(BaseModel):
    """Admission granted for one request."""

    admitted: Literal[True] = True
    policy: str = Field(..., description="Name of the enforced policy.")
    identifier_type: Literal["user", "ip"] = Field(
        ..., description="Whether the caller was keyed by user id or client address."
    )
    max_requests: int = Field(..., description="Budget of the enforced policy.")
    window_ms: int = Field(..., description="Window of the enforced policy, in milliseconds.")
    remaining: int = Field(..., ge=0, description="Requests left in the current window.")
    reset_time: int = Field(
        ..., description="UNIX epoch milliseconds when the current window resets."
    )


class RateLimitErrorResponse(BaseModel):
    """Body of a 429 response."""

    error: Literal["Too Many Requests"] = "Too Many Requests"
    message: str = Field(..., description="Human-readable explanation.")
    retryAfter: int = Field(..., ge=0, description="Seconds until the window resets.")
