"""Named rate limit policies, one per endpoint class.

Auth and expensive operations get strict budgets; general API traffic gets a
generous one.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from shamba_gate.adapters.rate_limit.base import RateLimitPolicy
from shamba_gate.core.errors import ValidationAppError

# Login, signup, password reset (brute force protection)
AUTH = RateLimitPolicy(max_requests=5, window_ms=15 * 60 * 1000)

# AI chat and insights (provider cost control)
AI = RateLimitPolicy(max_requests=20, window_ms=60 * 1000)

# Listings, weather, posts
API = RateLimitPolicy(max_requests=60, window_ms=60 * 1000)

# Exports, bulk and image-heavy operations
EXPENSIVE = RateLimitPolicy(max_requests=10, window_ms=60 * 1000)

RATE_LIMITS: Mapping[str, RateLimitPolicy] = MappingProxyType(
    {
        "AUTH": AUTH,
        "AI": AI,
        "API": API,
        "EXPENSIVE": EXPENSIVE,
    }
)


def get_policy(name: str) -> RateLimitPolicy:
    """Resolve a policy by name, case-insensitively.

    Raises:
        ValidationAppError: If no policy has that name.
    """
    policy = RATE_LIMITS.get(name.upper())
    if policy is None:
        raise ValidationAppError(
            code="unknown_rate_limit_policy",
            message=f"Unknown rate limit policy: {name}",
            details={"policy": name, "available_policies": sorted(RATE_LIMITS)},
        )
    return policy


def policy_scope(policy: RateLimitPolicy) -> str:
    """Budget namespace for a policy.

    Catalog policies are named after their catalog entry; ad-hoc policies by
    their budget, e.g. ``"3/60000ms"``.

    Examples:
        >>> policy_scope(AUTH)
        'AUTH'
        >>> policy_scope(RateLimitPolicy(max_requests=3, window_ms=60_000))
        '3/60000ms'
    """
    for name, candidate in RATE_LIMITS.items():
        if candidate == policy:
            return name
    return f"{policy.max_requests}/{policy.window_ms}ms"
