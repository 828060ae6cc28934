"""Tests for the named policy catalog."""

import pytest

from shamba_gate.adapters.rate_limit.base import RateLimitPolicy
from shamba_gate.core.errors import ValidationAppError
from shamba_gate.core.policies import (
    AI,
    API,
    AUTH,
    EXPENSIVE,
    RATE_LIMITS,
    get_policy,
    policy_scope,
)


def test_catalog_values() -> None:
    assert (AUTH.max_requests, AUTH.window_ms) == (5, 900_000)
    assert (AI.max_requests, AI.window_ms) == (20, 60_000)
    assert (API.max_requests, API.window_ms) == (60, 60_000)
    assert (EXPENSIVE.max_requests, EXPENSIVE.window_ms) == (10, 60_000)


def test_catalog_mapping_is_read_only() -> None:
    assert set(RATE_LIMITS) == {"AUTH", "AI", "API", "EXPENSIVE"}
    with pytest.raises(TypeError):
        RATE_LIMITS["AUTH"] = API  # type: ignore[index]


@pytest.mark.parametrize("name", ["AI", "ai", "Ai"])
def test_get_policy_is_case_insensitive(name: str) -> None:
    assert get_policy(name) is AI


def test_get_policy_unknown_name() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        get_policy("UPLOADS")

    assert exc_info.value.code == "unknown_rate_limit_policy"
    assert exc_info.value.details["available_policies"] == ["AI", "API", "AUTH", "EXPENSIVE"]


def test_policy_scope_names_catalog_policies() -> None:
    assert policy_scope(AUTH) == "AUTH"
    assert policy_scope(RateLimitPolicy(max_requests=60, window_ms=60_000)) == "API"


def test_policy_scope_for_ad_hoc_policy_uses_budget() -> None:
    assert policy_scope(RateLimitPolicy(max_requests=3, window_ms=30_000)) == "3/30000ms"


def test_policy_scopes_are_distinct_across_catalog() -> None:
    assert len({policy_scope(policy) for policy in RATE_LIMITS.values()}) == len(RATE_LIMITS)
