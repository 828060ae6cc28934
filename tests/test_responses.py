"""Tests for the 429 wire contract and quota headers."""

import json

from shamba_gate.adapters.rate_limit.base import RateLimitDecision
from shamba_gate.core.responses import (
    build_rejection_response,
    format_reset_time,
    rate_limit_headers,
    retry_after_seconds,
)

NOW = 1_700_000_000_000


def test_rejection_status_and_body() -> None:
    response = build_rejection_response(0, NOW + 30_000, now=NOW)

    assert response.status_code == 429
    assert json.loads(response.body) == {
        "error": "Too Many Requests",
        "message": "Rate limit exceeded. Please try again later.",
        "retryAfter": 30,
    }
    assert response.body == (
        b'{"error":"Too Many Requests",'
        b'"message":"Rate limit exceeded. Please try again later.",'
        b'"retryAfter":30}'
    )


def test_rejection_headers() -> None:
    response = build_rejection_response(0, NOW + 30_000, now=NOW)
    headers = response.headers

    assert headers["X-RateLimit-Remaining"] == "0"
    assert headers["X-RateLimit-Reset"] == "2023-11-14T22:13:50.000Z"
    assert headers["Retry-After"] == "30"
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert (
        headers["Access-Control-Allow-Headers"]
        == "authorization, x-client-info, apikey, content-type"
    )
    assert headers["Content-Type"] == "application/json"


def test_retry_after_rounds_up() -> None:
    assert retry_after_seconds(NOW + 1, now=NOW) == 1
    assert retry_after_seconds(NOW + 1_000, now=NOW) == 1
    assert retry_after_seconds(NOW + 1_001, now=NOW) == 2


def test_retry_after_is_clamped_at_zero() -> None:
    assert retry_after_seconds(NOW - 5_000, now=NOW) == 0

    response = build_rejection_response(0, NOW - 5_000, now=NOW)
    assert json.loads(response.body)["retryAfter"] == 0
    assert response.headers["Retry-After"] == "0"


def test_retry_after_defaults_to_wall_clock() -> None:
    assert retry_after_seconds(0) == 0


def test_format_reset_time_keeps_milliseconds() -> None:
    assert format_reset_time(0) == "1970-01-01T00:00:00.000Z"
    assert format_reset_time(1_731_249_366_042) == "2024-11-10T14:36:06.042Z"


def test_rate_limit_headers_for_admitted_decision() -> None:
    decision = RateLimitDecision(admitted=True, remaining=12, reset_time=0)

    assert rate_limit_headers(decision) == {
        "X-RateLimit-Remaining": "12",
        "X-RateLimit-Reset": "1970-01-01T00:00:00.000Z",
    }
