"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that might load settings.
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from shamba_gate.adapters.rate_limit.in_memory import InMemoryRateLimitStore
from shamba_gate.core.app_factory import create_app


class FakeClock:
    """Deterministic epoch-millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.current = start

    def __call__(self) -> int:
        return self.current

    def advance(self, ms: int) -> None:
        self.current += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryRateLimitStore:
    return InMemoryRateLimitStore(clock=clock)


@pytest.fixture
def client(store: InMemoryRateLimitStore):
    """Test client running the app lifespan against a fresh store."""
    with TestClient(create_app(store=store)) as test_client:
        yield test_client
