"""Tests for the background eviction task."""

import asyncio
from unittest.mock import Mock

import pytest

from shamba_gate.adapters.rate_limit.base import RateLimitPolicy
from shamba_gate.adapters.rate_limit.sweeper import RateLimitSweeper


async def _wait_until(predicate, timeout: float = 1.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_sweeper_evicts_expired_entries(store, clock) -> None:
    store.check("expired", RateLimitPolicy(max_requests=1, window_ms=1_000))
    store.check("live", RateLimitPolicy(max_requests=1, window_ms=60_000))
    clock.advance(5_000)

    store.start_sweeper(interval_seconds=0.01)
    try:
        await _wait_until(lambda: store.get_entry("expired") is None)
    finally:
        await store.stop_sweeper()

    assert store.get_entry("live") is not None


@pytest.mark.asyncio
async def test_sweeper_runs_periodically() -> None:
    fake_store = Mock()
    sweeper = RateLimitSweeper(fake_store, interval_seconds=0.01)

    sweeper.start()
    try:
        await _wait_until(lambda: fake_store.sweep.call_count >= 3)
    finally:
        await sweeper.stop()

    assert sweeper.running is False


@pytest.mark.asyncio
async def test_stop_cancels_before_first_sweep() -> None:
    fake_store = Mock()
    sweeper = RateLimitSweeper(fake_store, interval_seconds=300)

    sweeper.start()
    assert sweeper.running is True
    await sweeper.stop()

    assert sweeper.running is False
    fake_store.sweep.assert_not_called()


@pytest.mark.asyncio
async def test_sweeper_keeps_running_after_sweep_failure() -> None:
    fake_store = Mock()
    fake_store.sweep.side_effect = [RuntimeError("boom"), 0, 0]
    sweeper = RateLimitSweeper(fake_store, interval_seconds=0.01)

    sweeper.start()
    try:
        await _wait_until(lambda: fake_store.sweep.call_count >= 3)
    finally:
        await sweeper.stop()


@pytest.mark.asyncio
async def test_start_sweeper_is_idempotent(store) -> None:
    first = store.start_sweeper(interval_seconds=300)
    second = store.start_sweeper(interval_seconds=300)
    try:
        assert first is second
        assert first.running is True
    finally:
        await store.stop_sweeper()


@pytest.mark.asyncio
async def test_stop_sweeper_without_start_is_noop(store) -> None:
    await store.stop_sweeper()


def test_invalid_interval() -> None:
    with pytest.raises(ValueError):
        RateLimitSweeper(Mock(), interval_seconds=0)
