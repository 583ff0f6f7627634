"""Tests for the sliding-window limiter."""

from __future__ import annotations

import asyncio
import threading

import pytest

from memeforge.core import RateLimiter

from conftest import FakeClock


def test_admits_exactly_capacity_then_denies() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_ms=1000, clock=clock)

    results = [limiter.check_limit() for _ in range(6)]

    assert results == [True] * 5 + [False]
    assert limiter.remaining() == 0


def test_denied_requests_consume_no_capacity() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_ms=1000, clock=clock)
    assert limiter.check_limit()
    assert limiter.check_limit()

    for _ in range(10):
        assert not limiter.check_limit()
        clock.advance(0.01)

    # Only the two admitted timestamps matter for when capacity returns.
    clock.now = 1000.0 + 1.0
    assert limiter.remaining() == 2


def test_capacity_returns_after_window() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=3, window_ms=60000, clock=clock)
    for _ in range(3):
        assert limiter.check_limit()
    assert not limiter.check_limit()

    clock.advance(60.001)

    assert limiter.remaining() == 3
    assert limiter.check_limit()


def test_window_slides_one_entry_at_a_time() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_ms=1000, clock=clock)
    assert limiter.check_limit()  # t=0
    clock.advance(0.5)
    assert limiter.check_limit()  # t=0.5
    assert not limiter.check_limit()

    clock.advance(0.5)  # t=1.0: first entry is exactly one window old
    assert limiter.remaining() == 1
    assert limiter.check_limit()
    assert not limiter.check_limit()


def test_reset_in_reports_oldest_entry_expiry() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_ms=10000, clock=clock)
    assert limiter.reset_in() == 0.0

    limiter.check_limit()
    clock.advance(4)
    limiter.check_limit()

    assert limiter.reset_in() == pytest.approx(6.0)
    clock.advance(6)
    assert limiter.reset_in() == pytest.approx(4.0)


def test_snapshot_shape() -> None:
    limiter = RateLimiter(max_requests=4, window_ms=1000, clock=FakeClock())
    limiter.check_limit()

    snapshot = limiter.snapshot()

    assert snapshot["limit"] == 4
    assert snapshot["remaining"] == 3
    assert snapshot["resetAt"].endswith("Z")


def test_reset_clears_window() -> None:
    limiter = RateLimiter(max_requests=1, window_ms=1000, clock=FakeClock())
    assert limiter.check_limit()
    limiter.reset()
    assert limiter.check_limit()


@pytest.mark.parametrize("max_requests,window_ms", [(0, 1000), (1, 0)])
def test_rejects_invalid_configuration(max_requests: int, window_ms: int) -> None:
    with pytest.raises(ValueError):
        RateLimiter(max_requests=max_requests, window_ms=window_ms)


def test_threaded_callers_never_over_admit() -> None:
    limiter = RateLimiter(max_requests=10, window_ms=60000)
    admitted: list[bool] = []
    admitted_lock = threading.Lock()
    barrier = threading.Barrier(40)

    def worker() -> None:
        barrier.wait()
        for _ in range(5):
            result = limiter.check_limit()
            with admitted_lock:
                admitted.append(result)

    threads = [threading.Thread(target=worker) for _ in range(40)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert admitted.count(True) == 10
    assert len(admitted) == 200


@pytest.mark.asyncio
async def test_interleaved_tasks_never_over_admit() -> None:
    limiter = RateLimiter(max_requests=7, window_ms=60000)

    async def attempt() -> bool:
        await asyncio.sleep(0)
        return limiter.check_limit()

    results = await asyncio.gather(*(attempt() for _ in range(50)))

    assert results.count(True) == 7
