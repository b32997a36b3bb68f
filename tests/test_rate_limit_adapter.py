"""Unit tests for the in-memory sliding-window rate limiter."""

import threading
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter


def test_sliding_window_boundary() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_ms=1000)

    assert limiter.admit("k", now=0).allowed is True
    assert limiter.admit("k", now=100).allowed is True
    assert limiter.admit("k", now=200).allowed is False

    result = limiter.admit("k", now=1001)
    assert result.allowed is True
    assert limiter.window("k") == [100, 1001]


def test_entry_exactly_window_old_is_expired() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_ms=1000)

    assert limiter.admit("k", now=0).allowed is True
    assert limiter.admit("k", now=999).allowed is False
    assert limiter.admit("k", now=1000).allowed is True


def test_rejection_keeps_pruned_window_without_recording() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_ms=1000)
    limiter.admit("k", now=0)
    limiter.admit("k", now=500)
    limiter.admit("k", now=1200)

    blocked = limiter.admit("k", now=1300)

    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert limiter.window("k") == [500, 1200]


def test_remaining_counts_down() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=3, window_ms=60_000)

    assert [limiter.admit("k", now=t).remaining for t in (1, 2, 3)] == [2, 1, 0]


def test_uses_clock_when_now_omitted() -> None:
    clock = Mock(return_value=10_000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_ms=1000, clock=clock)

    assert limiter.admit("k").allowed is True
    assert limiter.admit("k").allowed is False

    clock.return_value = 11_000.0
    assert limiter.admit("k").allowed is True


def test_isolated_by_key() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_ms=60_000)

    assert limiter.admit("k1", now=0).allowed is True
    assert limiter.admit("k1", now=1).allowed is False

    assert limiter.admit("k2", now=2).allowed is True


def test_sweep_removes_fully_expired_keys() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=5, window_ms=1000)
    limiter.admit("old", now=0)
    limiter.admit("fresh", now=900)

    assert limiter.sweep(now=1500) == 1
    assert limiter.window("old") == []
    assert limiter.window("fresh") == [900]
    assert limiter.stats()["keys"] == 1


def test_capacity_prefers_sweeping_idle_keys() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=5, window_ms=1000, max_keys=2)
    limiter.admit("idle", now=0)
    limiter.admit("active", now=1500)

    limiter.admit("new", now=1600)

    stats = limiter.stats()
    assert stats["keys"] == 2
    assert stats["evictions"] == 1
    assert limiter.window("active") == [1500]
    assert limiter.window("new") == [1600]


def test_capacity_evicts_least_recently_evaluated_key() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=5, window_ms=60_000, max_keys=2)
    limiter.admit("a", now=0)
    limiter.admit("b", now=1)
    # Touch "a" so that "b" becomes least recently used
    limiter.admit("a", now=2)

    limiter.admit("c", now=3)

    assert limiter.window("a") == [0, 2]
    assert limiter.window("b") == []
    assert limiter.window("c") == [3]


def test_unbounded_when_max_keys_is_none() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_ms=60_000, max_keys=None)
    for i in range(100):
        limiter.admit(f"k{i}", now=i)

    assert limiter.stats()["keys"] == 100
    assert limiter.stats()["evictions"] == 0


def test_concurrent_admits_never_exceed_limit() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=10, window_ms=60_000)
    results: list[bool] = []
    results_lock = threading.Lock()

    def _worker() -> None:
        allowed = limiter.admit("shared", now=1.0).allowed
        with results_lock:
            results.append(allowed)

    threads = [threading.Thread(target=_worker) for _ in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 10
    assert results.count(False) == 40


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_ms": 1000},
        {"limit": 1, "window_ms": 0},
        {"limit": 1, "window_ms": 1000, "max_keys": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemorySlidingWindowRateLimiter(**kwargs)


def test_empty_key_is_rejected() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_ms=1000)

    with pytest.raises(ValueError):
        limiter.admit("")
