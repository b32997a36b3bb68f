"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: every admission decision runs under a single lock, so two
  concurrent calls can never both observe the pre-admission count.
- Memory is bounded by ``max_keys``: idle keys are swept, then the least
  recently evaluated key is evicted.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class _Window:
    timestamps: list[float] = field(default_factory=list)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Admit at most ``limit`` requests per key within any ``window_ms`` span.

    Each key keeps the instants of its admitted requests. On every check the
    entries with ``timestamp <= now - window_ms`` are dropped; an entry that is
    exactly ``window_ms`` old is therefore already outside the window.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_ms: int,
        max_keys: int | None = 10_000,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum admissions per key inside one window.
            window_ms: Window length in milliseconds.
            max_keys: Maximum number of tracked keys (None for unbounded).
            clock: Time source returning milliseconds.

        Raises:
            ValueError: If any bound is invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be >= 1 or None")

        self._limit = limit
        self._window_ms = window_ms
        self._max_keys = max_keys
        self._clock = clock
        self._lock = threading.RLock()
        self._windows: OrderedDict[str, _Window] = OrderedDict()
        self._evictions = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def admit(self, key: str, now: float | None = None) -> RateLimitResult:
        """Prune the key's window, then admit or reject one request.

        A rejected request does not add a timestamp, but the pruned window is
        kept.

        Args:
            key: Client identifier.
            now: Evaluation instant in milliseconds (defaults to the clock).

        Returns:
            RateLimitResult with the decision and remaining budget.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        if now is None:
            now = self._clock()
        cutoff = now - self._window_ms

        with self._lock:
            window = self._windows.get(key)
            if window is None:
                window = _Window()
                self._windows[key] = window
                self._enforce_capacity_locked(now, keep=key)
            else:
                self._windows.move_to_end(key)

            window.timestamps = [ts for ts in window.timestamps if ts > cutoff]

            if len(window.timestamps) >= self._limit:
                return RateLimitResult(allowed=False, limit=self._limit, remaining=0)

            window.timestamps.append(now)
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit - len(window.timestamps),
            )

    def sweep(self, now: float | None = None) -> int:
        """Drop every key whose admitted timestamps have all expired.

        Returns:
            Number of keys removed.
        """
        if now is None:
            now = self._clock()
        with self._lock:
            return self._sweep_locked(now)

    def window(self, key: str) -> list[float]:
        """Return a copy of the admitted timestamps currently held for ``key``."""
        with self._lock:
            window = self._windows.get(key)
            return list(window.timestamps) if window else []

    def stats(self) -> dict[str, int | None]:
        """Return lightweight limiter metrics without exposing keys."""
        with self._lock:
            return {
                "limit": self._limit,
                "window_ms": self._window_ms,
                "max_keys": self._max_keys,
                "keys": len(self._windows),
                "evictions": self._evictions,
            }

    def _sweep_locked(self, now: float, keep: str | None = None) -> int:
        cutoff = now - self._window_ms
        idle = [
            k
            for k, w in self._windows.items()
            if k != keep and all(ts <= cutoff for ts in w.timestamps)
        ]
        for k in idle:
            del self._windows[k]
        self._evictions += len(idle)
        if idle:
            logger.debug("rate_limit.swept", extra={"swept": len(idle)})
        return len(idle)

    def _enforce_capacity_locked(self, now: float, keep: str) -> None:
        if self._max_keys is None or len(self._windows) <= self._max_keys:
            return

        self._sweep_locked(now, keep=keep)
        while len(self._windows) > self._max_keys:
            # popitem(last=False) removes the least recently evaluated key
            self._windows.popitem(last=False)
            self._evictions += 1
