"""Rate limiter interfaces.

The API should depend on this abstraction (not the concrete implementation)
so the storage backend can change with minimal impact on the routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single admission decision.

    Attributes:
        allowed: Whether the request is admitted.
        limit: Max requests per window.
        remaining: Admissions left in the current window (0 when blocked).
    """

    allowed: bool
    limit: int
    remaining: int


class AbstractRateLimiter(ABC):
    """Interface for per-client admission control."""

    @abstractmethod
    def admit(self, key: str, now: float | None = None) -> RateLimitResult:
        """Decide whether to admit one request for ``key``.

        Args:
            key: Client identifier (e.g., network address).
            now: Evaluation instant in milliseconds; implementations use
                their own clock when omitted.

        Returns:
            RateLimitResult describing the decision.
        """
        raise NotImplementedError
