"""Admission control dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: routes depend on a dependency function only.
- Explicit lifecycle: the limiter is built by the app factory and lives on
  ``app.state``; nothing here holds process-wide state.
- Admission first: the dependency runs before any handler touches the store.

Strategy: sliding window per client address.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import AppSettings, settings
from app.core.errors import RateLimitedAppError

logger = logging.getLogger(__name__)


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Create the limiter described by the application settings."""

    cfg = app_settings or settings.app
    return InMemorySlidingWindowRateLimiter(
        limit=cfg.rate_limit_requests,
        window_ms=cfg.rate_limit_window_ms,
        max_keys=cfg.rate_limit_max_keys,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter attached to the running application."""

    return request.app.state.rate_limiter


def build_client_key(request: Request) -> str:
    """Build the limiter key for the current request.

    Args:
        request: FastAPI request.

    Returns:
        str: Namespaced limiter key.
    """

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def _hash_client_key(key: str) -> str:
    """Hash the client key for logging without exposing addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing admission control.

    When enabled, records one admission for the requesting client. If the
    client's window is saturated, the request is rejected before any handler
    runs.

    Args:
        request: FastAPI request.

    Raises:
        RateLimitedAppError: When the client's window is full (mapped to 429).
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter = get_rate_limiter(request)
    key = build_client_key(request)
    key_hash = _hash_client_key(key)

    result = limiter.admit(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "window_ms": settings.app.rate_limit_window_ms,
            "request_path": request.url.path,
        },
    )
    raise RateLimitedAppError(
        code="rate_limit_exceeded",
        message="Too many requests. Try again later.",
        details={"limit": result.limit, "remaining": result.remaining},
    )
