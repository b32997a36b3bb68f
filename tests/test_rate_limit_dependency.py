"""Unit tests for the enforce_rate_limit FastAPI dependency."""

from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import AppSettings
from app.core.errors import RateLimitedAppError
from app.core.rate_limit import build_client_key, build_rate_limiter, enforce_rate_limit


def _request(limiter, host: str | None = "10.0.0.1") -> Mock:
    request = Mock()
    request.app.state.rate_limiter = limiter
    request.client = SimpleNamespace(host=host) if host else None
    request.url.path = "/api/users"
    return request


class TestBuildClientKey:
    def test_uses_client_address(self) -> None:
        assert build_client_key(_request(None, host="192.168.1.5")) == "ip:192.168.1.5"

    def test_falls_back_when_client_unknown(self) -> None:
        assert build_client_key(_request(None, host=None)) == "ip:unknown"


class TestBuildRateLimiter:
    def test_uses_configured_bounds(self) -> None:
        cfg = AppSettings(
            rate_limit_requests=7,
            rate_limit_window_ms=5000,
            rate_limit_max_keys=3,
        )

        limiter = build_rate_limiter(cfg)

        assert isinstance(limiter, InMemorySlidingWindowRateLimiter)
        assert limiter.limit == 7
        assert limiter.window_ms == 5000
        assert limiter.stats()["max_keys"] == 3


class TestEnforceRateLimit:
    @pytest.mark.asyncio
    @patch("app.core.rate_limit.settings")
    async def test_skipped_when_disabled(self, mock_settings) -> None:
        mock_settings.app.rate_limit_enabled = False
        limiter = Mock()

        await enforce_rate_limit(_request(limiter))

        limiter.admit.assert_not_called()

    @pytest.mark.asyncio
    @patch("app.core.rate_limit.settings")
    async def test_raises_when_window_full(self, mock_settings) -> None:
        mock_settings.app.rate_limit_enabled = True
        mock_settings.app.rate_limit_window_ms = 60_000
        limiter = InMemorySlidingWindowRateLimiter(limit=1, window_ms=60_000)
        request = _request(limiter)

        await enforce_rate_limit(request)
        with pytest.raises(RateLimitedAppError) as exc_info:
            await enforce_rate_limit(request)

        assert exc_info.value.code == "rate_limit_exceeded"
        assert exc_info.value.details == {"limit": 1, "remaining": 0}

    @pytest.mark.asyncio
    @patch("app.core.rate_limit.settings")
    async def test_clients_are_limited_independently(self, mock_settings) -> None:
        mock_settings.app.rate_limit_enabled = True
        limiter = InMemorySlidingWindowRateLimiter(limit=1, window_ms=60_000)

        await enforce_rate_limit(_request(limiter, host="10.0.0.1"))
        await enforce_rate_limit(_request(limiter, host="10.0.0.2"))

        with pytest.raises(RateLimitedAppError):
            await enforce_rate_limit(_request(limiter, host="10.0.0.1"))
