"""Pytest configuration and fixtures shared across all test modules.

This file is loaded by pytest before any test module, so the environment
variables below are in place before app.core.config builds its settings.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "100")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_MS", "60000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402


class FakeClock:
    """Deterministic UTC clock for store timestamps."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
