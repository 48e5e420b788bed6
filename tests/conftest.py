"""Shared test fixtures for the todolist_app test suite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from todolist_app.config import Settings, WidgetSettings
from todolist_app.store import TodoStore

WIDGET_SOURCE = "https://widget.example.com"
BACKEND_URL = "https://todo-backend.example.com"


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def settings() -> Settings:
    """Settings pointing at fake widget hosts; respx intercepts the traffic."""
    return Settings(
        widget=WidgetSettings(
            source_url=WIDGET_SOURCE,
            backend_url=BACKEND_URL,
            cache_ttl_seconds=60.0,
            fetch_timeout_seconds=5.0,
        )
    )


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def store(fixed_now: datetime) -> TodoStore:
    """Store whose clock ticks one second per created todo."""
    ticks = iter(fixed_now + timedelta(seconds=i) for i in range(10_000))
    return TodoStore(clock=lambda: next(ticks))


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
