"""Integration test fixtures.

Provides a fully wired AppState with a real store, a respx-mockable HTTP
client, and the widget resolver. Shared fixtures (settings, store, clock)
come from tests/conftest.py.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import httpx
import pytest

from todolist_app.fetcher import Fetcher
from todolist_app.state import AppState
from todolist_app.widget import WidgetAssetResolver

if TYPE_CHECKING:
    from todolist_app.config import Settings
    from todolist_app.store import TodoStore


@pytest.fixture()
def subprocess_env() -> dict[str, str]:
    """Baseline env dict for subprocess-based stdio MCP tests.

    Forces stdio transport and clears the platform variables so a local
    deployment config cannot leak into the run.
    """
    env = os.environ.copy()
    for name in ("PORT", "WIDGET_URL", "RENDER_EXTERNAL_URL"):
        env.pop(name, None)
    env["TODOLIST__SERVER__TRANSPORT"] = "stdio"
    env["TODOLIST__WIDGET__BACKEND_URL"] = "https://todo-backend.example.com"
    env["TODOLIST__LOGGING__LEVEL"] = "WARNING"
    return env


@pytest.fixture()
async def app_state(settings: Settings, store: TodoStore) -> AppState:
    """Full AppState wired for handler integration tests."""
    async with httpx.AsyncClient() as client:
        yield AppState(
            settings=settings,
            store=store,
            http_client=client,
            widget_assets=WidgetAssetResolver(
                Fetcher(client),
                source_url=settings.widget.source_url,
                ttl_seconds=settings.widget.cache_ttl_seconds,
            ),
        )
