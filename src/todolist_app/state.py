"""Application state container.

AppState is created once per process in ``server.create_app`` (or
``server.main`` for stdio) and shared by every request. The FastMCP
lifespan only hands it out: in stateless HTTP mode the lifespan is entered
once per request, so nothing request-scoped may be created here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from todolist_app.config import Settings
    from todolist_app.protocols import TodoStoreProtocol, WidgetAssetsProtocol


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    store: TodoStoreProtocol

    # Widget bundle proxy
    http_client: httpx.AsyncClient | None = None
    widget_assets: WidgetAssetsProtocol | None = None
