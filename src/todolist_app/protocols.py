"""Protocol interfaces for swappable components.

Tool handlers, routes and AppState reference these protocols, not the
concrete implementations. Tests can substitute lightweight fakes, and a
persistent store could replace the in-memory one without touching tool code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from todolist_app.models.todo import Todo, TodoStats
    from todolist_app.models.widget import AssetKind, WidgetFiles


class TodoStoreProtocol(Protocol):
    """Interface for the todo collection."""

    def list_todos(self) -> list[Todo]: ...

    def stats(self) -> TodoStats: ...

    def add(self, title: str) -> Todo: ...

    def toggle(self, todo_id: str) -> Todo | None: ...

    def delete(self, todo_id: str) -> Todo | None: ...

    def clear_completed(self) -> int: ...


class FetcherProtocol(Protocol):
    """Interface for the upstream HTTP fetcher."""

    async def fetch_text(self, url: str) -> str: ...

    async def fetch_bytes(self, url: str) -> bytes: ...


class WidgetAssetsProtocol(Protocol):
    """Interface for widget bundle discovery and relay."""

    async def discover(self) -> WidgetFiles: ...

    async def fetch_asset(self, kind: AssetKind) -> bytes | None: ...
