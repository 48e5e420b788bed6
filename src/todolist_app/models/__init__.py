from __future__ import annotations

from todolist_app.models.todo import Todo, TodoStats
from todolist_app.models.tools import (
    PREVIEW_SIZE,
    AddTodoInput,
    TodoIdInput,
    ToolOutput,
)
from todolist_app.models.widget import AssetKind, WidgetFiles

__all__ = [
    # todo
    "Todo",
    "TodoStats",
    # tools
    "PREVIEW_SIZE",
    "AddTodoInput",
    "TodoIdInput",
    "ToolOutput",
    # widget
    "AssetKind",
    "WidgetFiles",
]
