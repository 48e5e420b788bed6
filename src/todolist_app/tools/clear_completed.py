"""Tool handler for clear_completed."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from todolist_app.models.tools import PREVIEW_SIZE, ToolOutput, dump_todos

if TYPE_CHECKING:
    from todolist_app.state import AppState


async def handle(state: AppState) -> ToolOutput:
    """Handle a clear_completed tool call."""
    log = structlog.get_logger().bind(tool="clear_completed")
    log.info("handler_called")

    cleared = state.store.clear_completed()
    todos = state.store.list_todos()
    log.info("completed_cleared", cleared_count=cleared, remaining=len(todos))

    return ToolOutput(
        text=(
            f"Cleared {cleared} completed todo(s). "
            f"You now have {len(todos)} todo(s) remaining."
        ),
        structured_content={
            "clearedCount": cleared,
            "todos": dump_todos(todos, PREVIEW_SIZE),
        },
        full_data={
            "todos": dump_todos(todos),
            "clearedCount": cleared,
        },
    )
