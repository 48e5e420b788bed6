"""Tool handler for get_todos.

Receives AppState, reads the store, and returns a ToolOutput. No MCP or
FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from todolist_app.models.tools import PREVIEW_SIZE, ToolOutput, dump_todos

if TYPE_CHECKING:
    from todolist_app.state import AppState


async def handle(state: AppState) -> ToolOutput:
    """Handle a get_todos tool call."""
    log = structlog.get_logger().bind(tool="get_todos")
    log.info("handler_called")

    todos = state.store.list_todos()
    # No await between the two reads, so both see the same list
    stats = state.store.stats()
    log.info("todos_listed", total=stats.total, completed=stats.completed)

    return ToolOutput(
        text=(
            f"You have {stats.total} todo(s): {stats.completed} completed, "
            f"{stats.pending} pending. View and manage them in the component below."
        ),
        structured_content={
            "todos": dump_todos(todos, PREVIEW_SIZE),
            "summary": (
                f"{stats.total} total, {stats.completed} completed, {stats.pending} pending"
            ),
        },
        full_data={
            "todos": dump_todos(todos),
            "stats": stats.model_dump(),
        },
    )
