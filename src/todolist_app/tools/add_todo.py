"""Tool handler for add_todo."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from todolist_app.errors import ErrorCode, TodoAppError
from todolist_app.models.tools import (
    PREVIEW_SIZE,
    AddTodoInput,
    ToolOutput,
    dump_todo,
    dump_todos,
)

if TYPE_CHECKING:
    from todolist_app.state import AppState


async def handle(title: str, state: AppState) -> ToolOutput:
    """Handle an add_todo tool call."""
    log = structlog.get_logger().bind(tool="add_todo")
    log.info("handler_called")

    # Validate input
    try:
        validated = AddTodoInput(title=title)
    except ValueError as exc:
        raise TodoAppError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty todo title.",
            recoverable=False,
        ) from exc

    added = state.store.add(validated.title)
    todos = state.store.list_todos()
    log.info("todo_added", todo_id=added.id, total=len(todos))

    added_dump = dump_todo(added)
    return ToolOutput(
        text=f'Added todo: "{added.title}". You now have {len(todos)} todo(s).',
        structured_content={
            "addedTodo": added_dump,
            "todos": dump_todos(todos, PREVIEW_SIZE),
        },
        full_data={
            "todos": dump_todos(todos),
            "addedTodo": added_dump,
        },
    )
