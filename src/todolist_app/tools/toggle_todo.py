"""Tool handler for toggle_todo."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from todolist_app.errors import ErrorCode, TodoAppError
from todolist_app.models.tools import (
    PREVIEW_SIZE,
    TodoIdInput,
    ToolOutput,
    dump_todo,
    dump_todos,
)

if TYPE_CHECKING:
    from todolist_app.state import AppState


async def handle(todo_id: str, state: AppState) -> ToolOutput:
    """Handle a toggle_todo tool call."""
    log = structlog.get_logger().bind(tool="toggle_todo", todo_id=todo_id)
    log.info("handler_called")

    try:
        validated = TodoIdInput(id=todo_id)
    except ValueError as exc:
        raise TodoAppError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide the ID of an existing todo, as returned by get_todos.",
            recoverable=False,
        ) from exc

    toggled = state.store.toggle(validated.id)
    if toggled is None:
        raise TodoAppError(
            code=ErrorCode.TODO_NOT_FOUND,
            message=f'Todo with ID "{validated.id}" not found.',
            suggestion="Call get_todos to see the current todo IDs.",
            recoverable=False,
        )

    todos = state.store.list_todos()
    log.info("todo_toggled", completed=toggled.completed)

    toggled_dump = dump_todo(toggled)
    status = "completed" if toggled.completed else "pending"
    return ToolOutput(
        text=f'Marked "{toggled.title}" as {status}.',
        structured_content={
            "toggledTodo": toggled_dump,
            "todos": dump_todos(todos, PREVIEW_SIZE),
        },
        full_data={
            "todos": dump_todos(todos),
            "toggledTodo": toggled_dump,
        },
    )
