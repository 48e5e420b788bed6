"""Tool handler for delete_todo."""

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
    """Handle a delete_todo tool call."""
    log = structlog.get_logger().bind(tool="delete_todo", todo_id=todo_id)
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

    deleted = state.store.delete(validated.id)
    if deleted is None:
        raise TodoAppError(
            code=ErrorCode.TODO_NOT_FOUND,
            message=f'Todo with ID "{validated.id}" not found.',
            suggestion="Call get_todos to see the current todo IDs.",
            recoverable=False,
        )

    todos = state.store.list_todos()
    log.info("todo_deleted", total=len(todos))

    deleted_dump = dump_todo(deleted)
    return ToolOutput(
        text=f'Deleted todo: "{deleted.title}". You now have {len(todos)} todo(s).',
        structured_content={
            "deletedTodo": deleted_dump,
            "todos": dump_todos(todos, PREVIEW_SIZE),
        },
        full_data={
            "todos": dump_todos(todos),
            "deletedTodo": deleted_dump,
        },
    )
