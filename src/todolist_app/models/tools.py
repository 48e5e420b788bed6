from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, field_validator

if TYPE_CHECKING:
    from todolist_app.models.todo import Todo

# Number of records returned as the primary structured payload.
PREVIEW_SIZE = 10


class AddTodoInput(BaseModel):
    title: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        # Stored exactly as given; only whitespace-only titles are refused
        if not v.strip():
            raise ValueError("title must not be empty")
        return v


class TodoIdInput(BaseModel):
    id: str

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        # Lookup is by exact id, so padding is kept and simply never matches
        if not v.strip():
            raise ValueError("id must not be empty")
        return v


class ToolOutput(BaseModel):
    """What every tool handler produces; server.py maps it onto CallToolResult.

    ``structured_content`` carries the bounded preview that hydrates the
    widget. ``full_data`` carries the unbounded list for consumers that need
    more than the preview.
    """

    text: str
    structured_content: dict[str, Any]
    full_data: dict[str, Any]


def dump_todo(todo: Todo) -> dict[str, Any]:
    return todo.model_dump(mode="json", by_alias=True)


def dump_todos(todos: list[Todo], limit: int | None = None) -> list[dict[str, Any]]:
    selected = todos if limit is None else todos[:limit]
    return [dump_todo(todo) for todo in selected]
