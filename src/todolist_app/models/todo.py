from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Todo(BaseModel):
    """Single todo record as stored and as rendered by the widget."""

    id: str  # Counter value rendered as a string: "1", "2", ...
    title: str
    completed: bool = False
    created_at: datetime = Field(serialization_alias="createdAt")


class TodoStats(BaseModel):
    """Counts derived from one list snapshot, so pending + completed == total."""

    total: int
    completed: int
    pending: int

    @classmethod
    def from_todos(cls, todos: list[Todo]) -> TodoStats:
        completed = sum(1 for todo in todos if todo.completed)
        return cls(total=len(todos), completed=completed, pending=len(todos) - completed)
