"""In-memory todo store.

One TodoStore lives for the whole process and is shared by every request.
There is no persistence: a restart starts again from an empty list with ids
counting from 1.

Every public method takes the store lock for its full duration, so each one
is an atomic unit even when sync code runs in worker threads. Records handed
out are copies; callers cannot mutate the stored list by accident.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from todolist_app.models.todo import Todo, TodoStats

if TYPE_CHECKING:
    from collections.abc import Callable


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TodoStore:
    """Ordered todo collection implementing TodoStoreProtocol."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._todos: list[Todo] = []
        self._next_id = 1
        self._clock = clock
        self._lock = threading.Lock()

    def list_todos(self) -> list[Todo]:
        """Return all records in insertion order."""
        with self._lock:
            return [todo.model_copy() for todo in self._todos]

    def stats(self) -> TodoStats:
        with self._lock:
            return TodoStats.from_todos(self._todos)

    def add(self, title: str) -> Todo:
        """Append a new pending todo. ``title`` must already be validated."""
        with self._lock:
            todo = Todo(
                id=str(self._next_id),
                title=title,
                completed=False,
                created_at=self._clock(),
            )
            self._next_id += 1
            self._todos.append(todo)
            return todo.model_copy()

    def toggle(self, todo_id: str) -> Todo | None:
        """Flip ``completed`` on the matching record. Returns ``None`` if absent."""
        with self._lock:
            todo = self._find(todo_id)
            if todo is None:
                return None
            todo.completed = not todo.completed
            return todo.model_copy()

    def delete(self, todo_id: str) -> Todo | None:
        """Remove the matching record. Returns ``None`` if absent."""
        with self._lock:
            for index, todo in enumerate(self._todos):
                if todo.id == todo_id:
                    del self._todos[index]
                    return todo
            return None

    def clear_completed(self) -> int:
        """Remove every completed record and return how many were removed."""
        with self._lock:
            remaining = [todo for todo in self._todos if not todo.completed]
            cleared = len(self._todos) - len(remaining)
            self._todos = remaining
            return cleared

    def _find(self, todo_id: str) -> Todo | None:
        for todo in self._todos:
            if todo.id == todo_id:
                return todo
        return None
