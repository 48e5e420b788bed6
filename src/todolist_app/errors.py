from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    TODO_NOT_FOUND = "TODO_NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    WIDGET_FETCH_FAILED = "WIDGET_FETCH_FAILED"


class TodoAppError(Exception):
    """Raised for all expected failure conditions.

    Carries the envelope returned to the agent in a tool error result. Caught
    only at the edges: the tool wrappers in server.py, the widget asset
    routes, and widget discovery, which keeps its previous cache on failure.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }
