from __future__ import annotations

SYNTAX = "syntax"
EVAL = "eval"

class ExprError(Exception):
    """A formula failure tied to a 1-based character position."""

    def __init__(self, message: str, position: int, kind: str = SYNTAX):
        super().__init__(message, position, kind)
        self.message = message
        self.position = position
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.position}: {self.message}"
