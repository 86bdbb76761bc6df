"""
Custom exceptions for Dataview parsing and execution.
"""

from typing import Any


class DataviewError(Exception):
    """Base exception for all Dataview-related errors."""

    pass


class DataviewParseError(DataviewError):
    """Raised when query text cannot be turned into a query."""

    pass


class DataviewSyntaxError(DataviewParseError):
    """Raised when a Dataview query has invalid syntax.

    ``offset`` is the byte offset of the offending position in the UTF-8
    encoded query text. ``token`` is the offending token, when there is one.
    """

    def __init__(
        self,
        message: str,
        offset: int | None = None,
        line: int | None = None,
        column: int | None = None,
        token: Any = None,
    ):
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column
        self.token = token
        location = ""
        if offset is not None:
            location = f" at position {offset}"
        if line is not None:
            location += f" (line {line}"
            if column is not None:
                location += f", column {column}"
            location += ")"
        super().__init__(f"{message}{location}")


class DataviewExecutionError(DataviewError):
    """Raised when query execution fails."""

    pass
