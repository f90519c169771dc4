"""
Exceptions raised by yn.

Query misses and malformed query paths are not errors; they produce empty
results. Only input problems raise.
"""

from __future__ import annotations


class YnError(Exception):
    """Base class for yn errors."""


class InputError(YnError):
    """Input could not be read or is empty."""


class ParseError(YnError):
    """The YAML parser rejected the input."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)
