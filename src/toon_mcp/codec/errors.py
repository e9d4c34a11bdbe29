"""Exceptions raised by the TOON codec."""

from __future__ import annotations


class ToonError(Exception):
    """Base exception for codec errors."""


class ToonEncodeError(ToonError):
    """A value could not be encoded."""


class ToonParseError(ToonError):
    """Malformed TOON text at a known position."""

    def __init__(
        self,
        message: str,
        line: int,
        column: int,
        suggestion: str | None = None,
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.suggestion = suggestion
        super().__init__(f"Line {line}, column {column}: {message}")


class ToonLengthMismatchError(ToonError):
    """Declared array length or tabular field count disagrees with the content."""

    def __init__(self, expected: int, found: int, line: int | None = None) -> None:
        self.expected = expected
        self.found = found
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"Length mismatch{where}: expected {expected}, found {found}")


class ToonPathExpansionError(ToonError):
    """Dotted key expansion collided with an existing value."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path expansion conflict at '{path}'")
