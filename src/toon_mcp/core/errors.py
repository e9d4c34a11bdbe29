"""Core error taxonomy shared by the HTTP and MCP transports."""

from __future__ import annotations

from toon_mcp.codec import ToonLengthMismatchError, ToonParseError
from toon_mcp.models import ErrorDetail, ValidationErrorDetail


class ToonCoreError(Exception):
    """Base exception for core TOON operations."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.render())

    def render(self) -> str:
        """Human-readable message, including any position or counts."""
        return self.message

    def to_detail(self) -> ErrorDetail:
        """Structured detail for transport error bodies."""
        return ErrorDetail(message=str(self))

    def to_validation_error(self) -> ValidationErrorDetail:
        """Detail reported by ``validate_toon`` for an invalid document."""
        return ValidationErrorDetail(message=str(self))


class ParseError(ToonCoreError):
    """TOON syntax error at a known position."""

    def __init__(
        self, message: str, line: int, column: int, suggestion: str | None = None
    ) -> None:
        self.line = line
        self.column = column
        self.suggestion = suggestion
        super().__init__(message)

    def render(self) -> str:
        return f"Parse error at line {self.line}, column {self.column}: {self.message}"

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail(
            message=self.message,
            line=self.line,
            column=self.column,
            suggestion=self.suggestion,
        )

    def to_validation_error(self) -> ValidationErrorDetail:
        return ValidationErrorDetail(
            message=self.message,
            line=self.line,
            column=self.column,
            suggestion=self.suggestion,
        )


class LengthMismatch(ToonCoreError):
    """Declared array length disagrees with the items present."""

    def __init__(self, expected: int, found: int) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f"expected {expected}, found {found}")

    def render(self) -> str:
        return f"Array length mismatch: expected {self.expected}, found {self.found}"

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail(message=str(self), expected=self.expected, found=self.found)

    def to_validation_error(self) -> ValidationErrorDetail:
        return ValidationErrorDetail(
            message=str(self),
            suggestion=f"Expected {self.expected} items but found {self.found}",
            expected=self.expected,
            found=self.found,
        )


class EncodeError(ToonCoreError):
    """Encoding JSON to TOON failed."""

    def render(self) -> str:
        return f"Encoding failed: {self.message}"


class DecodeError(ToonCoreError):
    """Decoding failed for a reason without position or counts."""

    def render(self) -> str:
        return f"Decoding failed: {self.message}"


class InvalidJson(ToonCoreError):
    """A string input did not contain valid JSON."""

    def render(self) -> str:
        return f"Invalid JSON: {self.message}"


class SerializationError(ToonCoreError):
    """A value could not be serialized to JSON text."""

    def render(self) -> str:
        return f"Serialization failed: {self.message}"


def from_codec_error(exc: Exception) -> ToonCoreError:
    """Classify a codec decode failure into the core taxonomy.

    Args:
        exc: Exception raised by ``toon_mcp.codec.decode``.

    Returns:
        ``ParseError`` or ``LengthMismatch`` when the codec reported position or
        counts, ``DecodeError`` for everything else.
    """
    if isinstance(exc, ToonParseError):
        return ParseError(exc.message, exc.line, exc.column, exc.suggestion)
    if isinstance(exc, ToonLengthMismatchError):
        return LengthMismatch(exc.expected, exc.found)
    return DecodeError(str(exc))
