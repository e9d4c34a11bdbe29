"""Pydantic models for request/response payloads shared by both transports."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EncodeOptionsInput(BaseModel):
    """Public encoding options. Absent fields fall back to codec defaults."""

    delimiter: str | None = Field(
        default=None,
        description='Delimiter: "comma" (default), "tab", or "pipe"',
    )
    indent: int | None = Field(
        default=None,
        ge=0,
        le=255,
        description="Spaces for indentation (0-8, default: 2; larger values are clamped)",
    )
    fold_keys: bool | None = Field(
        default=None,
        description="Fold chains of single-key objects into dotted keys",
    )
    flatten_depth: int | None = Field(
        default=None,
        ge=0,
        description="Max number of segments in a folded key",
    )


class EncodeRequest(EncodeOptionsInput):
    """Request to encode JSON to TOON."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    json_value: Any = Field(
        alias="json",
        description="JSON to encode (object, array, or a string holding JSON text)",
    )

    def options(self) -> EncodeOptionsInput:
        """The encoding options carried by this request."""
        return EncodeOptionsInput(
            delimiter=self.delimiter,
            indent=self.indent,
            fold_keys=self.fold_keys,
            flatten_depth=self.flatten_depth,
        )


class EncodeResponse(BaseModel):
    """Encoded TOON text."""

    toon: str


class DecodeRequest(BaseModel):
    """Request to decode TOON to JSON."""

    toon: str = Field(description="TOON text to decode")
    strict: bool | None = Field(default=None, description="Strict validation (default: true)")
    coerce_types: bool | None = Field(default=None, description="Type coercion (default: true)")
    expand_paths: bool | None = Field(default=None, description="Path expansion (default: false)")
    output_format: str | None = Field(
        default=None,
        description='Output: "json" or "json_pretty" (default: "json")',
    )


class DecodeResponse(BaseModel):
    """Decoded JSON value."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    json_value: Any = Field(alias="json")


class ValidateRequest(BaseModel):
    """Request to validate TOON syntax."""

    toon: str
    strict: bool | None = Field(default=None, description="Strict validation (default: true)")


class ValidationErrorDetail(BaseModel):
    """Why a TOON document failed validation."""

    message: str
    line: int | None = None
    column: int | None = None
    suggestion: str | None = None
    expected: int | None = None
    found: int | None = None


class ValidateResponse(BaseModel):
    """Validation outcome. ``error`` is set only when ``valid`` is false."""

    valid: bool
    error: ValidationErrorDetail | None = None


class StatsRequest(BaseModel):
    """Request to compare JSON and TOON sizes."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    json_value: Any = Field(alias="json", description="JSON to analyze")
    encode_options: EncodeOptionsInput = Field(default_factory=EncodeOptionsInput)


class FormatStats(BaseModel):
    """Size of one serialization."""

    bytes: int
    tokens_approx: int


class SavingsStats(BaseModel):
    """Percent saved by TOON relative to JSON."""

    bytes_percent: float
    tokens_percent: float


class StatsResponse(BaseModel):
    """JSON vs. TOON size comparison."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    json_stats: FormatStats = Field(alias="json")
    toon: FormatStats
    savings: SavingsStats


class ErrorDetail(BaseModel):
    """Structured error detail rendered by both transports."""

    message: str
    line: int | None = None
    column: int | None = None
    suggestion: str | None = None
    expected: int | None = None
    found: int | None = None


class ErrorDetails(BaseModel):
    """Positional or count details attached to an HTTP error body."""

    line: int | None = None
    column: int | None = None
    suggestion: str | None = None
    expected: int | None = None
    found: int | None = None


class ApiError(BaseModel):
    """HTTP error body."""

    error: str
    details: ErrorDetails | None = None

    @classmethod
    def from_detail(cls, detail: ErrorDetail) -> ApiError:
        """Split an error detail into the message and its optional details."""
        extra = detail.model_dump(exclude={"message"}, exclude_none=True)
        return cls(error=detail.message, details=ErrorDetails(**extra) if extra else None)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
