"""Pydantic models for toon-mcp."""

from toon_mcp.models.api import (
    ApiError,
    DecodeRequest,
    DecodeResponse,
    EncodeOptionsInput,
    EncodeRequest,
    EncodeResponse,
    ErrorDetail,
    ErrorDetails,
    FormatStats,
    HealthResponse,
    SavingsStats,
    StatsRequest,
    StatsResponse,
    ValidateRequest,
    ValidateResponse,
    ValidationErrorDetail,
)

__all__ = [
    # Requests
    "DecodeRequest",
    "EncodeOptionsInput",
    "EncodeRequest",
    "StatsRequest",
    "ValidateRequest",
    # Responses
    "DecodeResponse",
    "EncodeResponse",
    "FormatStats",
    "HealthResponse",
    "SavingsStats",
    "StatsResponse",
    "ValidateResponse",
    "ValidationErrorDetail",
    # Errors
    "ApiError",
    "ErrorDetail",
    "ErrorDetails",
]
