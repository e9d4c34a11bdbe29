"""Transport-agnostic TOON operations.

The HTTP and MCP transports call only these functions. Each one is a pure,
synchronous transformation of a single request; failures raise
``ToonCoreError`` subclasses.
"""

from __future__ import annotations

import copy
import json
from typing import Any

from toon_mcp.codec import ToonError, decode, encode
from toon_mcp.core.errors import (
    EncodeError,
    InvalidJson,
    SerializationError,
    ToonCoreError,
    from_codec_error,
)
from toon_mcp.core.options import build_decode_options, build_encode_options
from toon_mcp.core.tokens import estimate_tokens
from toon_mcp.logging import get_logger
from toon_mcp.models import (
    DecodeRequest,
    EncodeOptionsInput,
    FormatStats,
    SavingsStats,
    StatsResponse,
    ValidateResponse,
)

logger = get_logger(__name__)


def parse_json_input(value: Any) -> Any:
    """Resolve JSON that a client sent as a string.

    Some clients send ``"{\\"a\\": 1}"`` where ``{"a": 1}`` was meant. A top-level
    string is parsed as JSON text; any other value is returned as a copy.
    Strings nested inside containers are left alone.

    Args:
        value: Value received from the client.

    Returns:
        The JSON value to operate on.

    Raises:
        InvalidJson: If ``value`` is a string that is not valid JSON.
    """
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as exc:
            raise InvalidJson(str(exc)) from exc
    return copy.deepcopy(value)


def encode_json(value: Any, options: EncodeOptionsInput | None = None) -> str:
    """Encode a JSON value as TOON.

    Raises:
        EncodeError: If the codec cannot encode the value.
    """
    codec_options = build_encode_options(options or EncodeOptionsInput())
    try:
        toon = encode(value, codec_options)
    except ToonError as exc:
        raise EncodeError(str(exc)) from exc

    logger.debug("Encoded JSON to TOON", toon_bytes=_byte_len(toon))
    return toon


def decode_toon(text: str, request: DecodeRequest | None = None) -> Any:
    """Decode TOON text to a JSON value.

    Args:
        text: TOON document.
        request: Decode flags; ``request.toon`` is ignored in favour of ``text``.

    Raises:
        ParseError: On syntax errors, with line and column.
        LengthMismatch: When an array's declared length disagrees with its items.
        DecodeError: For any other decoding failure.
    """
    codec_options = build_decode_options(request or DecodeRequest(toon=text))
    try:
        value = decode(text, codec_options)
    except ToonError as exc:
        raise from_codec_error(exc) from exc

    logger.debug("Decoded TOON to JSON", toon_bytes=_byte_len(text))
    return value


def validate_toon(text: str, strict: bool | None = None) -> ValidateResponse:
    """Check whether ``text`` decodes. Invalid documents are a result, not an error."""
    try:
        decode_toon(text, DecodeRequest(toon=text, strict=strict))
    except ToonCoreError as exc:
        logger.debug("TOON validation failed", error=str(exc))
        return ValidateResponse(valid=False, error=exc.to_validation_error())
    return ValidateResponse(valid=True)


def compute_stats(value: Any, options: EncodeOptionsInput | None = None) -> StatsResponse:
    """Compare the size of ``value`` as compact JSON and as TOON.

    Raises:
        SerializationError: If the value cannot be written as JSON.
        EncodeError: If the value cannot be encoded as TOON.
    """
    json_text = format_json_output(value)
    toon_text = encode_json(value, options)

    json_stats = FormatStats(bytes=_byte_len(json_text), tokens_approx=estimate_tokens(json_text))
    toon_stats = FormatStats(bytes=_byte_len(toon_text), tokens_approx=estimate_tokens(toon_text))

    return StatsResponse(
        json=json_stats,
        toon=toon_stats,
        savings=SavingsStats(
            bytes_percent=savings_percent(json_stats.bytes, toon_stats.bytes),
            tokens_percent=savings_percent(json_stats.tokens_approx, toon_stats.tokens_approx),
        ),
    )


def format_json_output(value: Any, output_format: str | None = None) -> str:
    """Serialize ``value`` as compact JSON, or indented when ``output_format`` is "json_pretty".

    Raises:
        SerializationError: If the value cannot be written as JSON.
    """
    try:
        if output_format == "json_pretty":
            return json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def savings_percent(before: int, after: int) -> float:
    """Percent saved going from ``before`` to ``after``, rounded to 2 decimals; 0.0 when ``before`` is 0."""
    if before == 0:
        return 0.0
    return round((before - after) / before * 100, 2)
