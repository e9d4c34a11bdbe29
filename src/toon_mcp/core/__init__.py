"""Transport-agnostic operation layer."""

from toon_mcp.core.errors import (
    DecodeError,
    EncodeError,
    InvalidJson,
    LengthMismatch,
    ParseError,
    SerializationError,
    ToonCoreError,
    from_codec_error,
)
from toon_mcp.core.operations import (
    compute_stats,
    decode_toon,
    encode_json,
    format_json_output,
    parse_json_input,
    savings_percent,
    validate_toon,
)
from toon_mcp.core.options import build_decode_options, build_encode_options
from toon_mcp.core.tokens import estimate_tokens

__all__ = [
    # Operations
    "compute_stats",
    "decode_toon",
    "encode_json",
    "format_json_output",
    "parse_json_input",
    "savings_percent",
    "validate_toon",
    # Options
    "build_decode_options",
    "build_encode_options",
    # Tokens
    "estimate_tokens",
    # Errors
    "DecodeError",
    "EncodeError",
    "InvalidJson",
    "LengthMismatch",
    "ParseError",
    "SerializationError",
    "ToonCoreError",
    "from_codec_error",
]
