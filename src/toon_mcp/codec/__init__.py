"""TOON (Token-Oriented Object Notation) codec.

Encodes JSON-compatible values as TOON text and decodes them back:

    from toon_mcp.codec import DecodeOptions, EncodeOptions, decode, encode

    text = encode({"users": [{"id": 1}, {"id": 2}]})
    value = decode(text, DecodeOptions(strict=True))

Failures raise ``ToonError`` subclasses; parse errors carry line and column.
"""

from toon_mcp.codec.decoder import decode
from toon_mcp.codec.encoder import encode
from toon_mcp.codec.errors import (
    ToonEncodeError,
    ToonError,
    ToonLengthMismatchError,
    ToonParseError,
    ToonPathExpansionError,
)
from toon_mcp.codec.types import (
    DecodeOptions,
    Delimiter,
    EncodeOptions,
    JsonValue,
    KeyFoldingMode,
    PathExpansionMode,
)

__all__ = [
    "decode",
    "encode",
    # Options
    "DecodeOptions",
    "Delimiter",
    "EncodeOptions",
    "KeyFoldingMode",
    "PathExpansionMode",
    # Errors
    "ToonEncodeError",
    "ToonError",
    "ToonLengthMismatchError",
    "ToonParseError",
    "ToonPathExpansionError",
    # Types
    "JsonValue",
]
