"""Quoting, escaping and scalar helpers shared by the encoder and decoder."""

from __future__ import annotations

import math
import re
from decimal import Decimal

from toon_mcp.codec.types import Delimiter, JsonPrimitive

# TOON only allows these five escape sequences
ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

UNESCAPES = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

RESERVED_LITERALS = frozenset({"true", "false", "null"})

STRUCTURAL_CHARS = frozenset(":[]{}")

NUMBER_PATTERN = re.compile(r"^-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?$")

IDENTIFIER_SEGMENT_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

UNQUOTED_KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


def escape_string(value: str) -> str:
    """Escape a string for use between double quotes."""
    return "".join(ESCAPES.get(char, char) for char in value)


def unescape_string(value: str) -> str:
    """Unescape the content of a quoted string.

    Raises:
        ValueError: ``(message, index)`` for an invalid or dangling escape.
    """
    result = []
    i = 0
    while i < len(value):
        char = value[i]
        if char != "\\":
            result.append(char)
            i += 1
            continue
        if i + 1 >= len(value):
            raise ValueError("Backslash at end of string", i)
        next_char = value[i + 1]
        if next_char not in UNESCAPES:
            raise ValueError(f"Invalid escape sequence '\\{next_char}'", i)
        result.append(UNESCAPES[next_char])
        i += 2
    return "".join(result)


def looks_like_number(value: str) -> bool:
    """True if ``value`` would read back as a number (leading zeros included)."""
    return bool(NUMBER_PATTERN.match(value))


def is_safe_unquoted(value: str, delimiter: Delimiter = Delimiter.COMMA) -> bool:
    """Check whether a string value survives a round trip without quotes."""
    if not value or value != value.strip():
        return False
    if value in RESERVED_LITERALS or looks_like_number(value):
        return False
    if any(char in STRUCTURAL_CHARS for char in value):
        return False
    if '"' in value or "\\" in value:
        return False
    if "\n" in value or "\r" in value or "\t" in value:
        return False
    if delimiter.value in value:
        return False
    return not value.startswith("-")


def is_identifier_segment(segment: str) -> bool:
    """Segments eligible for key folding and path expansion."""
    return bool(IDENTIFIER_SEGMENT_PATTERN.match(segment))


def encode_key(key: str) -> str:
    """Encode an object key, quoting it unless it is identifier-like."""
    if UNQUOTED_KEY_PATTERN.match(key):
        return key
    return f'"{escape_string(key)}"'


def encode_primitive(value: JsonPrimitive, delimiter: Delimiter = Delimiter.COMMA) -> str:
    """Encode a primitive value."""
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _encode_float(value)
    if is_safe_unquoted(value, delimiter):
        return value
    return f'"{escape_string(value)}"'


def _encode_float(value: float) -> str:
    """Shortest round-tripping digits in plain decimal form, never an exponent."""
    if math.isnan(value) or math.isinf(value):
        return "null"
    if value == 0.0:
        return "0"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def parse_number(token: str) -> int | float | None:
    """Parse a numeric token, or return None if it should stay a string."""
    if not NUMBER_PATTERN.match(token):
        return None

    digits = token.lstrip("-")
    if len(digits) > 1 and digits[0] == "0" and digits[1].isdigit():
        return None

    if "." not in token and "e" not in token.lower():
        return int(token)

    number = float(token)
    if math.isinf(number):
        return None
    if number == 0.0:
        return 0
    return number


def find_closing_quote(text: str, start: int) -> int:
    """Index of the quote closing the one at ``start``, or -1."""
    i = start + 1
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == '"':
            return i
        i += 1
    return -1


def find_unquoted(text: str, target: str) -> int:
    """Index of the first ``target`` character outside double quotes, or -1."""
    in_quotes = False
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and in_quotes:
            i += 2
            continue
        if char == '"':
            in_quotes = not in_quotes
        elif char == target and not in_quotes:
            return i
        i += 1
    return -1


def split_delimited(text: str, delimiter: Delimiter) -> list[tuple[str, int]]:
    """Split on ``delimiter`` outside quotes.

    Returns ``(token, offset)`` pairs; tokens are stripped and ``offset`` is the
    index of the token's first character within ``text``.
    """
    parts: list[tuple[str, int]] = []
    start = 0
    in_quotes = False
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and in_quotes:
            i += 2
            continue
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter.value and not in_quotes:
            parts.append(_stripped_part(text, start, i))
            start = i + 1
        i += 1
    parts.append(_stripped_part(text, start, len(text)))
    return parts


def _stripped_part(text: str, start: int, end: int) -> tuple[str, int]:
    raw = text[start:end]
    token = raw.strip()
    return token, start + (len(raw) - len(raw.lstrip()))
