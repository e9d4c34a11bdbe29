"""Option and value types for the TOON codec."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list["JsonValue"], dict[str, "JsonValue"]]


class Delimiter(str, Enum):
    """Delimiter used for inline arrays and tabular rows."""

    COMMA = ","
    TAB = "\t"
    PIPE = "|"


class KeyFoldingMode(str, Enum):
    """Whether single-key object chains are folded into dotted keys."""

    OFF = "off"
    SAFE = "safe"


class PathExpansionMode(str, Enum):
    """Whether dotted keys are expanded back into nested objects."""

    OFF = "off"
    SAFE = "safe"


@dataclass(frozen=True)
class EncodeOptions:
    """Options for TOON encoding."""

    indent: int = 2
    """Number of spaces per indentation level."""

    delimiter: Delimiter = Delimiter.COMMA
    """Delimiter for inline arrays and tabular rows."""

    key_folding: KeyFoldingMode = KeyFoldingMode.OFF
    """Fold single-key object chains into dotted paths."""

    flatten_depth: int | None = None
    """Maximum number of segments in a folded key. None means unbounded."""


@dataclass(frozen=True)
class DecodeOptions:
    """Options for TOON decoding."""

    strict: bool = True
    """Reject malformed input (count mismatches, bad indentation, stray structure)."""

    coerce_types: bool = True
    """Turn unquoted scalars into numbers, booleans and null."""

    expand_paths: PathExpansionMode = PathExpansionMode.OFF
    """Expand dotted keys into nested objects."""

    indent: int | None = None
    """Indentation width in spaces. None detects it from the first indented line."""


@dataclass
class ParsedLine:
    """A source line split into indentation and content."""

    raw: str
    content: str
    indent: int
    depth: int
    line_number: int

    def column(self, offset: int = 0) -> int:
        """1-based column of ``offset`` within the stripped content."""
        return self.indent + offset + 1


@dataclass
class ArrayHeader:
    """Parsed ``key[N<delim>]{fields}:`` header."""

    key: str | None
    length: int
    delimiter: Delimiter
    fields: list[str]
    rest: str
    rest_offset: int = 0
