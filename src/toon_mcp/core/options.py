"""Translate public option records into codec option objects."""

from __future__ import annotations

from typing import Any

from toon_mcp.codec import (
    DecodeOptions,
    Delimiter,
    EncodeOptions,
    KeyFoldingMode,
    PathExpansionMode,
)
from toon_mcp.models import DecodeRequest, EncodeOptionsInput

MAX_INDENT = 8

_DELIMITERS = {
    "tab": Delimiter.TAB,
    "pipe": Delimiter.PIPE,
}


def build_encode_options(options: EncodeOptionsInput) -> EncodeOptions:
    """Build codec encode options.

    Unknown delimiter names fall back to comma rather than failing, and indent
    is clamped to ``MAX_INDENT``.
    """
    kwargs: dict[str, Any] = {
        "delimiter": _DELIMITERS.get(options.delimiter or "", Delimiter.COMMA),
        "key_folding": KeyFoldingMode.SAFE if options.fold_keys else KeyFoldingMode.OFF,
        "flatten_depth": options.flatten_depth,
    }
    if options.indent is not None:
        kwargs["indent"] = min(options.indent, MAX_INDENT)
    return EncodeOptions(**kwargs)


def build_decode_options(request: DecodeRequest) -> DecodeOptions:
    """Build codec decode options; absent flags keep the codec defaults."""
    kwargs: dict[str, Any] = {
        "expand_paths": PathExpansionMode.SAFE if request.expand_paths else PathExpansionMode.OFF,
    }
    if request.strict is not None:
        kwargs["strict"] = request.strict
    if request.coerce_types is not None:
        kwargs["coerce_types"] = request.coerce_types
    return DecodeOptions(**kwargs)
