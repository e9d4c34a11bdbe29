"""TOON encoder."""

from __future__ import annotations

import math
from collections.abc import Iterator
from typing import Any

from toon_mcp.codec.errors import ToonEncodeError
from toon_mcp.codec.strings import encode_key, encode_primitive, is_identifier_segment
from toon_mcp.codec.types import Delimiter, EncodeOptions, JsonValue, KeyFoldingMode


def encode(value: Any, options: EncodeOptions | None = None) -> str:
    """Encode a JSON-compatible value as TOON text.

    Args:
        value: dict, list or primitive built from JSON types.
        options: Encoding options; defaults apply when omitted.

    Returns:
        The TOON document, without a trailing newline.

    Raises:
        ToonEncodeError: If the value contains something JSON cannot express.
    """
    opts = options or EncodeOptions()
    if opts.indent < 0:
        raise ToonEncodeError(f"Indent must be non-negative, got {opts.indent}")
    if opts.flatten_depth is not None and opts.flatten_depth < 0:
        raise ToonEncodeError(f"Flatten depth must be non-negative, got {opts.flatten_depth}")

    normalized = _normalize(value)
    return "\n".join(_Encoder(opts).root(normalized))


class _Encoder:
    """Line generator bound to one set of options."""

    def __init__(self, options: EncodeOptions) -> None:
        self.options = options
        self.delimiter = options.delimiter

    def indent(self, depth: int) -> str:
        return " " * (self.options.indent * depth)

    def root(self, value: JsonValue) -> Iterator[str]:
        if isinstance(value, dict):
            yield from self.object_fields(value, 0)
        elif isinstance(value, list):
            yield from self.array(None, value, 0)
        else:
            yield encode_primitive(value, self.delimiter)

    def object_fields(self, obj: dict, depth: int, budget: float | None = None) -> Iterator[str]:
        """Encode the fields of ``obj``.

        ``budget`` is how many key segments folding may still join on this path;
        a folded key spends its segments and its remainder inherits what is left.
        """
        if budget is None:
            budget = self._fold_limit()
        siblings = set(obj)
        for key, value in obj.items():
            if self.options.key_folding is KeyFoldingMode.SAFE:
                folded = self._fold(key, value, siblings, budget)
                if folded is not None:
                    folded_key, remainder, segments = folded
                    yield from self.field(
                        folded_key, remainder, depth, key_encoded=True, budget=budget - segments
                    )
                    continue
            yield from self.field(key, value, depth, budget=budget)

    def field(
        self,
        key: str,
        value: JsonValue,
        depth: int,
        key_encoded: bool = False,
        budget: float | None = None,
    ) -> Iterator[str]:
        prefix = self.indent(depth)
        label = key if key_encoded else encode_key(key)

        if isinstance(value, dict):
            yield f"{prefix}{label}:"
            if value:
                yield from self.object_fields(value, depth + 1, budget)
        elif isinstance(value, list):
            yield from self.array(label, value, depth)
        else:
            yield f"{prefix}{label}: {encode_primitive(value, self.delimiter)}"

    def array(self, label: str | None, arr: list, depth: int, marker: str = "") -> Iterator[str]:
        """Encode an array whose header sits at ``depth``.

        ``marker`` is the ``"- "`` prefix when the header shares a list-item line;
        the items of such an array are nested one level further.
        """
        prefix = self.indent(depth) + marker
        name = label or ""
        item_depth = depth + (2 if marker and label else 1)

        if not arr:
            yield f"{prefix}{name}{self._bracket(0)}:"
        elif all(_is_primitive(item) for item in arr):
            values = self.delimiter.value.join(encode_primitive(v, self.delimiter) for v in arr)
            yield f"{prefix}{name}{self._bracket(len(arr))}: {values}"
        elif _is_tabular(arr):
            fields = list(arr[0])
            header = self.delimiter.value.join(encode_key(f) for f in fields)
            yield f"{prefix}{name}{self._bracket(len(arr))}{{{header}}}:"
            row_prefix = self.indent(item_depth)
            for row in arr:
                cells = (encode_primitive(row[f], self.delimiter) for f in fields)
                yield row_prefix + self.delimiter.value.join(cells)
        else:
            yield f"{prefix}{name}{self._bracket(len(arr))}:"
            for item in arr:
                yield from self.list_item(item, item_depth)

    def list_item(self, item: JsonValue, depth: int) -> Iterator[str]:
        prefix = self.indent(depth)

        if isinstance(item, dict):
            if not item:
                yield f"{prefix}-"
            else:
                yield from self._object_list_item(item, depth)
        elif isinstance(item, list):
            yield from self.array(None, item, depth, marker="- ")
        else:
            yield f"{prefix}- {encode_primitive(item, self.delimiter)}"

    def _object_list_item(self, obj: dict, depth: int) -> Iterator[str]:
        # First field shares the hyphen line; the rest sit one level deeper.
        items = iter(obj.items())
        first_key, first_value = next(items)
        prefix = self.indent(depth)
        label = encode_key(first_key)

        if isinstance(first_value, dict):
            yield f"{prefix}- {label}:"
            if first_value:
                yield from self.object_fields(first_value, depth + 2)
        elif isinstance(first_value, list):
            yield from self.array(label, first_value, depth, marker="- ")
        else:
            yield f"{prefix}- {label}: {encode_primitive(first_value, self.delimiter)}"

        for key, value in items:
            yield from self.field(key, value, depth + 1)

    def _bracket(self, length: int) -> str:
        if self.delimiter is Delimiter.COMMA:
            return f"[{length}]"
        return f"[{length}{self.delimiter.value}]"

    def _fold_limit(self) -> float:
        if self.options.flatten_depth is None:
            return math.inf
        return self.options.flatten_depth

    def _fold(
        self, key: str, value: JsonValue, siblings: set[str], limit: float
    ) -> tuple[str, JsonValue, int] | None:
        """Collapse a chain of single-key objects into a dotted key.

        Returns the encoded folded key, the value at the end of the chain and the
        number of segments joined, or None when the key cannot be folded safely.
        """
        if not is_identifier_segment(key):
            return None

        path = [key]
        current = value
        while isinstance(current, dict) and len(current) == 1 and len(path) < limit:
            ((next_key, next_value),) = current.items()
            if not is_identifier_segment(next_key):
                break
            path.append(next_key)
            current = next_value

        if len(path) < 2:
            return None

        folded_key = ".".join(path)
        if folded_key in siblings:
            return None
        return folded_key, current, len(path)


def _is_primitive(value: JsonValue) -> bool:
    return not isinstance(value, (dict, list))


def _is_tabular(arr: list) -> bool:
    """Uniform, non-empty objects with only primitive values."""
    if not all(isinstance(item, dict) and item for item in arr):
        return False

    keys = set(arr[0])
    for item in arr:
        if set(item) != keys:
            return False
        if not all(_is_primitive(v) for v in item.values()):
            return False
    return True


def _normalize(value: Any) -> JsonValue:
    """Reduce ``value`` to plain JSON types."""
    if value is None or isinstance(value, (bool, int, str)):
        return value

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return value

    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ToonEncodeError(f"Object keys must be strings, got {type(key).__name__}")
            result[key] = _normalize(item)
        return result

    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]

    raise ToonEncodeError(f"Cannot encode value of type {type(value).__name__}")
