"""TOON decoder.

Errors carry 1-based line and column numbers so callers can point at the
offending character.
"""

from __future__ import annotations

import re

from toon_mcp.codec.errors import (
    ToonLengthMismatchError,
    ToonParseError,
    ToonPathExpansionError,
)
from toon_mcp.codec.strings import (
    RESERVED_LITERALS,
    find_closing_quote,
    find_unquoted,
    is_identifier_segment,
    parse_number,
    split_delimited,
    unescape_string,
)
from toon_mcp.codec.types import (
    ArrayHeader,
    DecodeOptions,
    Delimiter,
    JsonValue,
    ParsedLine,
    PathExpansionMode,
)

# Prefix for keys that were quoted in the source; such keys are never expanded.
QUOTED_KEY_MARKER = "\x00quoted\x00"

ARRAY_HEADER_PATTERN = re.compile(
    r'^(?P<key>(?:[^:\[\]{}"]+|"(?:[^"\\]|\\.)*")?)'
    r"\[(?P<length>\d+)(?P<delim>[,\t|])?\]"
    r"(?:\{(?P<fields>[^}]*)\})?"
    r":(?P<rest>.*)$"
)

BRACE_CHARS = frozenset("[]{}")

QUOTE_SUGGESTION = 'Wrap the value in double quotes, e.g. "{token}"'


def decode(text: str, options: DecodeOptions | None = None) -> JsonValue:
    """Decode TOON text into a JSON-compatible value.

    Args:
        text: The TOON document.
        options: Decoding options; defaults apply when omitted.

    Returns:
        The decoded value. An empty document decodes to ``{}``.

    Raises:
        ToonParseError: Malformed syntax, with line and column.
        ToonLengthMismatchError: Strict mode count disagreement.
        ToonPathExpansionError: Strict path expansion conflict.
    """
    opts = options or DecodeOptions()
    cursor = _Cursor(list(_scan_lines(text, opts)), opts)
    result = _decode_root(cursor)

    if opts.expand_paths is PathExpansionMode.SAFE:
        return _expand_paths(result, opts.strict)
    return result


class _Cursor:
    """Walks parsed lines, skipping blanks."""

    def __init__(self, lines: list[ParsedLine], options: DecodeOptions) -> None:
        self.lines = lines
        self.options = options
        self.pos = 0

    @property
    def mark_quoted(self) -> bool:
        return self.options.expand_paths is PathExpansionMode.SAFE

    def peek(self) -> ParsedLine | None:
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            if line.content:
                return line
            self.pos += 1
        return None

    def advance(self) -> ParsedLine | None:
        line = self.peek()
        if line is not None:
            self.pos += 1
        return line

    def peek_at_depth(self, depth: int) -> ParsedLine | None:
        line = self.peek()
        if line is not None and line.depth == depth:
            return line
        return None


def _scan_lines(text: str, opts: DecodeOptions):
    raw_lines = [raw.rstrip("\r") for raw in text.split("\n")]
    indent_size = opts.indent or _detect_indent(raw_lines)

    for number, raw in enumerate(raw_lines, start=1):
        stripped = raw.lstrip(" ")
        indent = len(raw) - len(stripped)
        content = stripped.rstrip()

        if content and opts.strict:
            if content[0] == "\t":
                raise ToonParseError(
                    "Tab character in indentation",
                    number,
                    indent + 1,
                    suggestion="Indent with spaces only",
                )
            if indent % indent_size:
                raise ToonParseError(
                    f"Indentation of {indent} spaces is not a multiple of {indent_size}",
                    number,
                    1,
                    suggestion=f"Indent each level by exactly {indent_size} spaces",
                )

        yield ParsedLine(
            raw=raw,
            content=content,
            indent=indent,
            depth=indent // indent_size,
            line_number=number,
        )


def _detect_indent(raw_lines: list[str]) -> int:
    """Width of the first indented non-blank line, or 2."""
    for raw in raw_lines:
        stripped = raw.lstrip(" ")
        if stripped.strip() and len(stripped) < len(raw):
            return len(raw) - len(stripped)
    return 2


def _decode_root(cursor: _Cursor) -> JsonValue:
    first = cursor.peek()
    if first is None:
        return {}

    header = _match_header(first, first.content, 0, cursor)
    if header is not None and header.key is None:
        cursor.advance()
        value = _decode_array_body(cursor, header, first, 0, 1)
    elif header is not None or find_unquoted(first.content, ":") != -1:
        value = _decode_object(cursor, 0)
    else:
        if first.content.startswith("["):
            raise _malformed_header(first, 0)
        cursor.advance()
        value = _parse_scalar(first.content, first, 0, cursor.options)

    _expect_end(cursor)
    return value


def _expect_end(cursor: _Cursor) -> None:
    line = cursor.peek()
    if line is None:
        return
    if line.depth > 0:
        raise ToonParseError(
            "Unexpected indentation",
            line.line_number,
            1,
            suggestion="Nested lines must sit exactly one level below their parent key",
        )
    raise ToonParseError(
        "Unexpected content after the root value",
        line.line_number,
        line.column(),
        suggestion="A document holds one root value; add a key to make it an object",
    )


def _decode_object(cursor: _Cursor, depth: int) -> dict:
    result: dict = {}
    _decode_fields_into(result, cursor, depth)
    return result


def _decode_fields_into(result: dict, cursor: _Cursor, depth: int) -> None:
    while True:
        line = cursor.peek_at_depth(depth)
        if line is None:
            return
        if _is_list_item(line.content):
            raise ToonParseError(
                "List item outside of an array",
                line.line_number,
                line.column(),
                suggestion="Declare the array with a header such as key[N]:",
            )
        cursor.advance()
        key, value = _decode_field(cursor, line, line.content, 0, depth + 1)
        if key in result and cursor.options.strict:
            raise ToonParseError(
                f"Duplicate key '{key.removeprefix(QUOTED_KEY_MARKER)}'",
                line.line_number,
                line.column(),
                suggestion="Each key may appear only once per object",
            )
        result[key] = value


def _decode_field(
    cursor: _Cursor,
    line: ParsedLine,
    content: str,
    offset: int,
    child_depth: int,
) -> tuple[str, JsonValue]:
    """Decode ``key: value`` (or an array header) found at ``content``.

    ``offset`` is where ``content`` starts within the line's content and
    ``child_depth`` is the depth of any nested lines.
    """
    header = _match_header(line, content, offset, cursor)
    if header is not None:
        if header.key is None:
            raise ToonParseError(
                "Missing key before array header",
                line.line_number,
                line.column(offset),
                suggestion="Name the array, e.g. items[N]:",
            )
        key = _parse_key(header.key, line, offset, cursor)
        return key, _decode_array_body(cursor, header, line, offset, child_depth)

    colon = find_unquoted(content, ":")
    if colon == -1:
        raise ToonParseError(
            "Missing colon after key",
            line.line_number,
            line.column(offset + len(content)),
            suggestion="Write fields as 'key: value'",
        )

    key_part = content[:colon].strip()
    if not key_part:
        raise ToonParseError(
            "Missing key before colon",
            line.line_number,
            line.column(offset + colon),
            suggestion='Use "" to write an empty key',
        )
    if key_part.startswith("[") or (key_part.endswith("]") and not key_part.startswith('"')):
        raise _malformed_header(line, offset)
    key = _parse_key(key_part, line, offset, cursor)

    after = content[colon + 1 :]
    value_part = after.strip()
    if value_part:
        value_offset = offset + colon + 1 + (len(after) - len(after.lstrip()))
        return key, _parse_scalar(value_part, line, value_offset, cursor.options)

    following = cursor.peek()
    if following is not None and following.depth >= child_depth:
        return key, _decode_object(cursor, child_depth)
    return key, {}


def _decode_array_body(
    cursor: _Cursor,
    header: ArrayHeader,
    line: ParsedLine,
    offset: int,
    child_depth: int,
) -> list:
    if header.fields:
        if header.rest:
            raise ToonParseError(
                "Unexpected values after a tabular header",
                line.line_number,
                line.column(offset + header.rest_offset),
                suggestion="Put tabular rows on their own indented lines",
            )
        return _decode_tabular_rows(cursor, header, line, child_depth)
    if header.rest:
        return _decode_inline_values(header, line, offset + header.rest_offset, cursor.options)
    if header.length == 0:
        return []
    return _decode_list_items(cursor, header, line, child_depth)


def _decode_inline_values(
    header: ArrayHeader, line: ParsedLine, offset: int, opts: DecodeOptions
) -> list:
    tokens = split_delimited(header.rest, header.delimiter)
    if opts.strict and len(tokens) != header.length:
        raise ToonLengthMismatchError(header.length, len(tokens), line.line_number)
    return [_parse_scalar(token, line, offset + pos, opts) for token, pos in tokens]


def _decode_tabular_rows(
    cursor: _Cursor, header: ArrayHeader, header_line: ParsedLine, depth: int
) -> list[dict]:
    opts = cursor.options
    width = len(header.fields)
    rows = []

    while len(rows) < header.length:
        line = cursor.peek_at_depth(depth)
        if line is None:
            break
        cursor.advance()

        cells = split_delimited(line.content, header.delimiter)
        if opts.strict and len(cells) != width:
            raise ToonLengthMismatchError(width, len(cells), line.line_number)

        # Missing cells read as null
        row: dict = dict.fromkeys(header.fields)
        for field, (token, pos) in zip(header.fields, cells):
            row[field] = _parse_scalar(token, line, pos, opts)
        rows.append(row)

    if opts.strict:
        found = len(rows) + _count_extra(cursor, depth, lambda _: True)
        if found != header.length:
            raise ToonLengthMismatchError(header.length, found, header_line.line_number)
    return rows


def _decode_list_items(
    cursor: _Cursor, header: ArrayHeader, header_line: ParsedLine, depth: int
) -> list:
    items: list = []

    while len(items) < header.length:
        line = cursor.peek_at_depth(depth)
        if line is None or not _is_list_item(line.content):
            break
        cursor.advance()
        items.append(_decode_list_item(cursor, line, depth))

    if cursor.options.strict:
        found = len(items) + _count_extra(cursor, depth, lambda ln: _is_list_item(ln.content))
        if found != header.length:
            raise ToonLengthMismatchError(header.length, found, header_line.line_number)
    return items


def _count_extra(cursor: _Cursor, depth: int, accept) -> int:
    """Count surplus lines at ``depth`` after a complete array body, without consuming them."""
    extra = 0
    for line in cursor.lines[cursor.pos :]:
        if not line.content:
            continue
        if line.depth < depth:
            break
        if line.depth == depth:
            if not accept(line):
                break
            extra += 1
    return extra


def _decode_list_item(cursor: _Cursor, line: ParsedLine, depth: int) -> JsonValue:
    content = line.content[2:].strip() if line.content != "-" else ""

    if not content:
        following = cursor.peek()
        if following is not None and following.depth > depth:
            return _decode_object(cursor, depth + 1)
        return {}

    header = _match_header(line, content, 2, cursor)
    if header is not None and header.key is None:
        return _decode_array_body(cursor, header, line, 2, depth + 1)

    if header is None and find_unquoted(content, ":") == -1:
        return _parse_scalar(content, line, 2, cursor.options)

    # Object whose first field shares the hyphen line.
    key, value = _decode_field(cursor, line, content, 2, depth + 2)
    result = {key: value}
    _decode_fields_into(result, cursor, depth + 1)
    return result


def _is_list_item(content: str) -> bool:
    return content == "-" or content.startswith("- ")


def _match_header(
    line: ParsedLine, content: str, offset: int, cursor: _Cursor
) -> ArrayHeader | None:
    match = ARRAY_HEADER_PATTERN.match(content)
    if match is None:
        return None

    delimiter = Delimiter(match.group("delim") or ",")
    fields: list[str] = []
    fields_text = match.group("fields")
    if fields_text is not None:
        fields_offset = offset + match.start("fields")
        for token, pos in split_delimited(fields_text, delimiter):
            if not token:
                raise ToonParseError(
                    "Empty field name in tabular header",
                    line.line_number,
                    line.column(fields_offset + pos),
                )
            fields.append(_parse_key(token, line, fields_offset + pos, cursor))

    raw_rest = match.group("rest")
    rest = raw_rest.strip()
    key = match.group("key").strip()
    return ArrayHeader(
        key=key or None,
        length=int(match.group("length")),
        delimiter=delimiter,
        fields=fields,
        rest=rest,
        rest_offset=match.start("rest") + (len(raw_rest) - len(raw_rest.lstrip())),
    )


def _malformed_header(line: ParsedLine, offset: int) -> ToonParseError:
    return ToonParseError(
        "Malformed array header",
        line.line_number,
        line.column(offset),
        suggestion="Array headers look like key[N]: a,b or key[N]{x,y}:",
    )


def _parse_key(token: str, line: ParsedLine, offset: int, cursor: _Cursor) -> str:
    token = token.strip()
    if token.startswith('"'):
        key = _parse_quoted(token, line, offset)
        return QUOTED_KEY_MARKER + key if cursor.mark_quoted else key

    if cursor.options.strict:
        _reject_braces(token, line, offset)
    return token


def _parse_scalar(token: str, line: ParsedLine, offset: int, opts: DecodeOptions) -> JsonValue:
    if token.startswith('"'):
        return _parse_quoted(token, line, offset)

    if opts.strict:
        _reject_braces(token, line, offset)

    if not opts.coerce_types:
        return token
    if token in RESERVED_LITERALS:
        return {"true": True, "false": False, "null": None}[token]

    number = parse_number(token)
    return token if number is None else number


def _parse_quoted(token: str, line: ParsedLine, offset: int) -> str:
    end = find_closing_quote(token, 0)
    if end == -1:
        raise ToonParseError(
            "Unterminated string",
            line.line_number,
            line.column(offset),
            suggestion="Close the string with a double quote",
        )
    if end != len(token) - 1:
        raise ToonParseError(
            "Unexpected characters after closing quote",
            line.line_number,
            line.column(offset + end + 1),
            suggestion="Quote the whole value",
        )

    try:
        return unescape_string(token[1:end])
    except ValueError as exc:
        message, index = exc.args
        raise ToonParseError(
            message,
            line.line_number,
            line.column(offset + 1 + index),
            suggestion='Only \\\\, \\", \\n, \\r and \\t are valid escapes',
        ) from exc


def _reject_braces(token: str, line: ParsedLine, offset: int) -> None:
    for index, char in enumerate(token):
        if char in BRACE_CHARS:
            raise ToonParseError(
                f"Unquoted value contains structural character '{char}'",
                line.line_number,
                line.column(offset + index),
                suggestion=QUOTE_SUGGESTION.format(token=token),
            )


def _expand_paths(value: JsonValue, strict: bool) -> JsonValue:
    """Expand dotted keys into nested objects and drop quoted-key markers."""
    if isinstance(value, list):
        return [_expand_paths(item, strict) for item in value]
    if not isinstance(value, dict):
        return value

    result: dict = {}
    for key, item in value.items():
        expanded = _expand_paths(item, strict)
        if key.startswith(QUOTED_KEY_MARKER):
            _assign(result, [key[len(QUOTED_KEY_MARKER) :]], expanded, strict)
        elif "." in key and all(is_identifier_segment(seg) for seg in key.split(".")):
            _assign(result, key.split("."), expanded, strict)
        else:
            _assign(result, [key], expanded, strict)
    return result


def _assign(target: dict, path: list[str], value: JsonValue, strict: bool) -> None:
    for index, segment in enumerate(path[:-1]):
        existing = target.get(segment)
        if existing is None and segment not in target:
            target[segment] = {}
        elif not isinstance(existing, dict):
            if strict:
                raise ToonPathExpansionError(".".join(path[: index + 1]))
            target[segment] = {}
        target = target[segment]

    last = path[-1]
    if last in target:
        if isinstance(target[last], dict) and isinstance(value, dict):
            for key, item in value.items():
                _assign(target[last], [key], item, strict)
            return
        if strict:
            raise ToonPathExpansionError(".".join(path))
    target[last] = value
