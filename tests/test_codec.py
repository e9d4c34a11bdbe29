"""Tests for the TOON encoder and decoder."""

from __future__ import annotations

from typing import Any

import pytest

from toon_mcp.codec import (
    DecodeOptions,
    Delimiter,
    EncodeOptions,
    KeyFoldingMode,
    PathExpansionMode,
    ToonEncodeError,
    ToonLengthMismatchError,
    ToonParseError,
    ToonPathExpansionError,
    decode,
    encode,
)

LENIENT = DecodeOptions(strict=False)
EXPAND = DecodeOptions(expand_paths=PathExpansionMode.SAFE)


class TestEncodeLayout:
    """Tests for the shape of encoded documents."""

    def test_flat_object(self, simple_json: dict[str, Any]) -> None:
        """Primitive fields become key: value lines."""
        assert encode(simple_json) == "name: Alice\nage: 30\nactive: true"

    def test_tabular_array(self, tabular_json: dict[str, Any]) -> None:
        """Uniform objects are written as a header plus rows."""
        assert encode(tabular_json) == (
            "users[3]{id,name,role}:\n"
            "  1,Alice,admin\n"
            "  2,Bob,user\n"
            "  3,Charlie,user"
        )

    def test_inline_primitive_array(self) -> None:
        """Primitive arrays stay on one line."""
        assert encode({"tags": ["a", "b", "c"]}) == "tags[3]: a,b,c"

    def test_nested_object_indentation(self) -> None:
        """Nested objects are indented by the configured width."""
        assert encode({"a": {"b": 1}}) == "a:\n  b: 1"
        assert encode({"a": {"b": 1}}, EncodeOptions(indent=4)) == "a:\n    b: 1"

    def test_mixed_array_uses_list_items(self) -> None:
        """Arrays mixing primitives, objects and arrays use hyphen items."""
        assert encode([1, {"a": 1}, [2]]) == "[3]:\n  - 1\n  - a: 1\n  - [1]: 2"

    def test_object_list_item_with_extra_fields(self) -> None:
        """Remaining fields of a list-item object sit one level below the hyphen."""
        data = {"items": [{"name": "x", "tags": ["a"]}]}
        assert encode(data) == "items[1]:\n  - name: x\n    tags[1]: a"

    def test_empty_containers(self) -> None:
        """Empty root object encodes to nothing; empty arrays keep their header."""
        assert encode({}) == ""
        assert encode([]) == "[0]:"
        assert encode({"a": {}, "b": []}) == "a:\nb[0]:"

    def test_root_primitive(self) -> None:
        """A primitive root is a single scalar line."""
        assert encode("hello") == "hello"
        assert encode(42) == "42"
        assert encode(None) == "null"


class TestEncodeDelimiters:
    """Tests for non-comma delimiters."""

    def test_tab_delimiter_in_bracket(self) -> None:
        """Tab delimiter is declared inside the bracket."""
        options = EncodeOptions(delimiter=Delimiter.TAB)
        assert encode({"tags": ["a", "b"]}, options) == "tags[2\t]: a\tb"

    def test_pipe_delimiter_tabular(self) -> None:
        """Pipe delimiter applies to the field list and rows."""
        options = EncodeOptions(delimiter=Delimiter.PIPE)
        data = {"rows": [{"a": 1, "b": 2}]}
        assert encode(data, options) == "rows[1|]{a|b}:\n  1|2"

    def test_active_delimiter_forces_quotes(self) -> None:
        """Only the active delimiter forces quoting."""
        assert encode({"v": ["a,b"]}) == 'v[1]: "a,b"'
        assert encode({"v": ["a,b"]}, EncodeOptions(delimiter=Delimiter.PIPE)) == "v[1|]: a,b"


class TestEncodeQuoting:
    """Tests for string quoting and number formatting."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("", '""'),
            ("42", '"42"'),
            ("true", '"true"'),
            (" padded", '" padded"'),
            ("a:b", '"a:b"'),
            ("[x]", '"[x]"'),
            ("- item", '"- item"'),
            ('say "hi"', '"say \\"hi\\""'),
            ("line\nbreak", '"line\\nbreak"'),
            ("hello world", "hello world"),
        ],
    )
    def test_string_quoting(self, value: str, expected: str) -> None:
        """Ambiguous strings are quoted and escaped."""
        assert encode({"v": value}) == f"v: {expected}"

    def test_non_identifier_keys_quoted(self) -> None:
        """Keys with spaces or leading digits are quoted."""
        assert encode({"first name": 1, "1st": 2}) == '"first name": 1\n"1st": 2'

    def test_float_formatting(self) -> None:
        """Whole floats drop the fraction; -0.0 becomes 0; non-finite becomes null."""
        assert encode({"a": 1.0, "b": -0.0, "c": 2.5}) == "a: 1\nb: 0\nc: 2.5"
        assert encode({"x": float("nan"), "y": float("inf")}) == "x: null\ny: null"

    def test_floats_never_use_exponents(self) -> None:
        """Very small and very large floats are written as plain decimals."""
        assert encode({"c": 1e-07, "d": 1e21}) == "c: 0.0000001\nd: 1000000000000000000000"
        assert encode({"e": -1.5e-10}) == "e: -0.00000000015"
        assert decode(encode({"c": 1e-07, "d": 1e21})) == {"c": 1e-07, "d": 1e21}

    def test_unsupported_type_raises(self) -> None:
        """Values JSON cannot express are rejected."""
        with pytest.raises(ToonEncodeError):
            encode({"when": object()})
        with pytest.raises(ToonEncodeError):
            encode({1: "a"})

    def test_negative_indent_raises(self) -> None:
        """Negative indentation is rejected."""
        with pytest.raises(ToonEncodeError):
            encode({"a": 1}, EncodeOptions(indent=-1))


class TestKeyFolding:
    """Tests for safe-mode key folding."""

    def test_folds_single_key_chain(self) -> None:
        """A chain of single-key objects collapses into a dotted key."""
        options = EncodeOptions(key_folding=KeyFoldingMode.SAFE)
        assert encode({"a": {"b": {"c": 1}}}, options) == "a.b.c: 1"

    def test_flatten_depth_limits_segments(self) -> None:
        """Folding stops once the key reaches flatten_depth segments."""
        options = EncodeOptions(key_folding=KeyFoldingMode.SAFE, flatten_depth=2)
        assert encode({"a": {"b": {"c": 1}}}, options) == "a.b:\n  c: 1"

    def test_exhausted_depth_stops_nested_folding(self) -> None:
        """The remainder of a folded chain does not start a new fold."""
        options = EncodeOptions(key_folding=KeyFoldingMode.SAFE, flatten_depth=2)
        data = {"a": {"b": {"c": {"d": 1}}}}
        assert encode(data, options) == "a.b:\n  c:\n    d: 1"

    def test_unused_depth_carries_into_remainder(self) -> None:
        """Segments left after a short fold stay available below it."""
        options = EncodeOptions(key_folding=KeyFoldingMode.SAFE, flatten_depth=3)
        data = {"a": {"b": {"x": 1, "y": 2}}}
        assert encode(data, options) == "a.b:\n  x: 1\n  y: 2"

    def test_sibling_collision_skips_fold(self) -> None:
        """Folding never produces a key that already exists as a sibling."""
        options = EncodeOptions(key_folding=KeyFoldingMode.SAFE)
        assert encode({"a": {"b": 1}, "a.b": 2}, options) == "a:\n  b: 1\na.b: 2"

    def test_off_by_default(self) -> None:
        """Without folding the nesting is kept."""
        assert encode({"a": {"b": 1}}) == "a:\n  b: 1"


class TestDecodeValues:
    """Tests for decoding well-formed documents."""

    def test_tabular(self) -> None:
        """Tabular rows become objects keyed by the header fields."""
        text = "users[2]{id,name}:\n  1,Alice\n  2,Bob"
        assert decode(text) == {
            "users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]
        }

    def test_scalar_coercion(self) -> None:
        """Unquoted scalars become numbers, booleans and null."""
        text = "a: 42\nb: -1.5\nc: true\nd: null\ne: 1e3\nf: 007"
        assert decode(text) == {"a": 42, "b": -1.5, "c": True, "d": None, "e": 1000.0, "f": "007"}

    def test_coerce_types_off(self) -> None:
        """With coercion off, unquoted scalars stay strings."""
        assert decode("a: 42\nb: true", DecodeOptions(coerce_types=False)) == {
            "a": "42",
            "b": "true",
        }

    def test_quoted_values_stay_strings(self) -> None:
        """Quoted numbers and literals are strings."""
        assert decode('a: "42"\nb: "null"') == {"a": "42", "b": "null"}

    def test_empty_document(self) -> None:
        """An empty or blank document decodes to an empty object."""
        assert decode("") == {}
        assert decode("\n\n") == {}

    def test_root_array_and_primitive(self) -> None:
        """Key-less headers and single scalars are valid roots."""
        assert decode("[2]: 1,2") == [1, 2]
        assert decode("[0]:") == []
        assert decode("hello world") == "hello world"

    def test_auto_detects_indent(self) -> None:
        """Four-space documents decode without configuring the width."""
        assert decode("a:\n    b:\n        c: 1") == {"a": {"b": {"c": 1}}}

    def test_tab_delimited_rows(self) -> None:
        """Tab-delimited headers split rows on tabs."""
        text = "rows[2\t]{a\tb}:\n  1\tx y\n  2\tz"
        assert decode(text) == {"rows": [{"a": 1, "b": "x y"}, {"a": 2, "b": "z"}]}


class TestDecodeErrors:
    """Tests for positioned parse errors and count mismatches."""

    def test_unquoted_brace_reports_position(self) -> None:
        """Structural characters in an unquoted value point at the first one."""
        with pytest.raises(ToonParseError) as exc_info:
            decode("not valid toon {{{")
        assert exc_info.value.line == 1
        assert exc_info.value.column == 16
        assert exc_info.value.suggestion is not None

    def test_missing_colon(self) -> None:
        """Nested lines without a colon are rejected."""
        with pytest.raises(ToonParseError) as exc_info:
            decode("a:\n  b c")
        assert exc_info.value.line == 2
        assert exc_info.value.message == "Missing colon after key"

    def test_unterminated_string(self) -> None:
        """Unterminated strings point at the opening quote."""
        with pytest.raises(ToonParseError) as exc_info:
            decode('a: "abc')
        assert (exc_info.value.line, exc_info.value.column) == (1, 4)

    def test_invalid_escape(self) -> None:
        """Unknown escapes point at the backslash."""
        with pytest.raises(ToonParseError) as exc_info:
            decode('a: "x\\q"')
        assert exc_info.value.column == 6
        assert "\\q" in exc_info.value.message

    def test_tab_indentation(self) -> None:
        """Tabs in indentation are rejected in strict mode."""
        with pytest.raises(ToonParseError) as exc_info:
            decode("a:\n\tb: 1")
        assert exc_info.value.line == 2

    def test_uneven_indentation(self) -> None:
        """Indentation must be a multiple of the detected width."""
        with pytest.raises(ToonParseError) as exc_info:
            decode("a:\n  b: 1\n   c: 2")
        assert exc_info.value.line == 3

    def test_unexpected_indentation(self) -> None:
        """An indented line under a primitive field has no parent."""
        with pytest.raises(ToonParseError) as exc_info:
            decode("key: value\n  invalid indent")
        assert exc_info.value.line == 2

    def test_content_after_root_primitive(self) -> None:
        """A primitive root cannot be followed by more lines."""
        with pytest.raises(ToonParseError) as exc_info:
            decode("hello\nworld")
        assert exc_info.value.line == 2

    def test_missing_array_key(self) -> None:
        """Array headers inside an object need a key."""
        with pytest.raises(ToonParseError, match="Missing key"):
            decode("a: 1\n[2]: x,y")

    def test_inline_length_mismatch(self) -> None:
        """Inline arrays must match their declared length."""
        with pytest.raises(ToonLengthMismatchError) as exc_info:
            decode("tags[3]: a,b")
        assert (exc_info.value.expected, exc_info.value.found) == (3, 2)

    def test_tabular_row_count_mismatch(self) -> None:
        """Tabular arrays must have exactly the declared rows."""
        with pytest.raises(ToonLengthMismatchError) as exc_info:
            decode("users[3]{id,name}:\n  1,Alice\n  2,Bob")
        assert (exc_info.value.expected, exc_info.value.found) == (3, 2)

    def test_tabular_row_width_mismatch(self) -> None:
        """Every row must have one cell per field."""
        with pytest.raises(ToonLengthMismatchError) as exc_info:
            decode("rows[1]{a,b}:\n  1")
        assert (exc_info.value.expected, exc_info.value.found) == (2, 1)

    def test_too_many_list_items(self) -> None:
        """Surplus list items are counted."""
        with pytest.raises(ToonLengthMismatchError) as exc_info:
            decode("items[1]:\n  - a\n  - b")
        assert (exc_info.value.expected, exc_info.value.found) == (1, 2)

    def test_duplicate_key_strict(self) -> None:
        """A repeated key points at its second occurrence."""
        with pytest.raises(ToonParseError) as exc_info:
            decode("a: 1\nb:\n  c: 1\n  c: 2")
        assert (exc_info.value.line, exc_info.value.column) == (4, 3)
        assert exc_info.value.message == "Duplicate key 'c'"

    def test_duplicate_key_in_list_item(self) -> None:
        """The hyphen-line field counts toward duplicates."""
        with pytest.raises(ToonParseError, match="Duplicate key"):
            decode("items[1]:\n  - id: 1\n    id: 2")

    def test_duplicate_key_lenient(self) -> None:
        """Non-strict mode keeps the last value."""
        assert decode("a: 1\na: 2", LENIENT) == {"a": 2}

    def test_lenient_mode_accepts_mismatches(self) -> None:
        """Non-strict mode keeps whatever items are present."""
        assert decode("tags[3]: a,b", LENIENT) == {"tags": ["a", "b"]}
        assert decode("users[3]{id}:\n  1\n  2", LENIENT) == {"users": [{"id": 1}, {"id": 2}]}
        assert decode("not valid toon {{{", LENIENT) == "not valid toon {{{"

    def test_lenient_short_row_padded_with_null(self) -> None:
        """Missing cells in a non-strict row become null, surplus cells are dropped."""
        text = "rows[2]{a,b}:\n  1\n  2,x,extra"
        assert decode(text, LENIENT) == {"rows": [{"a": 1, "b": None}, {"a": 2, "b": "x"}]}


class TestPathExpansion:
    """Tests for safe-mode path expansion."""

    def test_expands_dotted_keys(self) -> None:
        """Dotted identifier keys become nested objects."""
        assert decode("a.b.c: 1", EXPAND) == {"a": {"b": {"c": 1}}}

    def test_merges_shared_prefixes(self) -> None:
        """Keys sharing a prefix merge into one object."""
        assert decode("a.b: 1\na.c: 2", EXPAND) == {"a": {"b": 1, "c": 2}}

    def test_quoted_keys_not_expanded(self) -> None:
        """Quoted keys are kept literally."""
        assert decode('"a.b": 1', EXPAND) == {"a.b": 1}

    def test_off_by_default(self) -> None:
        """Without expansion dotted keys are kept."""
        assert decode("a.b: 1") == {"a.b": 1}

    def test_conflict_strict(self) -> None:
        """Expanding through a primitive is an error in strict mode."""
        with pytest.raises(ToonPathExpansionError):
            decode("a: 1\na.b: 2", EXPAND)

    def test_conflict_lenient(self) -> None:
        """Non-strict expansion lets the later key win."""
        options = DecodeOptions(strict=False, expand_paths=PathExpansionMode.SAFE)
        assert decode("a: 1\na.b: 2", options) == {"a": {"b": 2}}


class TestRoundTrip:
    """Decoding encoded output yields the original value."""

    def test_fixtures_round_trip(
        self,
        simple_json: dict[str, Any],
        tabular_json: dict[str, Any],
        nested_json: dict[str, Any],
        special_chars_json: dict[str, Any],
    ) -> None:
        """Objects, tables, nesting and special strings survive a round trip."""
        for value in (simple_json, tabular_json, nested_json, special_chars_json):
            assert decode(encode(value)) == value

    @pytest.mark.parametrize("delimiter", list(Delimiter))
    def test_round_trip_each_delimiter(
        self, delimiter: Delimiter, tabular_json: dict[str, Any]
    ) -> None:
        """Every delimiter decodes back to the same value."""
        data = {**tabular_json, "notes": ["a,b", "c|d", "e\tf"]}
        assert decode(encode(data, EncodeOptions(delimiter=delimiter))) == data

    def test_folding_round_trip_with_expansion(self) -> None:
        """Folded keys expand back into the original nesting."""
        data = {"config": {"server": {"port": 8080}}, "name": "x"}
        text = encode(data, EncodeOptions(key_folding=KeyFoldingMode.SAFE))
        assert text == "config.server.port: 8080\nname: x"
        assert decode(text, EXPAND) == data

    def test_nested_arrays_round_trip(self) -> None:
        """Arrays of arrays and arrays inside list items round trip."""
        data = {
            "matrix": [[1, 2], [3]],
            "groups": [{"rows": [{"k": 1}, {"k": 2}], "z": True}, {}],
        }
        assert decode(encode(data)) == data
