"""MCP server exposing the TOON operations as tools over stdio."""

from __future__ import annotations

from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations
from pydantic import Field

from toon_mcp.core import (
    ToonCoreError,
    compute_stats,
    decode_toon,
    encode_json,
    format_json_output,
    parse_json_input,
    validate_toon,
)
from toon_mcp.logging import get_logger
from toon_mcp.models import DecodeRequest, EncodeOptionsInput, StatsResponse, ValidateResponse

logger = get_logger(__name__)

mcp: FastMCP = FastMCP(
    name="toon-mcp",
    instructions=(
        "TOON (Token-Oriented Object Notation) codec. Use toon_encode to shrink JSON "
        "before sending it to a model, toon_decode to turn TOON back into JSON, "
        "toon_validate to check syntax, and toon_stats to measure the savings."
    ),
)

_READ_ONLY = ToolAnnotations(readOnlyHint=True, idempotentHint=True)

JsonInput = Annotated[
    Any,
    Field(description="JSON to encode: an object, an array, or a string containing JSON text"),
]
ToonInput = Annotated[str, Field(description="TOON text")]


def _tool_error(exc: ToonCoreError) -> ToolError:
    """Convert a core error into a tool error carrying its structured detail."""
    logger.warning("Tool call failed", error=str(exc))
    details = exc.to_detail().model_dump(exclude={"message"}, exclude_none=True)
    if not details:
        return ToolError(str(exc))
    return ToolError(f"{exc} {format_json_output(details)}")


@mcp.tool(annotations=_READ_ONLY)
def toon_ping() -> str:
    """Check that the server is running."""
    return "pong - toon-mcp server is running"


@mcp.tool(annotations=_READ_ONLY)
def toon_encode(
    json: JsonInput,
    delimiter: Annotated[
        str | None, Field(description='Delimiter: "comma" (default), "tab", or "pipe"')
    ] = None,
    indent: Annotated[
        int | None, Field(ge=0, le=255, description="Spaces for indentation (0-8, default: 2)")
    ] = None,
    fold_keys: Annotated[
        bool | None, Field(description="Fold single-key object chains into dotted keys")
    ] = None,
    flatten_depth: Annotated[
        int | None, Field(ge=0, description="Max segments in a folded key")
    ] = None,
) -> str:
    """Convert JSON to TOON format. Typically 30-60% fewer tokens than JSON."""
    options = EncodeOptionsInput(
        delimiter=delimiter,
        indent=indent,
        fold_keys=fold_keys,
        flatten_depth=flatten_depth,
    )
    try:
        return encode_json(parse_json_input(json), options)
    except ToonCoreError as exc:
        raise _tool_error(exc) from exc


@mcp.tool(annotations=_READ_ONLY)
def toon_decode(
    toon: ToonInput,
    strict: Annotated[bool | None, Field(description="Strict validation (default: true)")] = None,
    coerce_types: Annotated[
        bool | None, Field(description="Convert unquoted numbers, booleans and null (default: true)")
    ] = None,
    expand_paths: Annotated[
        bool | None, Field(description="Expand dotted keys into nested objects (default: false)")
    ] = None,
    output_format: Annotated[
        str | None, Field(description='Output: "json" (default) or "json_pretty"')
    ] = None,
) -> str:
    """Convert TOON back to JSON text."""
    request = DecodeRequest(
        toon=toon,
        strict=strict,
        coerce_types=coerce_types,
        expand_paths=expand_paths,
        output_format=output_format,
    )
    try:
        value = decode_toon(toon, request)
        return format_json_output(value, output_format)
    except ToonCoreError as exc:
        raise _tool_error(exc) from exc


@mcp.tool(annotations=_READ_ONLY)
def toon_validate(
    toon: ToonInput,
    strict: Annotated[bool | None, Field(description="Strict validation (default: true)")] = None,
) -> ValidateResponse:
    """Validate TOON syntax, reporting the line and column of the first error."""
    return validate_toon(toon, strict)


@mcp.tool(annotations=_READ_ONLY)
def toon_stats(
    json: JsonInput,
    encode_options: Annotated[
        EncodeOptionsInput | None, Field(description="Options used for the TOON side")
    ] = None,
) -> StatsResponse:
    """Compare token and byte counts between JSON and TOON."""
    try:
        return compute_stats(parse_json_input(json), encode_options)
    except ToonCoreError as exc:
        raise _tool_error(exc) from exc


def run() -> None:
    """Serve the tools over stdio."""
    mcp.run(transport="stdio", show_banner=False)
