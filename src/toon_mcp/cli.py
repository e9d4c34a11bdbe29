"""CLI for toon-mcp: serve TOON tools over MCP stdio or HTTP."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from toon_mcp.settings import ServerMode

app = typer.Typer(
    name="toon-mcp",
    help="TOON encoding and decoding for LLM prompts, served over MCP or HTTP.",
    no_args_is_help=True,
)

# stdout carries the MCP protocol in stdio mode
console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from toon_mcp import __version__

        typer.echo(f"toon-mcp v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """TOON encoding and decoding for LLM prompts."""


@app.command()
def info() -> None:
    """Show server configuration."""
    from toon_mcp import __version__
    from toon_mcp.settings import settings

    console.print(f"[bold]toon-mcp[/bold] v{__version__}")
    console.print()
    console.print("[bold]Configuration:[/bold]")
    console.print(f"  Mode: {settings.mode.value}")
    console.print(f"  HTTP Server: {settings.host}:{settings.port}")
    console.print(f"  CORS Origins: {', '.join(settings.cors_origins)}")
    console.print(f"  Verbose: {settings.verbose}")
    console.print(f"  JSON Logs: {settings.log_json}")
    console.print()
    console.print("[bold]MCP tools:[/bold] toon_ping, toon_encode, toon_decode, toon_validate, toon_stats")


@app.command()
def serve(
    mode: Annotated[
        ServerMode | None,
        typer.Option("--mode", "-m", help="Transport to serve: mcp (stdio) or http"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", "-h", help="Host to bind to (http mode)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port to bind to (http mode)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
    reload: Annotated[
        bool,
        typer.Option("--reload", help="Enable auto-reload for development (http mode)"),
    ] = False,
) -> None:
    """Start the server."""
    from toon_mcp import __version__
    from toon_mcp.logging import configure_logging
    from toon_mcp.settings import settings

    if verbose:
        settings.verbose = True
    actual_mode = mode or settings.mode
    configure_logging(json_output=settings.log_json, log_level=settings.log_level)

    if actual_mode is ServerMode.MCP:
        from toon_mcp.mcp_server import run

        console.print(f"[green]toon-mcp v{__version__} serving MCP over stdio[/green]")
        run()
        return

    import uvicorn

    actual_host = host or settings.host
    actual_port = port or settings.port

    console.print(f"[green]Starting toon-mcp v{__version__} HTTP API...[/green]")
    console.print(f"  Host: {actual_host}")
    console.print(f"  Port: {actual_port}")
    console.print()
    console.print(f"  API: http://{actual_host}:{actual_port}/api/v1/")
    console.print(f"  Health: http://{actual_host}:{actual_port}/health")
    console.print(f"  Docs: http://{actual_host}:{actual_port}/docs")
    console.print()

    uvicorn.run(
        "toon_mcp.server:app",
        host=actual_host,
        port=actual_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
