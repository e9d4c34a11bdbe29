"""structlog setup for the toon-mcp server and CLI.

Every log line goes to stderr. Under ``--mode mcp`` stdout is the JSON-RPC
channel, so nothing else may write there.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _renderer(json_output: bool) -> list[Any]:
    if json_output:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Route structlog and the stdlib root logger to stderr at ``log_level``.

    ``json_output`` picks one JSON object per line (for log collectors) over
    the colored console format. ``log_level`` is a stdlib level name in any case.
    """
    level = getattr(logging, log_level.upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ExtraAdder(),
            *_renderer(json_output),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # uvicorn and fastmcp log through stdlib
    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger for a ``toon_mcp`` module; pass ``__name__``."""
    return structlog.get_logger(name)
