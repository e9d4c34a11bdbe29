"""FastAPI server exposing the TOON operations as a REST API."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from toon_mcp import __version__
from toon_mcp.core import (
    ToonCoreError,
    compute_stats,
    decode_toon,
    encode_json,
    parse_json_input,
    validate_toon,
)
from toon_mcp.logging import configure_logging, get_logger
from toon_mcp.models import (
    ApiError,
    DecodeRequest,
    DecodeResponse,
    EncodeRequest,
    EncodeResponse,
    HealthResponse,
    StatsRequest,
    StatsResponse,
    ValidateRequest,
    ValidateResponse,
)
from toon_mcp.settings import settings

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    configure_logging(json_output=settings.log_json, log_level=settings.log_level)

    logger.info(
        "toon-mcp HTTP API started",
        host=settings.host,
        port=settings.port,
        version=__version__,
    )

    yield

    logger.info("toon-mcp HTTP API shutdown complete")


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title="toon-mcp",
    description="TOON encoding, decoding, validation and size statistics",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ToonCoreError)
async def toon_error_handler(request: Request, exc: ToonCoreError) -> JSONResponse:
    """Render core errors as 400 responses with structured details."""
    logger.info("Request failed", path=request.url.path, error=str(exc))
    body = ApiError.from_detail(exc.to_detail())
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


# ============================================================================
# Health Check
# ============================================================================


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", version=__version__)


# ============================================================================
# TOON Endpoints
# ============================================================================


@app.post("/api/v1/encode", response_model=EncodeResponse)
def encode(body: EncodeRequest) -> EncodeResponse:
    """Convert JSON to TOON."""
    value = parse_json_input(body.json_value)
    return EncodeResponse(toon=encode_json(value, body.options()))


@app.post("/api/v1/decode", response_model=DecodeResponse)
def decode(body: DecodeRequest) -> DecodeResponse:
    """Convert TOON to JSON."""
    return DecodeResponse(json=decode_toon(body.toon, body))


@app.post(
    "/api/v1/validate",
    response_model=ValidateResponse,
    response_model_exclude_none=True,
)
def validate(body: ValidateRequest) -> ValidateResponse:
    """Validate TOON syntax. Invalid documents still return 200."""
    return validate_toon(body.toon, body.strict)


@app.post("/api/v1/stats", response_model=StatsResponse)
def stats(body: StatsRequest) -> StatsResponse:
    """Compare JSON and TOON sizes."""
    value = parse_json_input(body.json_value)
    return compute_stats(value, body.encode_options)
