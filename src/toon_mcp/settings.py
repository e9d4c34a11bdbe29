"""Application settings using pydantic-settings."""

from __future__ import annotations

from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerMode(str, Enum):
    """Which transport ``toon-mcp serve`` starts."""

    MCP = "mcp"
    HTTP = "http"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    TOON_ prefix, e.g. ``TOON_MODE=http TOON_PORT=9000``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Transport
    mode: ServerMode = ServerMode.MCP

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["*"]

    # Logging
    verbose: bool = False
    log_json: bool = False

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.verbose else "INFO"


settings = Settings()
