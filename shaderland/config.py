# shaderland/config.py
"""
Centralized application configuration using pydantic-settings.

All settings are read from environment variables or .env file.
Provider credentials live here too; the backend selector is the only
consumer that looks them up.
"""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Priority: environment variables > .env file > defaults
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    # --- Database ---
    DB_URL: str = Field(
        default="postgresql://localhost:5432/shaderland",
        description="PostgreSQL connection URL"
    )

    # --- Server ---
    HOST: str = Field(
        default="127.0.0.1",
        description="Server bind host"
    )
    PORT: int = Field(
        default=8888,
        description="Server bind port"
    )

    # --- Debug / Logging ---
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    OTEL_ENABLED: bool = Field(
        default=True,
        description="Instrument FastAPI and SQLAlchemy with OpenTelemetry"
    )

    # --- Model providers ---
    ANTHROPIC_API_KEY: Optional[str] = Field(default=None, description="Anthropic credential")
    MISTRAL_API_KEY: Optional[str] = Field(default=None, description="Mistral credential")
    GOOGLE_GENERATIVE_AI_API_KEY: Optional[str] = Field(default=None, description="Google Gemini credential")

    DEFAULT_MODEL: str = Field(
        default="claude-3-5-sonnet-20241022",
        description="Model used when a generation request names none"
    )
    MODEL_MAX_OUTPUT_TOKENS: int = Field(
        default=4096,
        description="Output token cap passed to every backend"
    )
    MODEL_TIMEOUT_SECONDS: float = Field(
        default=120.0,
        description="Deadline for a single completion call"
    )

    # --- Listing ---
    RECENT_DEFAULT_LIMIT: int = Field(default=5, description="Default page size for recent shaders")
    RECENT_MAX_LIMIT: int = Field(default=50, description="Upper bound for recent shaders")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v_upper

    @field_validator("ANTHROPIC_API_KEY", "MISTRAL_API_KEY", "GOOGLE_GENERATIVE_AI_API_KEY")
    @classmethod
    def blank_key_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance (singleton pattern)."""
    return Settings()


# --- Singleton instance for easy import ---
settings = get_settings()


# --- Backward-compatible module-level exports ---

# Database
DATABASE_URL: str = settings.DB_URL

# Server
HOST: str = settings.HOST
PORT: int = settings.PORT
DEBUG: bool = settings.DEBUG
LOG_LEVEL: str = settings.LOG_LEVEL

# --- Paths (computed, not from env) ---
PROJECT_ROOT: str = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
LOGS_PATH: str = os.path.join(PROJECT_ROOT, "logs")
