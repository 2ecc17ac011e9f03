"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- State is in memory only, so there is no database configuration
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Project Configuration
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level applied on startup"
    )

    # Application Configuration
    BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Base URL for generating short URLs"
    )

    # Short URL Configuration
    DEFAULT_VALIDITY_MINUTES: int = Field(
        default=30,
        description="Validity window used when a request does not specify one"
    )
    MAX_VALIDITY_MINUTES: int = Field(
        default=1440,
        description="Upper bound accepted for a requested validity window (24 hours)"
    )
    SHORT_CODE_LENGTH: int = Field(
        default=6,
        description="Length of randomly generated short codes"
    )
    MAX_GENERATION_ATTEMPTS: int = Field(
        default=10,
        description="Random draws tried before giving up on a unique short code"
    )

    # Background Sweep Configuration
    SWEEP_INTERVAL_SECONDS: float = Field(
        default=3600,
        description="Seconds between purges of expired short URLs"
    )

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable per-IP rate limiting on API endpoints"
    )


settings = Settings()
