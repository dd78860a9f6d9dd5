"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from tasklog.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.level
    <LogLevel.INFO: 'info'>
    >>> settings.logging.format
    'console'

    # Or with environment variables:
    # TASKLOG_LEVEL=debug
    # TASKLOG_LOG_FORMAT=json
    # TASKLOG_TRACING_EXPORTER=none
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tasklog.observability.levels import LogLevel


class LoggingSettings(BaseSettings):
    """Log emission configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TASKLOG_LOG_",
        extra="ignore",
    )

    format: Literal["console", "json", "none"] = "console"
    colors: bool | None = Field(default=None, description="Force colored console output (None = auto-detect)")


class TracingSettings(BaseSettings):
    """Tracing configuration for the bundled tracer."""

    model_config = SettingsConfigDict(
        env_prefix="TASKLOG_TRACING_",
        extra="ignore",
    )

    enabled: bool = True
    exporter: Literal["json", "memory", "none"] = "none"


class TasklogSettings(BaseSettings):
    """Root settings for tasklog.

    Loads configuration from environment variables with TASKLOG_ prefix.

    Example environment variables:
        TASKLOG_ENABLED=false
        TASKLOG_LEVEL=warn
        TASKLOG_SERVICE_NAME=billing-worker
        TASKLOG_LOG_FORMAT=json
        TASKLOG_TRACING_EXPORTER=json
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    enabled: bool = Field(default=True, description="False selects the no-op task logger")
    level: LogLevel = Field(default=LogLevel.INFO, description="Minimum severity that is emitted")
    service_name: str = "tasklog"

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    tracing: TracingSettings = Field(default_factory=TracingSettings)

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: object) -> object:
        """Accept level names in any case."""
        return v.strip().lower() if isinstance(v, str) else v


@lru_cache(maxsize=1)
def get_settings() -> TasklogSettings:
    """Get the global settings instance (cached)."""
    return TasklogSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
