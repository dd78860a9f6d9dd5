"""Configuration management using pydantic-settings."""

from .settings import LoggingSettings, TasklogSettings, TracingSettings, clear_settings_cache, get_settings

__all__ = [
    "LoggingSettings",
    "TasklogSettings",
    "TracingSettings",
    "clear_settings_cache",
    "get_settings",
]
