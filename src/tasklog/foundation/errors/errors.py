"""Exceptions and structured failure payloads for tasklog.

Leveled logging calls never raise. The exceptions here are for construction
time mistakes (bad level names, unknown exporter or format names) where
failing fast is the only useful behavior.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class TasklogError(Exception):
    """Base class for tasklog exceptions."""


class ConfigurationError(TasklogError, ValueError):
    """Invalid logger, tracer or emitter configuration."""


class SerializationFailure(BaseModel):
    """Why a property bag could not be deep-copied.

    Carried in the Err branch of `sanitize_properties`; never raised.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    error_type: Annotated[str, Field(min_length=1)]
    reason: str = ""

    @classmethod
    def from_exc(cls, exc: BaseException) -> SerializationFailure:
        return cls(error_type=type(exc).__name__, reason=str(exc))

    def __str__(self) -> str:
        return f"{self.error_type}: {self.reason}" if self.reason else self.error_type
