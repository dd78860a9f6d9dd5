"""Severity levels: the filtering ladder and backend severity numbers.

Two separate scales live here:

- LogLevel / rank(): the threshold ladder a TaskLogger filters on.
  ``none < error < warn < info == log < debug``.
- SeverityNumber: the OpenTelemetry log data model numbers written into
  emitted records.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class LogLevel(StrEnum):
    """Named filtering tier for a task logger."""

    NONE = "none"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    LOG = "log"
    DEBUG = "debug"


# Canonical five-level ladder; `log` shares the `info` position.
LOG_LEVELS: tuple[str, ...] = ("none", "error", "warn", "info", "debug")

_RANKS: dict[str, int] = {name: i for i, name in enumerate(LOG_LEVELS)} | {"log": LOG_LEVELS.index("info")}


def rank(level: LogLevel | str) -> int:
    """Position of a level on the ladder.

    Raises:
        ValueError: unknown level name
    """
    try:
        return _RANKS[str(level)]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}. Use one of {', '.join(LogLevel)}") from None


class SeverityNumber(IntEnum):
    """OpenTelemetry log severity numbers."""

    UNSPECIFIED = 0
    TRACE = 1
    TRACE2 = 2
    TRACE3 = 3
    TRACE4 = 4
    DEBUG = 5
    DEBUG2 = 6
    DEBUG3 = 7
    DEBUG4 = 8
    INFO = 9
    INFO2 = 10
    INFO3 = 11
    INFO4 = 12
    WARN = 13
    WARN2 = 14
    WARN3 = 15
    WARN4 = 16
    ERROR = 17
    ERROR2 = 18
    ERROR3 = 19
    ERROR4 = 20
    FATAL = 21
    FATAL2 = 22
    FATAL3 = 23
    FATAL4 = 24


_BANDS = ("trace", "debug", "info", "warn", "error", "fatal")


def severity_band(number: int) -> str | None:
    """Short band name for a severity number (1-4 trace ... 21-24 fatal)."""
    if not 1 <= number <= 24:
        return None
    return _BANDS[(number - 1) // 4]
