"""Log records and the log-emission backends that receive them.

A LogRecord is built once per emitted call and handed to a LogEmitter.
emit() is a synchronous hand-off: an emitter may print, buffer or enqueue
the record for export, but never reports success back to the logger.

Bundled emitters:
- ConsoleLogEmitter: Human-readable colored output
- JsonLogEmitter: JSON Lines for log aggregation
- InMemoryLogEmitter: Collects records for assertions in tests
- NoOpLogEmitter: Drops everything
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, TextIO, runtime_checkable

import orjson

from tasklog.foundation.errors import Attributes, ConfigurationError

from .clock import ClockTime, clock_time_to_ns, clock_time_to_seconds


@dataclass(frozen=True, slots=True)
class LogRecord:
    """Structured record handed to a LogEmitter."""

    severity_number: int
    severity_text: str
    body: str
    attributes: Attributes
    timestamp: ClockTime

    @property
    def timestamp_ns(self) -> int:
        return clock_time_to_ns(self.timestamp)

    @property
    def ts_iso(self) -> str:
        """ISO formatted timestamp."""
        return datetime.fromtimestamp(clock_time_to_seconds(self.timestamp), tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """Human-readable timestamp (HH:MM:SS.mmm)."""
        return datetime.fromtimestamp(clock_time_to_seconds(self.timestamp), tz=UTC).strftime("%H:%M:%S.%f")[:-3]


@runtime_checkable
class LogEmitter(Protocol):
    """Protocol for log-emission backends."""

    def emit(self, record: LogRecord) -> None: ...


@dataclass(slots=True)
class NoOpLogEmitter:
    """Drops every record."""

    def emit(self, record: LogRecord) -> None:
        pass


@dataclass(slots=True)
class InMemoryLogEmitter:
    """Keeps emitted records in a list."""

    records: list[LogRecord] = field(default_factory=list)

    def emit(self, record: LogRecord) -> None:
        self.records.append(record)

    def clear(self) -> None:
        self.records.clear()


@dataclass(slots=True)
class ConsoleLogEmitter:
    """Human-readable colored console output. Format: timestamp [level] body key=value ..."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = auto-detect
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = getattr(self.output, "isatty", lambda: False)()

    def emit(self, record: LogRecord) -> None:
        c = _COLORS if self.colors else _NO_COLORS
        parts = ([f"{c['dim']}{record.ts_human}{c['reset']}"] if self.show_timestamp else [])
        level_color = _LEVEL_COLORS.get(record.severity_text, c["dim"]) if self.colors else ""
        parts += [f"{level_color}[{record.severity_text}]{c['reset']}",
                  f"{c['bold']}{record.body}{c['reset']}"]
        parts += [f"{c['cyan']}{k}{c['reset']}={_format_value(v, c)}"
                  for k, v in sorted(record.attributes.items()) if not k.startswith("$")]
        print(" ".join(parts), file=self.output)


@dataclass(slots=True)
class JsonLogEmitter:
    """JSON Lines output for log aggregation (Elasticsearch, Loki, Datadog, etc.)."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def emit(self, record: LogRecord) -> None:
        print(orjson.dumps({
            "timestamp": record.ts_iso,
            "severity_number": record.severity_number,
            "severity_text": record.severity_text,
            "body": record.body,
            "attributes": record.attributes,
        }, option=orjson.OPT_NON_STR_KEYS).decode(), file=self.output)


def create_emitter(format: str, *, colors: bool | None = None) -> LogEmitter:  # noqa: A002 - matches settings field
    """Emitter by format name: "console" (human), "json" (machine), "none"."""
    match format:
        case "console": return ConsoleLogEmitter(colors=colors)
        case "json": return JsonLogEmitter()
        case "none": return NoOpLogEmitter()
        case _: raise ConfigurationError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


_COLORS = {"reset": "\033[0m", "bold": "\033[1m", "dim": "\033[2m", "red": "\033[31m",
           "green": "\033[32m", "yellow": "\033[33m", "blue": "\033[34m", "cyan": "\033[36m", "white": "\033[37m"}
_NO_COLORS = {k: "" for k in _COLORS}
_LEVEL_COLORS = {"debug": _COLORS["dim"], "log": _COLORS["white"], "info": _COLORS["green"],
                 "warn": _COLORS["yellow"], "error": _COLORS["red"]}


def _format_value(v: object, c: dict[str, str]) -> str:
    """Format a value for console output."""
    match v:
        case str(): return f'{c["yellow"]}"{v}"{c["reset"]}'
        case bool(): return f'{c["blue"]}{str(v).lower()}{c["reset"]}'
        case int() | float(): return f'{c["blue"]}{v}{c["reset"]}'
        case _: return f'{c["white"]}{v!r}{c["reset"]}'
