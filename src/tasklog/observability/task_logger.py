"""Task logger: leveled logging and tracing behind one interface.

Task code receives a TaskLogger and never checks whether logging is on:

- FilteredTaskLogger emits structured records at or above a configured
  severity and delegates spans to a tracing backend.
- NoopTaskLogger does nothing for leveled calls and still runs traced
  functions, handing them an inert span.

Quick Start:
    >>> from tasklog import FilteredTaskLogger, TaskLoggerConfig, InMemoryLogEmitter, Tracer
    >>> emitter = InMemoryLogEmitter()
    >>> log = FilteredTaskLogger(TaskLoggerConfig(level="warn", emitter=emitter, tracer=Tracer()))
    >>> log.info("skipped")
    >>> log.error("payment failed", {"order": {"id": 42}})
    >>> [(r.severity_text, r.attributes["order.id"]) for r in emitter.records]
    [('error', 42)]
    >>> log.trace("charge", lambda span: span.set_attribute("amount", 12) and "done")
    'done'

Leveled calls never raise. Property bags are deep-copied through JSON with
exceptions rewritten to {name, message, stack}; a bag that cannot be copied
is flattened as-is instead of being dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Protocol, TypeVar, runtime_checkable

from tasklog.foundation.errors import Attributes, ConfigurationError, JsonMapping

from .attributes import SemanticInternalAttributes, flatten_attributes
from .clock import Clock, get_clock
from .emitter import LogEmitter, LogRecord, create_emitter
from .exporter import create_exporter
from .icons import IconLookup, icon_for_severity
from .levels import LogLevel, SeverityNumber, rank
from .serialize import safe_json_process
from .span import NoopSpan, SpanOptions
from .tracer import TaskTracer, Tracer

if TYPE_CHECKING:
    from tasklog.foundation.config import TasklogSettings

T = TypeVar("T")

Flattener = Callable[[Any], Attributes]

logger = logging.getLogger("tasklog.logger")

_ERROR, _WARN, _INFO, _DEBUG = rank(LogLevel.ERROR), rank(LogLevel.WARN), rank(LogLevel.INFO), rank(LogLevel.DEBUG)


@runtime_checkable
class TaskLogger(Protocol):
    """Capability interface shared by the active and disabled loggers."""

    def debug(self, message: str, properties: JsonMapping | None = None) -> None: ...
    def log(self, message: str, properties: JsonMapping | None = None) -> None: ...
    def info(self, message: str, properties: JsonMapping | None = None) -> None: ...
    def warn(self, message: str, properties: JsonMapping | None = None) -> None: ...
    def error(self, message: str, properties: JsonMapping | None = None) -> None: ...
    def trace(self, name: str, fn: Callable[[Any], T], options: SpanOptions | None = None) -> T: ...
    def start_span(self, name: str, options: SpanOptions | None = None) -> Any: ...


@dataclass(frozen=True, slots=True)
class TaskLoggerConfig:
    """Immutable configuration for FilteredTaskLogger.

    Attributes:
        emitter: Log-emission backend receiving LogRecords
        tracer: Tracing backend for trace() and start_span()
        level: Minimum severity emitted
        clock: Timestamp source (defaults to the process clock)
        icon_lookup: Severity number to display icon
        flatten: Nested property bag to flat attributes
    """

    emitter: LogEmitter
    tracer: TaskTracer
    level: LogLevel | str = LogLevel.INFO
    clock: Clock | None = None
    icon_lookup: IconLookup = icon_for_severity
    flatten: Flattener = flatten_attributes


class FilteredTaskLogger:
    """Emits leveled records at or above the configured severity.

    The level's rank is resolved once at construction. A call at rank r
    emits iff configured_rank >= r; `log` and `info` share a rank but keep
    their own severity text in the record.
    """

    __slots__ = ("_config", "_level", "_clock")

    def __init__(self, config: TaskLoggerConfig) -> None:
        try:
            self._level = rank(config.level)
        except ValueError as e:
            raise ConfigurationError(str(e)) from None
        self._config = config
        self._clock = config.clock or get_clock()

    @property
    def level(self) -> LogLevel:
        return LogLevel(str(self._config.level))

    def debug(self, message: str, properties: JsonMapping | None = None) -> None:
        if self._level < _DEBUG:
            return
        self._emit_log(message, "debug", SeverityNumber.DEBUG, properties)

    def log(self, message: str, properties: JsonMapping | None = None) -> None:
        if self._level < _INFO:
            return
        self._emit_log(message, "log", SeverityNumber.INFO, properties)

    def info(self, message: str, properties: JsonMapping | None = None) -> None:
        if self._level < _INFO:
            return
        self._emit_log(message, "info", SeverityNumber.INFO, properties)

    def warn(self, message: str, properties: JsonMapping | None = None) -> None:
        if self._level < _WARN:
            return
        self._emit_log(message, "warn", SeverityNumber.WARN, properties)

    def error(self, message: str, properties: JsonMapping | None = None) -> None:
        if self._level < _ERROR:
            return
        self._emit_log(message, "error", SeverityNumber.ERROR, properties)

    def _emit_log(self, message: str, severity_text: str, severity_number: SeverityNumber,
                  properties: JsonMapping | None) -> None:
        try:
            timestamp = self._clock.now()
            attributes = dict(self._config.flatten(safe_json_process(properties)))
            if (icon := self._config.icon_lookup(severity_number)) is not None:
                attributes[SemanticInternalAttributes.STYLE_ICON] = icon
            self._config.emitter.emit(LogRecord(
                severity_number=int(severity_number),
                severity_text=severity_text,
                body=message,
                attributes=attributes,
                timestamp=timestamp,
            ))
        except Exception:
            # Logging must never crash the task; no retry
            logger.warning("dropped %s record %r: log pipeline failed", severity_text, message, exc_info=True)

    def trace(self, name: str, fn: Callable[[Any], T], options: SpanOptions | None = None) -> T:
        """Run fn(span) inside an active span; returns fn's result, re-raises its errors."""
        return self._config.tracer.start_active_span(name, fn, options)

    def start_span(self, name: str, options: SpanOptions | None = None) -> Any:
        """Start a span without making it current."""
        return self._config.tracer.start_span(name, options)


class NoopTaskLogger:
    """Disabled logger: leveled calls cost nothing, traced code still runs."""

    __slots__ = ()

    def debug(self, message: str, properties: JsonMapping | None = None) -> None:
        pass

    def log(self, message: str, properties: JsonMapping | None = None) -> None:
        pass

    def info(self, message: str, properties: JsonMapping | None = None) -> None:
        pass

    def warn(self, message: str, properties: JsonMapping | None = None) -> None:
        pass

    def error(self, message: str, properties: JsonMapping | None = None) -> None:
        pass

    def trace(self, name: str, fn: Callable[[Any], T], options: SpanOptions | None = None) -> T:
        return fn(NoopSpan(name=name))

    def start_span(self, name: str, options: SpanOptions | None = None) -> NoopSpan:
        return NoopSpan(name=name)


def create_task_logger(
    settings: TasklogSettings | None = None,
    *,
    emitter: LogEmitter | None = None,
    tracer: TaskTracer | None = None,
    clock: Clock | None = None,
) -> TaskLogger:
    """Build the task logger selected by settings.

    Args:
        settings: Settings to use (defaults to get_settings(), i.e. TASKLOG_* env)
        emitter: Log backend overriding settings.logging.format
        tracer: Tracing backend overriding the settings-built Tracer
        clock: Timestamp source

    Returns:
        NoopTaskLogger when settings.enabled is False, else FilteredTaskLogger

    Example:
        >>> log = create_task_logger(TasklogSettings(level="debug"), emitter=JsonLogEmitter())
    """
    from tasklog.foundation.config import get_settings

    settings = settings or get_settings()
    if not settings.enabled:
        return NoopTaskLogger()
    return FilteredTaskLogger(TaskLoggerConfig(
        level=settings.level,
        emitter=emitter or create_emitter(settings.logging.format, colors=settings.logging.colors),
        tracer=tracer or Tracer(
            service_name=settings.service_name,
            exporter=create_exporter(settings.tracing.exporter),
            enabled=settings.tracing.enabled,
        ),
        clock=clock,
    ))
