"""tasklog - Severity-filtered task logging unified with tracing spans.

Task code talks to one TaskLogger for leveled logs and spans. Whether
logging is on, and at which severity, is decided once when the logger is
built; call sites never branch.

Quick Start:
    >>> from tasklog import create_task_logger, TasklogSettings
    >>>
    >>> log = create_task_logger(TasklogSettings(level="warn", logging={"format": "json"}))
    >>> log.info("not emitted")
    >>> log.warn("retrying upload", {"attempt": 2, "error": TimeoutError("slow")})
    >>>
    >>> def charge(span):
    ...     span.set_attribute("amount", 1200)
    ...     return "charged"
    >>> log.trace("charge-card", charge)
    'charged'

Explicit wiring:
    >>> from tasklog import FilteredTaskLogger, TaskLoggerConfig, InMemoryLogEmitter, Tracer
    >>> emitter = InMemoryLogEmitter()
    >>> log = FilteredTaskLogger(TaskLoggerConfig(level="debug", emitter=emitter, tracer=Tracer()))

Disabled logging (TASKLOG_ENABLED=false):
    >>> from tasklog import NoopTaskLogger
    >>> NoopTaskLogger().trace("step", lambda span: span.is_recording)
    False
"""

from __future__ import annotations

__version__ = "0.1.0"

from .observability import (
    ConsoleLogEmitter,
    FilteredTaskLogger,
    InMemoryExporter,
    InMemoryLogEmitter,
    JsonLogEmitter,
    LogEmitter,
    LogLevel,
    LogRecord,
    ManualClock,
    NoOpLogEmitter,
    NoopSpan,
    NoopTaskLogger,
    SemanticInternalAttributes,
    SeverityNumber,
    Span,
    SpanKind,
    SpanOptions,
    SpanStatus,
    TaskLogger,
    TaskLoggerConfig,
    TaskTracer,
    Tracer,
    configure_tracing,
    create_task_logger,
    flatten_attributes,
    get_tracer,
)
from .foundation.config import TasklogSettings, clear_settings_cache, get_settings
from .foundation.errors import ConfigurationError, TasklogError

__all__ = [
    "__version__",
    # Task logger
    "TaskLogger", "TaskLoggerConfig", "FilteredTaskLogger", "NoopTaskLogger", "create_task_logger",
    "LogLevel", "SeverityNumber", "SemanticInternalAttributes", "flatten_attributes",
    # Backends
    "LogEmitter", "LogRecord", "ConsoleLogEmitter", "JsonLogEmitter", "InMemoryLogEmitter", "NoOpLogEmitter",
    "TaskTracer", "Tracer", "configure_tracing", "get_tracer", "InMemoryExporter",
    "Span", "NoopSpan", "SpanKind", "SpanOptions", "SpanStatus", "ManualClock",
    # Config & errors
    "TasklogSettings", "get_settings", "clear_settings_cache",
    "TasklogError", "ConfigurationError",
]
