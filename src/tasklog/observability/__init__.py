"""Observability: task logger, log emitters, spans, tracer and exporters.

OpenTelemetry backends live in `tasklog.observability.otel` (extra: otel)
and are not imported here.
"""

from .attributes import (
    CIRCULAR_SENTINEL,
    NULL_SENTINEL,
    SemanticInternalAttributes,
    flatten_attributes,
    unflatten_attributes,
)
from .clock import Clock, ClockTime, ManualClock, PreciseWallClock, get_clock, set_clock
from .context import SpanContext, TraceContext, current_span_context
from .emitter import (
    ConsoleLogEmitter,
    InMemoryLogEmitter,
    JsonLogEmitter,
    LogEmitter,
    LogRecord,
    NoOpLogEmitter,
    create_emitter,
)
from .exporter import (
    Exporter,
    InMemoryExporter,
    JsonExporter,
    NoOpExporter,
    create_exporter,
)
from .icons import icon_for_severity
from .levels import LOG_LEVELS, LogLevel, SeverityNumber, rank, severity_band
from .serialize import safe_json_process, sanitize_properties
from .span import NoopSpan, Span, SpanEvent, SpanKind, SpanOptions, SpanStatus
from .task_logger import FilteredTaskLogger, NoopTaskLogger, TaskLogger, TaskLoggerConfig, create_task_logger
from .tracer import ActiveSpan, TaskTracer, Tracer, configure_tracing, get_tracer

__all__ = [
    # Task logger
    "TaskLogger", "TaskLoggerConfig", "FilteredTaskLogger", "NoopTaskLogger", "create_task_logger",
    # Levels
    "LogLevel", "LOG_LEVELS", "SeverityNumber", "rank", "severity_band", "icon_for_severity",
    # Properties & attributes
    "sanitize_properties", "safe_json_process",
    "flatten_attributes", "unflatten_attributes", "SemanticInternalAttributes",
    "NULL_SENTINEL", "CIRCULAR_SENTINEL",
    # Log emission
    "LogRecord", "LogEmitter", "ConsoleLogEmitter", "JsonLogEmitter", "InMemoryLogEmitter",
    "NoOpLogEmitter", "create_emitter",
    # Clock
    "Clock", "ClockTime", "PreciseWallClock", "ManualClock", "get_clock", "set_clock",
    # Tracing
    "TaskTracer", "Tracer", "ActiveSpan", "configure_tracing", "get_tracer",
    "Span", "NoopSpan", "SpanEvent", "SpanKind", "SpanOptions", "SpanStatus",
    "SpanContext", "TraceContext", "current_span_context",
    # Exporters
    "Exporter", "NoOpExporter", "JsonExporter", "InMemoryExporter", "create_exporter",
]
