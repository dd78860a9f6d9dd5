"""OpenTelemetry backends for FilteredTaskLogger. Requires: pip install tasklog[otel]

- OtelTracerBridge: TaskTracer over an opentelemetry Tracer
- OtelLogEmitter: LogEmitter over an opentelemetry (logs API) Logger

Example:
    >>> from tasklog import FilteredTaskLogger, TaskLoggerConfig
    >>> from tasklog.observability.otel import OtelLogEmitter, OtelTracerBridge
    >>> log = FilteredTaskLogger(TaskLoggerConfig(
    ...     level="info",
    ...     emitter=OtelLogEmitter.from_global("billing"),
    ...     tracer=OtelTracerBridge.from_global("billing"),
    ... ))
"""

from __future__ import annotations

import inspect
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

try:
    from opentelemetry import _logs as otel_logs
    from opentelemetry import trace as otel_trace
except ImportError as e:
    raise ImportError("OpenTelemetry backends require: pip install tasklog[otel]") from e

from .attributes import flatten_attributes
from .emitter import LogRecord
from .span import SpanKind, SpanOptions

T = TypeVar("T")

_KINDS = {
    SpanKind.INTERNAL: otel_trace.SpanKind.INTERNAL,
    SpanKind.SERVER: otel_trace.SpanKind.SERVER,
    SpanKind.CLIENT: otel_trace.SpanKind.CLIENT,
    SpanKind.PRODUCER: otel_trace.SpanKind.PRODUCER,
    SpanKind.CONSUMER: otel_trace.SpanKind.CONSUMER,
}


def _span_kwargs(options: SpanOptions | None) -> dict[str, Any]:
    """SpanOptions as keyword arguments for the OTel tracer API."""
    if options is None:
        return {}
    kw: dict[str, Any] = {"kind": _KINDS[options.kind]}
    if options.attributes:
        kw["attributes"] = flatten_attributes(options.attributes)
    if options.start_time is not None:
        kw["start_time"] = int(options.start_time * 1e9)
    return kw


@dataclass(slots=True)
class OtelTracerBridge:
    """TaskTracer backed by OpenTelemetry. Span lifecycle follows the OTel SDK:
    exceptions are recorded, status set to ERROR, and the span ended."""

    tracer: otel_trace.Tracer

    @classmethod
    def from_global(cls, name: str = "tasklog") -> OtelTracerBridge:
        """Bridge over a tracer from the globally configured TracerProvider."""
        return cls(otel_trace.get_tracer(name))

    def start_span(self, name: str, options: SpanOptions | None = None) -> otel_trace.Span:
        return self.tracer.start_span(name, **_span_kwargs(options))

    def start_active_span(self, name: str, fn: Callable[[otel_trace.Span], T], options: SpanOptions | None = None) -> T:
        if inspect.iscoroutinefunction(fn):
            return self._start_active_span_async(name, fn, options)  # type: ignore[return-value]
        span = self.tracer.start_span(name, **_span_kwargs(options))
        try:
            with otel_trace.use_span(span, record_exception=True, set_status_on_exception=True):
                result = fn(span)
        except BaseException:
            span.end()
            raise
        if inspect.isawaitable(result):
            return self._await_in_span(span, result)  # type: ignore[return-value]
        span.end()
        return result

    async def _start_active_span_async(self, name: str, fn: Callable[[otel_trace.Span], Awaitable[T]],
                                       options: SpanOptions | None) -> T:
        with self.tracer.start_as_current_span(name, **_span_kwargs(options)) as span:
            return await fn(span)

    async def _await_in_span(self, span: otel_trace.Span, awaitable: Awaitable[T]) -> T:
        with otel_trace.use_span(span, end_on_exit=True, record_exception=True, set_status_on_exception=True):
            return await awaitable


@dataclass(slots=True)
class OtelLogEmitter:
    """LogEmitter handing records to an OpenTelemetry logs-API Logger."""

    logger: otel_logs.Logger

    @classmethod
    def from_global(cls, name: str = "tasklog") -> OtelLogEmitter:
        """Emitter over a logger from the globally configured LoggerProvider."""
        return cls(otel_logs.get_logger(name))

    def emit(self, record: LogRecord) -> None:
        self.logger.emit(otel_logs.LogRecord(
            timestamp=record.timestamp_ns,
            observed_timestamp=time.time_ns(),
            severity_text=record.severity_text,
            severity_number=otel_logs.SeverityNumber(record.severity_number),
            body=record.body,
            attributes=record.attributes,
        ))
