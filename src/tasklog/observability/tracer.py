"""Tracer for creating and managing spans.

TaskTracer is the tracing backend contract a TaskLogger delegates to:

- start_span(name, options) returns a span without making it current
- start_active_span(name, fn, options) runs fn(span) with the span current,
  ends it (ok or error) and returns fn's result

Tracer is the bundled in-process implementation. When fn is a coroutine
function or returns an awaitable, start_active_span returns an awaitable and
the span stays current until it completes.
"""

from __future__ import annotations

import inspect
import logging
import time
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, TypeVar, runtime_checkable

from .context import SpanContext, TraceContext, current_span_context
from .exporter import Exporter, NoOpExporter, create_exporter
from .span import NoopSpan, Span, SpanOptions, SpanStatus

if TYPE_CHECKING:
    from types import TracebackType

T = TypeVar("T")

logger = logging.getLogger("tasklog.tracer")

_DEFAULT_OPTIONS = SpanOptions()

# Global tracer instance
_tracer: ContextVar[Tracer | None] = ContextVar("tasklog_tracer", default=None)


@runtime_checkable
class TaskTracer(Protocol):
    """Tracing backend contract. Span handles are opaque to callers."""

    def start_span(self, name: str, options: SpanOptions | None = None) -> Any: ...

    def start_active_span(self, name: str, fn: Callable[[Any], T], options: SpanOptions | None = None) -> T: ...


@dataclass(slots=True)
class Tracer:
    """Creates spans, tracks the active one, and exports them when they end.

    Usage:
        >>> tracer = Tracer(service_name="billing", exporter=JsonExporter())
        >>> with tracer.active_span("charge-card") as span:
        ...     span.set_attribute("amount", 1200)
        >>> tracer.start_active_span("refund", lambda span: do_refund())

    Args:
        service_name: Name identifying this service in traces
        exporter: Where to send completed spans
        enabled: Whether tracing is active (False = inert spans)
    """

    service_name: str = "tasklog"
    exporter: Exporter = field(default_factory=NoOpExporter)
    enabled: bool = True

    def configure_global(self) -> None:
        """Set this tracer as the global instance."""
        _tracer.set(self)

    @classmethod
    def get_global(cls) -> Tracer | None:
        return _tracer.get()

    @classmethod
    def current(cls) -> Tracer:
        """Get global tracer or create disabled one."""
        return _tracer.get() or cls(enabled=False)

    def start_span(self, name: str, options: SpanOptions | None = None) -> Span:
        """Start a span as a child of the current one, without activating it.

        The caller must end it with end_span(). Prefer active_span() or
        start_active_span() for automatic lifecycle.
        """
        if not self.enabled:
            return NoopSpan(name=name)
        opts = options or _DEFAULT_OPTIONS
        parent = current_span_context()
        return Span(
            name=name,
            context=parent.child() if parent else SpanContext.new(),
            kind=opts.kind,
            start_time=opts.start_time if opts.start_time is not None else time.time(),
            attributes={"service.name": self.service_name, **(opts.attributes or {})},
        )

    def end_span(self, span: Span, status: SpanStatus = SpanStatus.OK, error: str | None = None) -> None:
        """End a span and export it."""
        if not span.is_recording:
            return
        span.end(status=status, error=error)
        try:
            self.exporter.export([span])
        except Exception:
            logger.warning("span export failed for %r", span.name, exc_info=True)

    def active_span(self, name: str, options: SpanOptions | None = None) -> ActiveSpan:
        """Context manager that makes a new span current for its scope.

        Example:
            >>> with tracer.active_span("fetch", SpanOptions(kind=SpanKind.CLIENT)) as span:
            ...     span.set_attribute("url", "https://api.example.com")
        """
        return ActiveSpan(self, name, options)

    def start_active_span(self, name: str, fn: Callable[[Span], T], options: SpanOptions | None = None) -> T:
        """Run fn(span) with a new current span and return its result.

        Exceptions from fn are recorded on the span and re-raised unchanged.
        When fn is a coroutine function, or returns an awaitable, the return
        value is an awaitable and the span stays open and current until it
        completes.
        """
        if inspect.iscoroutinefunction(fn):
            return self._start_active_span_async(name, fn, options)  # type: ignore[return-value]
        scope = self.active_span(name, options)
        with scope as span:
            result = fn(span)
            if inspect.isawaitable(result):
                return self._await_in_span(scope.hand_off(), result)  # type: ignore[return-value]
        return result

    async def _start_active_span_async(self, name: str, fn: Callable[[Span], Awaitable[T]],
                                       options: SpanOptions | None) -> T:
        async with self.active_span(name, options) as span:
            return await fn(span)

    async def _await_in_span(self, scope: ActiveSpan, awaitable: Awaitable[T]) -> T:
        async with scope:
            return await awaitable

    def shutdown(self) -> None:
        """Shutdown tracer and flush exports."""
        self.exporter.shutdown()


@dataclass(slots=True)
class ActiveSpan:
    """Span lifecycle as a (sync or async) context manager. Sets status on exit."""

    tracer: Tracer
    name: str
    options: SpanOptions | None
    _span: Span | None = None
    _token: Token[TraceContext | None] | None = None
    _handed_off: bool = False

    def __enter__(self) -> Span:
        if self._span is None:
            self._span = self.tracer.start_span(self.name, self.options)
        span = self._span
        if span.is_recording:
            self._token = (TraceContext.get() or TraceContext()).push_span(span.context)
        return span

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            TraceContext.reset(self._token)
            self._token = None
        if not self._span or self._handed_off:
            return
        if exc_val is not None:
            self._span.record_exception(exc_val)
            status = SpanStatus.ERROR
        else:
            status = self._span.status if self._span.status != SpanStatus.UNSET else SpanStatus.OK
        self.tracer.end_span(self._span, status)

    def hand_off(self) -> ActiveSpan:
        """Scope that re-activates and later ends this span; this scope's exit only deactivates it."""
        self._handed_off = True
        return ActiveSpan(self.tracer, self.name, self.options, _span=self._span)

    async def __aenter__(self) -> Span:
        return self.__enter__()

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                        exc_tb: TracebackType | None) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def get_tracer() -> Tracer:
    """Get the global tracer (creates disabled one if not configured)."""
    return Tracer.current()


def configure_tracing(
    service_name: str = "tasklog",
    exporter: str | Exporter = "json",
    *,
    enabled: bool = True,
) -> Tracer:
    """Configure the global tracer.

    Args:
        service_name: Name for this service in traces
        exporter: "json", "memory", "none", or an Exporter instance
        enabled: False hands out inert spans

    Example:
        >>> configure_tracing(service_name="billing", exporter="json")
    """
    exp = create_exporter(exporter) if isinstance(exporter, str) else exporter
    tracer = Tracer(service_name=service_name, exporter=exp, enabled=enabled)
    tracer.configure_global()
    return tracer
