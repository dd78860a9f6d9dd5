"""Span types for tracing task execution.

Spans represent units of work with timing, attributes, and events.
NoopSpan is the inert variant handed out when tracing is disabled: every
read works, every write is ignored.
"""

from __future__ import annotations

import time
import traceback
from dataclasses import dataclass, field
from enum import StrEnum

from tasklog.foundation.errors import JsonDict, JsonValue

from .context import SpanContext


class SpanKind(StrEnum):
    """Span type classification (OpenTelemetry span kinds)."""

    INTERNAL = "internal"  # In-process operation
    SERVER = "server"      # Handling an inbound request
    CLIENT = "client"      # Outbound call
    PRODUCER = "producer"  # Enqueueing work
    CONSUMER = "consumer"  # Dequeued work


class SpanStatus(StrEnum):
    """Span completion status."""

    UNSET = "unset"
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class SpanOptions:
    """Options accepted by start_span / start_active_span.

    Attributes:
        kind: Span kind
        attributes: Initial span attributes
        start_time: Unix timestamp to use instead of "now"
    """

    kind: SpanKind = SpanKind.INTERNAL
    attributes: JsonDict | None = None
    start_time: float | None = None


@dataclass(slots=True)
class SpanEvent:
    """Point-in-time event within a span (e.g., "cache_hit", "retry")."""

    name: str
    timestamp: float = field(default_factory=time.time)
    attributes: JsonDict = field(default_factory=dict)


@dataclass(slots=True)
class Span:
    """Represents a unit of work in a trace.

    Attributes:
        name: Human-readable span name (e.g., "charge-card")
        context: SpanContext with trace/span IDs
        kind: Type of work
        start_time: Unix timestamp of span start
        end_time: Unix timestamp of span end (None if active)
        attributes: Key-value metadata
        events: Timestamped events during execution
        status: Completion status
        error: Error message if failed

    Example:
        >>> span = Span(name="charge-card", context=SpanContext.new())
        >>> span.set_attribute("amount", 1200)
        >>> span.add_event("retry")
        >>> span.end(status=SpanStatus.OK)
    """

    name: str
    context: SpanContext
    kind: SpanKind = SpanKind.INTERNAL
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    attributes: JsonDict = field(default_factory=dict)
    events: list[SpanEvent] = field(default_factory=list)
    status: SpanStatus = SpanStatus.UNSET
    error: str | None = None

    @property
    def duration_ms(self) -> float | None:
        """Duration in milliseconds, or None if not ended."""
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time) * 1000

    @property
    def is_active(self) -> bool:
        """Whether span is still running."""
        return self.end_time is None

    @property
    def is_recording(self) -> bool:
        return True

    def set_attribute(self, key: str, value: JsonValue) -> Span:
        """Set attribute, returns self for chaining."""
        self.attributes[key] = value
        return self

    def set_attributes(self, attrs: JsonDict) -> Span:
        self.attributes.update(attrs)
        return self

    def add_event(self, name: str, attributes: JsonDict | None = None) -> Span:
        """Add timestamped event to span."""
        self.events.append(SpanEvent(name=name, attributes=attributes or {}))
        return self

    def set_status(self, status: SpanStatus, error: str | None = None) -> Span:
        self.status = status
        if error:
            self.error = error
        return self

    def record_exception(self, exc: BaseException) -> Span:
        """Record an exception event and mark the span as failed."""
        self.status = SpanStatus.ERROR
        self.error = str(exc) or type(exc).__name__
        return self.add_event("exception", {
            "exception.type": type(exc).__name__,
            "exception.message": str(exc),
            "exception.stacktrace": "".join(traceback.format_exception(exc)),
        })

    def end(self, status: SpanStatus | None = None, error: str | None = None) -> Span:
        """End the span with optional status. Ending twice keeps the first end time."""
        if self.end_time is None:
            self.end_time = time.time()
        if status:
            self.status = status
        if error:
            self.error = error
            self.status = SpanStatus.ERROR
        return self

    def to_dict(self) -> JsonDict:
        """Serialize span for export."""
        return {
            "name": self.name,
            "trace_id": self.context.trace_id,
            "span_id": self.context.span_id,
            "parent_id": self.context.parent_id,
            "kind": self.kind.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_ms": self.duration_ms,
            "status": self.status.value,
            "error": self.error,
            "attributes": self.attributes,
            "events": [
                {"name": e.name, "timestamp": e.timestamp, "attributes": e.attributes}
                for e in self.events
            ],
        }


@dataclass(slots=True)
class NoopSpan(Span):
    """Inert span. Safe to read and write; records nothing."""

    name: str = ""
    context: SpanContext = field(default_factory=SpanContext.invalid)

    @property
    def is_recording(self) -> bool:
        return False

    def set_attribute(self, key: str, value: JsonValue) -> Span:
        return self

    def set_attributes(self, attrs: JsonDict) -> Span:
        return self

    def add_event(self, name: str, attributes: JsonDict | None = None) -> Span:
        return self

    def set_status(self, status: SpanStatus, error: str | None = None) -> Span:
        return self

    def record_exception(self, exc: BaseException) -> Span:
        return self

    def end(self, status: SpanStatus | None = None, error: str | None = None) -> Span:
        return self
