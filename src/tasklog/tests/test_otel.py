"""Tests for the OpenTelemetry backends (skipped without the otel extra)."""

from __future__ import annotations

import pytest

pytest.importorskip("opentelemetry.sdk.trace")

from opentelemetry import _logs as otel_logs  # noqa: E402
from opentelemetry import trace as otel_trace  # noqa: E402
from opentelemetry.sdk.trace import TracerProvider  # noqa: E402
from opentelemetry.sdk.trace.export import SimpleSpanProcessor  # noqa: E402
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter  # noqa: E402

from tasklog.observability import FilteredTaskLogger, ManualClock, SpanKind, SpanOptions, TaskLoggerConfig  # noqa: E402
from tasklog.observability.otel import OtelLogEmitter, OtelTracerBridge  # noqa: E402


class RecordingOtelLogger:
    def __init__(self) -> None:
        self.records: list[otel_logs.LogRecord] = []

    def emit(self, record: otel_logs.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def spans() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def bridge(spans: InMemorySpanExporter) -> OtelTracerBridge:
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(spans))
    return OtelTracerBridge(provider.get_tracer("tasklog-test"))


def test_active_span_returns_value(bridge: OtelTracerBridge, spans: InMemorySpanExporter) -> None:
    opts = SpanOptions(kind=SpanKind.CLIENT, attributes={"http": {"method": "GET"}})

    result = bridge.start_active_span("fetch", lambda span: span.is_recording(), opts)

    assert result is True
    (span,) = spans.get_finished_spans()
    assert span.name == "fetch"
    assert span.kind == otel_trace.SpanKind.CLIENT
    assert span.attributes["http.method"] == "GET"


def test_active_span_records_error(bridge: OtelTracerBridge, spans: InMemorySpanExporter) -> None:
    def fn(span: otel_trace.Span) -> None:
        raise TimeoutError("upstream slow")

    with pytest.raises(TimeoutError):
        bridge.start_active_span("call", fn)

    (span,) = spans.get_finished_spans()
    assert span.status.status_code == otel_trace.StatusCode.ERROR
    assert span.events[0].name == "exception"


def test_nested_spans_parented(bridge: OtelTracerBridge, spans: InMemorySpanExporter) -> None:
    bridge.start_active_span("outer", lambda outer: bridge.start_active_span("inner", lambda inner: None))

    inner, outer = spans.get_finished_spans()
    assert inner.parent.span_id == outer.context.span_id


@pytest.mark.asyncio
async def test_async_active_span(bridge: OtelTracerBridge, spans: InMemorySpanExporter) -> None:
    async def fn(span: otel_trace.Span) -> int:
        return 5

    assert await bridge.start_active_span("async", fn) == 5
    assert spans.get_finished_spans()[0].name == "async"


@pytest.mark.asyncio
async def test_callable_returning_awaitable(bridge: OtelTracerBridge, spans: InMemorySpanExporter) -> None:
    async def work(span: otel_trace.Span) -> None:
        assert otel_trace.get_current_span() is span
        raise KeyError("row")

    pending = bridge.start_active_span("deferred", lambda span: work(span))
    assert not spans.get_finished_spans()

    with pytest.raises(KeyError):
        await pending

    (span,) = spans.get_finished_spans()
    assert span.status.status_code == otel_trace.StatusCode.ERROR


def test_start_span_is_not_current(bridge: OtelTracerBridge) -> None:
    span = bridge.start_span("detached", SpanOptions(start_time=1.5))

    assert otel_trace.get_current_span() is not span
    assert span.start_time == 1_500_000_000
    span.end()


def test_task_logger_over_otel(bridge: OtelTracerBridge, spans: InMemorySpanExporter) -> None:
    otel_logger = RecordingOtelLogger()
    log = FilteredTaskLogger(TaskLoggerConfig(
        emitter=OtelLogEmitter(otel_logger),
        tracer=bridge,
        level="info",
        clock=ManualClock((3, 5)),
    ))

    log.trace("job", lambda span: log.warn("slow", {"ms": 900}))
    log.debug("hidden")

    (record,) = otel_logger.records
    assert record.severity_number == otel_logs.SeverityNumber.WARN
    assert record.severity_text == "warn"
    assert record.body == "slow"
    assert record.timestamp == 3_000_000_005
    assert record.attributes["ms"] == 900
    assert record.attributes["$style.icon"] == "warn"
    assert [s.name for s in spans.get_finished_spans()] == ["job"]
