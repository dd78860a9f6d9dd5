"""Tests for the bundled tracer, spans and the in-process span exporters."""

from __future__ import annotations

import asyncio
import contextvars
import io

import orjson
import pytest

from tasklog.foundation.errors import ConfigurationError
from tasklog.observability import (
    InMemoryExporter,
    JsonExporter,
    NoopSpan,
    Span,
    SpanContext,
    SpanKind,
    SpanOptions,
    SpanStatus,
    TaskTracer,
    Tracer,
    configure_tracing,
    current_span_context,
    get_tracer,
)


class FlakyExporter:
    def export(self, spans: list[Span]) -> None:
        raise ConnectionError("collector down")

    def shutdown(self) -> None:
        pass


# ═════════════════════════════════════════════════════════════════════════════
# Span Lifecycle
# ═════════════════════════════════════════════════════════════════════════════


def test_tracer_satisfies_protocol(tracer: Tracer) -> None:
    assert isinstance(tracer, TaskTracer)


def test_active_span_exports_with_ok_status(tracer: Tracer, exporter: InMemoryExporter) -> None:
    with tracer.active_span("work") as span:
        span.set_attribute("items", 3)
        assert span.is_active

    assert exporter.spans == [span]
    assert span.status == SpanStatus.OK
    assert span.duration_ms is not None
    assert span.attributes == {"service.name": "test-service", "items": 3}


def test_active_span_keeps_explicit_status(tracer: Tracer) -> None:
    with tracer.active_span("work") as span:
        span.set_status(SpanStatus.ERROR, "partial failure")

    assert span.status == SpanStatus.ERROR
    assert span.error == "partial failure"


def test_nested_spans_share_trace(tracer: Tracer) -> None:
    with tracer.active_span("outer") as outer:
        with tracer.active_span("inner") as inner:
            detached = tracer.start_span("detached")

    assert inner.context.trace_id == outer.context.trace_id
    assert inner.context.parent_id == outer.context.span_id
    assert detached.context.parent_id == inner.context.span_id
    assert outer.context.parent_id is None


def test_start_span_leaves_current_unchanged(tracer: Tracer) -> None:
    with tracer.active_span("outer") as outer:
        tracer.start_span("side")
        assert current_span_context() == outer.context


def test_start_active_span_records_exception(tracer: Tracer, exporter: InMemoryExporter) -> None:
    def fn(span: Span) -> None:
        raise LookupError("no such customer")

    with pytest.raises(LookupError, match="no such customer"):
        tracer.start_active_span("lookup", fn)

    span = exporter.spans[0]
    assert span.status == SpanStatus.ERROR
    assert span.error == "no such customer"
    event = span.events[0]
    assert event.name == "exception"
    assert event.attributes["exception.message"] == "no such customer"
    assert "LookupError" in event.attributes["exception.stacktrace"]
    assert current_span_context() is None


def test_span_options(tracer: Tracer) -> None:
    span = tracer.start_span("consume", SpanOptions(kind=SpanKind.CONSUMER, attributes={"queue": "jobs"},
                                                    start_time=1_700_000_000.0))

    assert span.kind == SpanKind.CONSUMER
    assert span.attributes["queue"] == "jobs"
    assert span.start_time == 1_700_000_000.0


def test_end_is_idempotent_for_timing() -> None:
    span = Span(name="x", context=SpanContext.new())

    span.end()
    first_end = span.end_time
    span.end(status=SpanStatus.OK)

    assert span.end_time == first_end


def test_disabled_tracer_hands_out_inert_spans(exporter: InMemoryExporter) -> None:
    tracer = Tracer(exporter=exporter, enabled=False)

    result = tracer.start_active_span("op", lambda span: (type(span), span.is_recording))

    assert result == (NoopSpan, False)
    assert exporter.spans == []
    assert current_span_context() is None


def test_export_failure_does_not_mask_result(caplog: pytest.LogCaptureFixture) -> None:
    tracer = Tracer(exporter=FlakyExporter())

    assert tracer.start_active_span("op", lambda span: 7) == 7
    assert any("span export failed" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_async_active_span(tracer: Tracer, exporter: InMemoryExporter) -> None:
    async def fn(span: Span) -> str:
        await asyncio.sleep(0)
        assert current_span_context() == span.context
        return "done"

    assert await tracer.start_active_span("async-op", fn) == "done"
    assert exporter.spans[0].status == SpanStatus.OK


@pytest.mark.asyncio
async def test_concurrent_tasks_keep_separate_stacks(tracer: Tracer) -> None:
    async def child(name: str) -> tuple[str | None, str]:
        async with tracer.active_span(name) as span:
            await asyncio.sleep(0)
            return span.context.parent_id, current_span_context().span_id

    async with tracer.active_span("root") as root:
        results = await asyncio.gather(child("a"), child("b"))

    for parent_id, current_id in results:
        assert parent_id == root.context.span_id
        assert current_id != root.context.span_id


@pytest.mark.asyncio
async def test_callable_returning_awaitable_keeps_span_open(tracer: Tracer, exporter: InMemoryExporter) -> None:
    class Job:
        async def __call__(self, span: Span) -> str:
            await asyncio.sleep(0)
            assert current_span_context() == span.context
            assert span.is_active
            return "ok"

    pending = tracer.start_active_span("job", Job())
    assert exporter.spans == []
    assert current_span_context() is None

    assert await pending == "ok"
    (span,) = exporter.spans
    assert span.status == SpanStatus.OK
    assert current_span_context() is None


# ═════════════════════════════════════════════════════════════════════════════
# Exporters & Configuration
# ═════════════════════════════════════════════════════════════════════════════


def test_json_exporter_writes_lines() -> None:
    out = io.StringIO()
    tracer = Tracer(exporter=JsonExporter(output=out))

    tracer.start_active_span("a", lambda span: None)
    tracer.start_active_span("b", lambda span: None)

    lines = [orjson.loads(line) for line in out.getvalue().splitlines()]
    assert [line["name"] for line in lines] == ["a", "b"]
    assert lines[0]["status"] == "ok"


def test_json_exporter_empty_batch_writes_nothing() -> None:
    out = io.StringIO()

    JsonExporter(output=out).export([])

    assert out.getvalue() == ""


def test_configure_tracing_sets_global() -> None:
    ctx = contextvars.copy_context()
    tracer = ctx.run(configure_tracing, service_name="billing", exporter="memory")

    assert ctx.run(get_tracer) is tracer
    assert not get_tracer().enabled
    assert isinstance(tracer.exporter, InMemoryExporter)


def test_configure_tracing_unknown_exporter() -> None:
    with pytest.raises(ConfigurationError, match="Unknown exporter"):
        configure_tracing(exporter="carrier-pigeon")


def test_span_context_ids() -> None:
    ctx = SpanContext.new()
    child = ctx.child()

    assert len(ctx.trace_id) == 32 and len(ctx.span_id) == 16
    assert child.trace_id == ctx.trace_id and child.parent_id == ctx.span_id
    assert ctx.is_valid and not SpanContext.invalid().is_valid
