"""Shared fixtures: in-memory backends and a deterministic clock."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from tasklog.foundation.config import clear_settings_cache
from tasklog.observability import (
    FilteredTaskLogger,
    InMemoryExporter,
    InMemoryLogEmitter,
    LogLevel,
    ManualClock,
    TaskLoggerConfig,
    Tracer,
    set_clock,
)

T0 = (1_700_000_000, 0)


@pytest.fixture(autouse=True)
def clean_globals() -> Iterator[None]:
    """Reset cached settings and the default clock around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
    set_clock(None)


@pytest.fixture
def emitter() -> InMemoryLogEmitter:
    return InMemoryLogEmitter()


@pytest.fixture
def exporter() -> InMemoryExporter:
    return InMemoryExporter()


@pytest.fixture
def tracer(exporter: InMemoryExporter) -> Tracer:
    return Tracer(service_name="test-service", exporter=exporter)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture
def make_logger(emitter: InMemoryLogEmitter, tracer: Tracer, clock: ManualClock):
    """Factory for FilteredTaskLogger wired to the in-memory backends."""

    def _make(level: LogLevel | str = LogLevel.DEBUG, **overrides: object) -> FilteredTaskLogger:
        config = TaskLoggerConfig(**{"level": level, "emitter": emitter, "tracer": tracer, "clock": clock, **overrides})
        return FilteredTaskLogger(config)

    return _make
