"""Where the bundled Tracer sends spans once they end.

Only the sinks the tracer needs in-process live here: JSON lines, an
in-memory list for tests, and a drop-everything default. Shipping spans to
a collector is the job of the OpenTelemetry bridge (`tasklog.observability.otel`).
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

import orjson

from tasklog.foundation.errors import ConfigurationError

if TYPE_CHECKING:
    from .span import Span


@runtime_checkable
class Exporter(Protocol):
    """Receives spans after Tracer.end_span(); failures are logged by the tracer."""

    def export(self, spans: list[Span]) -> None: ...

    def shutdown(self) -> None: ...


@dataclass(slots=True)
class NoOpExporter:
    def export(self, spans: list[Span]) -> None:
        pass

    def shutdown(self) -> None:
        pass


@dataclass(slots=True)
class InMemoryExporter:
    """Keeps exported spans in a list."""

    spans: list[Span] = field(default_factory=list)

    def export(self, spans: list[Span]) -> None:
        self.spans.extend(spans)

    def clear(self) -> None:
        self.spans.clear()

    def shutdown(self) -> None:
        pass


@dataclass(slots=True)
class JsonExporter:
    """One `Span.to_dict()` object per line; a batch is written with a single call."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def export(self, spans: list[Span]) -> None:
        if spans:
            self.output.write("".join(_json_line(s) for s in spans))

    def shutdown(self) -> None:
        self.output.flush()


def _json_line(span: Span) -> str:
    return orjson.dumps(span.to_dict(), default=str, option=orjson.OPT_APPEND_NEWLINE).decode()


_EXPORTERS = {"json": JsonExporter, "memory": InMemoryExporter, "none": NoOpExporter}


def create_exporter(name: str) -> Exporter:
    """Exporter by name: "json", "memory" or "none"."""
    if (factory := _EXPORTERS.get(name)) is None:
        raise ConfigurationError(f"Unknown exporter: {name}. Use one of {', '.join(map(repr, _EXPORTERS))}")
    return factory()
