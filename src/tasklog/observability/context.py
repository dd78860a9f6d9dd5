"""Span identity and the active-span stack.

SpanContext carries W3C-sized ids (32 hex trace id, 16 hex span id).
TraceContext keeps the stack of active span contexts in a ContextVar, so
each asyncio task and thread sees its own current span.
"""

from __future__ import annotations

import secrets
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

_INVALID_TRACE_ID = "0" * 32
_INVALID_SPAN_ID = "0" * 16


@dataclass(frozen=True, slots=True)
class SpanContext:
    """Immutable identity of a span within a trace."""

    trace_id: str
    span_id: str
    parent_id: str | None = None

    @classmethod
    def new(cls) -> SpanContext:
        """Root context for a fresh trace."""
        return cls(trace_id=secrets.token_hex(16), span_id=secrets.token_hex(8))

    @classmethod
    def invalid(cls) -> SpanContext:
        """All-zero context carried by inert spans."""
        return cls(trace_id=_INVALID_TRACE_ID, span_id=_INVALID_SPAN_ID)

    def child(self) -> SpanContext:
        """Context for a span whose parent is this one."""
        return SpanContext(trace_id=self.trace_id, span_id=secrets.token_hex(8), parent_id=self.span_id)

    @property
    def is_valid(self) -> bool:
        return self.trace_id != _INVALID_TRACE_ID and self.span_id != _INVALID_SPAN_ID


_trace_context: ContextVar[TraceContext | None] = ContextVar("tasklog_trace_context", default=None)


@dataclass(slots=True)
class TraceContext:
    """Stack of active spans for the current execution context."""

    stack: tuple[SpanContext, ...] = field(default_factory=tuple)

    @classmethod
    def get(cls) -> TraceContext | None:
        """Current trace context, or None outside any active span."""
        return _trace_context.get()

    @classmethod
    def current(cls) -> TraceContext:
        """Current trace context, creating an empty one if needed."""
        if (ctx := _trace_context.get()) is None:
            _trace_context.set(ctx := cls())
        return ctx

    @property
    def span_context(self) -> SpanContext | None:
        """Innermost active span context."""
        return self.stack[-1] if self.stack else None

    def push_span(self, span_ctx: SpanContext) -> Token[TraceContext | None]:
        """Activate span_ctx. Pass the returned token to reset() to deactivate."""
        # Rebind instead of mutating so sibling tasks that copied the context keep their stack
        return _trace_context.set(TraceContext(stack=(*self.stack, span_ctx)))

    @staticmethod
    def reset(token: Token[TraceContext | None]) -> None:
        _trace_context.reset(token)


def current_span_context() -> SpanContext | None:
    """Innermost active span context, if any."""
    return ctx.span_context if (ctx := TraceContext.get()) else None
