"""Clock sources for log record timestamps.

Timestamps are ``(seconds, nanoseconds)`` pairs since the Unix epoch, the
hrtime shape OpenTelemetry backends expect. PreciseWallClock anchors the wall
clock once and advances it with the monotonic perf counter, so timestamps
never go backwards within a process even if the system clock is adjusted.
"""

from __future__ import annotations

import time
from contextvars import ContextVar
from typing import Protocol, TypeAlias, runtime_checkable

ClockTime: TypeAlias = tuple[int, int]

_NS_PER_SECOND = 1_000_000_000


@runtime_checkable
class Clock(Protocol):
    """Protocol for timestamp sources."""

    def now(self) -> ClockTime: ...


class PreciseWallClock:
    """Epoch-comparable, monotonic clock."""

    __slots__ = ("_origin_wall_ns", "_origin_perf_ns")

    def __init__(self, origin_ns: int | None = None) -> None:
        self._origin_wall_ns = time.time_ns() if origin_ns is None else origin_ns
        self._origin_perf_ns = time.perf_counter_ns()

    def now(self) -> ClockTime:
        elapsed = time.perf_counter_ns() - self._origin_perf_ns
        return ns_to_clock_time(self._origin_wall_ns + elapsed)


class ManualClock:
    """Deterministic clock for tests. Only moves when advanced."""

    __slots__ = ("_ns",)

    def __init__(self, start: ClockTime | int = 0) -> None:
        self._ns = start if isinstance(start, int) else clock_time_to_ns(start)

    def now(self) -> ClockTime:
        return ns_to_clock_time(self._ns)

    def advance(self, ns: int) -> ClockTime:
        if ns < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._ns += ns
        return self.now()


def ns_to_clock_time(ns: int) -> ClockTime:
    return divmod(ns, _NS_PER_SECOND)  # type: ignore[return-value]


def clock_time_to_ns(t: ClockTime) -> int:
    return t[0] * _NS_PER_SECOND + t[1]


def clock_time_to_seconds(t: ClockTime) -> float:
    return t[0] + t[1] / _NS_PER_SECOND


# Process default clock; overridable per context for tests
_clock: ContextVar[Clock | None] = ContextVar("tasklog_clock", default=None)
_default_clock = PreciseWallClock()


def get_clock() -> Clock:
    """Configured clock, or the process-wide PreciseWallClock."""
    return _clock.get() or _default_clock


def set_clock(clock: Clock | None) -> None:
    """Override the default clock (None restores PreciseWallClock)."""
    _clock.set(clock)
