"""Severity to display-icon lookup used to style emitted log records."""

from __future__ import annotations

from typing import Callable

from .levels import severity_band

IconLookup = Callable[[int], str | None]


def icon_for_severity(severity_number: int) -> str | None:
    """Icon name for a severity number, None for UNSPECIFIED or out of range."""
    return severity_band(severity_number)
