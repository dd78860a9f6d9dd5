"""Shared type aliases for JSON-shaped data and flat attribute maps."""

from __future__ import annotations

from typing import Any, Mapping, Union

# JSON type aliases - using Any for recursive types to avoid Pydantic resolution issues
JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], dict[str, Any]]  # Any for recursive slots
JsonDict = dict[str, Any]
JsonMapping = Mapping[str, Any]

# Backend attribute values are primitives only
AttributeValue = Union[str, int, float, bool]
Attributes = dict[str, AttributeValue]
