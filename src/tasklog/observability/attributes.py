"""Attribute flattening for backend attribute systems.

Log and span backends accept a single-level mapping of primitive values.
flatten_attributes() turns arbitrarily nested property bags into dotted keys:

    >>> flatten_attributes({"user": {"id": 7, "tags": ["a", "b"]}, "note": None})
    {'user.id': 7, 'user.tags.[0]': 'a', 'user.tags.[1]': 'b', 'note': '$@null(('}

The walk is iterative, so nesting depth is bounded only by memory, and it
never raises: cycles become CIRCULAR_SENTINEL and unknown objects become str().
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from tasklog.foundation.errors import Attributes, AttributeValue, JsonDict


class SemanticInternalAttributes:
    """Reserved attribute keys. The `$` prefix keeps them apart from user keys."""

    STYLE_ICON = "$style.icon"


NULL_SENTINEL = "$@null(("
CIRCULAR_SENTINEL = "$@circular(("

_INDEX_SEGMENT = re.compile(r"^\[(\d+)\]$")
_SEQUENCE_TYPES = (list, tuple, set, frozenset)


class _Ancestor:
    """Linked chain of container ids from the root down to the current node."""

    __slots__ = ("ident", "parent")

    def __init__(self, ident: int, parent: _Ancestor | None) -> None:
        self.ident, self.parent = ident, parent

    def contains(self, ident: int) -> bool:
        node: _Ancestor | None = self
        while node is not None:
            if node.ident == ident:
                return True
            node = node.parent
        return False


def flatten_attributes(obj: Any, prefix: str | None = None) -> Attributes:
    """Flatten nested mappings and sequences into dotted-key primitives.

    Args:
        obj: Any value; mappings and sequences are walked, None is kept as
            NULL_SENTINEL, str/int/float/bool pass through unchanged
        prefix: Key prefix for every produced attribute

    Returns:
        Flat mapping of dotted keys to primitive values. Flattening an
        already-flat mapping returns an equal mapping.
    """
    result: Attributes = {}
    stack: list[tuple[str | None, Any, _Ancestor | None]] = [(prefix, obj, None)]
    while stack:
        key, value, ancestors = stack.pop()
        if value is None:
            if key:
                result[key] = NULL_SENTINEL
        elif isinstance(value, (str, bool, int, float)):
            result[key or ""] = value
        elif isinstance(value, (Mapping, *_SEQUENCE_TYPES)):
            if ancestors is not None and ancestors.contains(id(value)):
                result[key or ""] = CIRCULAR_SENTINEL
                continue
            chain = _Ancestor(id(value), ancestors)
            children = _children(key, value)
            stack.extend((k, v, chain) for k, v in reversed(children))
        else:
            result[key or ""] = _safe_str(value)
    return result


def _children(key: str | None, value: Mapping[Any, Any] | list[Any] | tuple[Any, ...]) -> list[tuple[str, Any]]:
    if isinstance(value, Mapping):
        return [(f"{key}.{k}" if key else str(k), v) for k, v in value.items()]
    return [(f"{key}.[{i}]" if key else f"[{i}]", v) for i, v in enumerate(value)]


def _safe_str(value: object) -> AttributeValue:
    try:
        return str(value)
    except Exception:  # noqa: BLE001 - a broken __str__ must not break logging
        return object.__repr__(value)


def unflatten_attributes(attrs: Mapping[str, AttributeValue]) -> JsonDict:
    """Rebuild nested structure from flatten_attributes() output.

    Example:
        >>> unflatten_attributes({"user.id": 7, "user.tags.[0]": "a"})
        {'user': {'id': 7, 'tags': ['a']}}
    """
    result: JsonDict = {}
    for key, value in attrs.items():
        parts: list[str | int] = [int(m.group(1)) if (m := _INDEX_SEGMENT.match(p)) else p for p in key.split(".")]
        node: Any = result
        for part, nxt in zip(parts, parts[1:]):
            node = _descend(node, part, [] if isinstance(nxt, int) else {})
        _put(node, parts[-1], None if value == NULL_SENTINEL else value)
    return result


def _descend(node: Any, part: str | int, empty: Any) -> Any:
    current = _get(node, part)
    if not isinstance(current, type(empty)):
        current = empty
        _put(node, part, current)
    return current


def _get(node: Any, part: str | int) -> Any:
    if isinstance(node, list):
        return node[part] if isinstance(part, int) and part < len(node) else None
    return node.get(part) if isinstance(node, dict) else None


def _put(node: Any, part: str | int, value: Any) -> None:
    if isinstance(node, list) and isinstance(part, int):
        node.extend([None] * (part + 1 - len(node)))
        node[part] = value
    elif isinstance(node, dict):
        node[part] = value
