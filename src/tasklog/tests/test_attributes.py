"""Tests for attribute flattening."""

from __future__ import annotations

from tasklog.observability import (
    CIRCULAR_SENTINEL,
    NULL_SENTINEL,
    flatten_attributes,
    unflatten_attributes,
)


def test_nested_mapping_uses_dotted_keys() -> None:
    assert flatten_attributes({"user": {"id": 7, "profile": {"name": "ada"}}}) == {
        "user.id": 7,
        "user.profile.name": "ada",
    }


def test_sequences_use_index_segments() -> None:
    assert flatten_attributes({"tags": ["a", "b"], "pairs": [[1, 2]]}) == {
        "tags.[0]": "a",
        "tags.[1]": "b",
        "pairs.[0].[0]": 1,
        "pairs.[0].[1]": 2,
    }


def test_scalars_round_trip_unchanged() -> None:
    flat = flatten_attributes({"s": "x", "i": 3, "f": 2.5, "t": True, "z": 0, "e": ""})

    assert flat == {"s": "x", "i": 3, "f": 2.5, "t": True, "z": 0, "e": ""}
    assert flat["t"] is True


def test_none_values_kept_as_sentinel() -> None:
    assert flatten_attributes({"a": None, "b": [None]}) == {"a": NULL_SENTINEL, "b.[0]": NULL_SENTINEL}


def test_none_and_empty_inputs() -> None:
    assert flatten_attributes(None) == {}
    assert flatten_attributes({}) == {}
    assert flatten_attributes({"a": {}, "b": []}) == {}


def test_prefix() -> None:
    assert flatten_attributes({"id": 1}, "job") == {"job.id": 1}
    assert flatten_attributes("solo", "job") == {"job": "solo"}


def test_idempotent_on_flat_mapping() -> None:
    nested = {"a": {"b": [1, {"c": None}]}, "d": "x"}
    flat = flatten_attributes(nested)

    assert flatten_attributes(flat) == flat
    assert flatten_attributes({"x.y": 1, "z": "w"}) == {"x.y": 1, "z": "w"}


def test_cycles_cut_with_sentinel() -> None:
    node: dict[str, object] = {"name": "root"}
    node["self"] = node
    items: list[object] = [1]
    items.append(items)

    assert flatten_attributes({"node": node, "items": items}) == {
        "node.name": "root",
        "node.self": CIRCULAR_SENTINEL,
        "items.[0]": 1,
        "items.[1]": CIRCULAR_SENTINEL,
    }


def test_shared_references_are_not_cycles() -> None:
    shared = {"v": 1}

    assert flatten_attributes({"a": shared, "b": shared}) == {"a.v": 1, "b.v": 1}


def test_deep_nesting_does_not_overflow() -> None:
    depth = 2_000
    root: dict[str, object] = {}
    node = root
    for _ in range(depth):
        node["n"] = node = {}
    node["leaf"] = True

    flat = flatten_attributes(root)

    assert flat == {".".join(["n"] * depth + ["leaf"]): True}


def test_unknown_objects_stringified() -> None:
    class Money:
        def __str__(self) -> str:
            return "12.00 EUR"

    class Broken:
        def __str__(self) -> str:
            raise RuntimeError("no")

    flat = flatten_attributes({"price": Money(), "b": Broken(), 3: "int-key", "raw": b"\x00"})

    assert flat["price"] == "12.00 EUR"
    assert flat["b"].startswith("<")
    assert flat["3"] == "int-key"
    assert flat["raw"] == "b'\\x00'"


def test_tuples_and_sets_walked() -> None:
    assert flatten_attributes({"t": (1, 2), "s": {"only"}}) == {"t.[0]": 1, "t.[1]": 2, "s.[0]": "only"}


def test_unflatten_restores_structure() -> None:
    nested = {"user": {"id": 7, "tags": ["a", "b"]}, "note": None, "matrix": [[1, 2], [3]]}

    assert unflatten_attributes(flatten_attributes(nested)) == nested
