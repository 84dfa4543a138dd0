"""Tests for the copy-on-write produce() engine."""
from dataclasses import dataclass
from types import SimpleNamespace

import pytest

from observablestate import Draft, produce


@dataclass
class Point:
    x: int = 0
    y: int = 0


def test_no_writes_returns_base():
    base = {"a": {"b": 1}}

    result = produce(base, lambda d: d.get("a").get("b"))

    assert result is base


def test_write_copies_path_and_shares_siblings():
    base = {"a": {"b": 1}, "c": {"d": 2}, "e": [1, 2]}

    result = produce(base, lambda d: d.get("a").set("b", 10))

    assert result == {"a": {"b": 10}, "c": {"d": 2}, "e": [1, 2]}
    assert result is not base
    assert result["a"] is not base["a"]
    assert result["c"] is base["c"]
    assert result["e"] is base["e"]


def test_base_is_never_mutated():
    base = {"a": {"b": [1, 2]}}

    produce(base, lambda d: d.get("a").get("b").set(0, 99))

    assert base == {"a": {"b": [1, 2]}}


def test_assigning_same_object_is_not_a_change():
    child = {"x": 1}
    base = {"child": child}

    result = produce(base, lambda d: d.set("child", child))

    assert result is base


def test_list_index_equal_to_length_appends():
    base = {"items": [1, 2]}

    result = produce(base, lambda d: d.get("items").set(2, 3))

    assert result["items"] == [1, 2, 3]
    assert base["items"] == [1, 2]


def test_item_syntax():
    base = {"a": {"b": 1}}

    def recipe(draft):
        draft["a"]["b"] = 2

    assert produce(base, recipe) == {"a": {"b": 2}}


def test_dataclass_and_namespace_nodes():
    base = {"point": Point(1, 2), "ns": SimpleNamespace(flag=False)}

    def recipe(draft):
        draft.get("point").set("x", 5)

    result = produce(base, recipe)

    assert result["point"] == Point(5, 2)
    assert base["point"] == Point(1, 2)
    assert result["ns"] is base["ns"]


def test_recipe_error_leaves_base_and_revokes_drafts():
    base = {"a": {"b": 1}}
    leaked = []

    def recipe(draft):
        child = draft.get("a")
        leaked.append(child)
        child.set("b", 2)
        raise ValueError("abort")

    with pytest.raises(ValueError):
        produce(base, recipe)

    assert base == {"a": {"b": 1}}
    with pytest.raises(RuntimeError):
        leaked[0].get("b")


def test_draft_unusable_after_produce():
    captured = []
    produce({"a": 1}, captured.append)

    with pytest.raises(RuntimeError):
        captured[0].set("a", 2)


def test_repeated_reads_return_same_child_draft():
    def recipe(draft):
        assert draft.get("a") is draft.get("a")
        assert isinstance(draft.get("a"), Draft)

    produce({"a": {}}, recipe)


def test_non_structured_base_rejected():
    with pytest.raises(TypeError):
        produce(42, lambda d: None)
