"""Tests for the deep clone primitive."""
import datetime
import enum
import io
import threading
from collections import OrderedDict, namedtuple
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import List

import pytest

from observablestate import CloneError, deep_clone


class Color(enum.Enum):
    RED = "red"


@dataclass(frozen=True)
class Frozen:
    items: List[int] = field(default_factory=list)


Pair = namedtuple("Pair", "left right")


def test_scalars_returned_as_is():
    when = datetime.datetime(2024, 1, 1)
    for value in (None, True, 3, 2.5, "text", b"raw", when, Color.RED):
        assert deep_clone(value) is value


def test_nested_containers_share_nothing():
    original = {"a": [1, {"b": 2}], "c": {"d": {3, 4}}}

    clone = deep_clone(original)

    assert clone == original
    assert clone["a"] is not original["a"]
    assert clone["a"][1] is not original["a"][1]
    assert clone["c"]["d"] is not original["c"]["d"]


def test_shared_subtree_is_duplicated():
    shared = {"x": 1}

    clone = deep_clone({"left": shared, "right": shared})

    assert clone["left"] == clone["right"]
    assert clone["left"] is not clone["right"]


def test_container_subtypes_preserved():
    original = {"od": OrderedDict(a=1), "pair": Pair([1], 2), "ns": SimpleNamespace(v=[1])}

    clone = deep_clone(original)

    assert isinstance(clone["od"], OrderedDict)
    assert clone["pair"] == Pair([1], 2)
    assert clone["pair"].left is not original["pair"].left
    assert clone["ns"].v == [1]
    assert clone["ns"].v is not original["ns"].v


def test_frozen_dataclass_cloned():
    original = Frozen(items=[1, 2])

    clone = deep_clone(original)

    assert clone == original
    assert clone.items is not original.items


@pytest.mark.parametrize("value", [
    lambda: None,
    print,
    object,
    threading.Lock(),
    io.StringIO(),
    (x for x in range(3)),
    object(),
])
def test_non_plain_values_rejected(value):
    with pytest.raises(CloneError):
        deep_clone({"value": value})


def test_cycle_rejected():
    cyclic = [1]
    cyclic.append(cyclic)

    with pytest.raises(CloneError):
        deep_clone(cyclic)


def test_clone_error_is_type_error():
    with pytest.raises(TypeError):
        deep_clone(lambda: None)
