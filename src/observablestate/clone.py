"""
Deep clone primitive for plain state data.

``deep_clone`` returns an equivalent value that shares no mutable reference
with its input. It accepts the same kind of data a UI state tree is made of:
scalars, strings, dates, enums, tuples, sets, lists, dicts, dataclass
instances and SimpleNamespace objects. Anything else (functions, classes,
open files, sockets, locks, generators, arbitrary objects) raises CloneError,
as does a cyclic graph.

Shared subtrees are duplicated, so the clone of a DAG is a tree. Every node in
a state tree therefore has exactly one path.
"""
import copy
import datetime
import decimal
import enum
import fractions
import pathlib
import uuid
from dataclasses import fields, is_dataclass
from types import SimpleNamespace
from typing import Any, Set

from observablestate.errors import CloneError

# Immutable value types returned as-is
_ATOMIC_TYPES = (
    type(None), bool, int, float, complex, str, bytes,
    decimal.Decimal, fractions.Fraction,
    datetime.date, datetime.time, datetime.timedelta, datetime.tzinfo,
    uuid.UUID, pathlib.PurePath, range,
)


def _unwrap_recorded(value: Any) -> Any:
    # Recorders expose their live target through this hook
    if hasattr(type(value), '__recorded_target__'):
        return value.__recorded_target__
    return value


def deep_clone(value: Any) -> Any:
    """Return an alias-free deep copy of ``value``.

    Raises:
        CloneError: if the value (or anything inside it) is not plain data,
            or if it contains a reference cycle.
    """
    return _clone(value, set())


def _clone(value: Any, active: Set[int]) -> Any:
    value = _unwrap_recorded(value)

    if isinstance(value, _ATOMIC_TYPES) or isinstance(value, enum.Enum):
        return value

    if callable(value) and not is_dataclass(value):
        # functions, methods, classes and callable instances
        raise CloneError(f"{type(value).__name__} object {value!r} is callable and cannot be cloned")

    marker = id(value)
    if marker in active:
        raise CloneError(f"cyclic reference through {type(value).__name__} cannot be cloned")
    active.add(marker)
    try:
        return _clone_container(value, active)
    finally:
        active.discard(marker)


def _clone_container(value: Any, active: Set[int]) -> Any:
    if isinstance(value, dict):
        result = copy.copy(value)
        result.clear()
        for key, item in value.items():
            result[_clone(key, active)] = _clone(item, active)
        return result

    if isinstance(value, list):
        result = copy.copy(value)
        result[:] = [_clone(item, active) for item in value]
        return result

    if isinstance(value, tuple):
        items = [_clone(item, active) for item in value]
        if hasattr(value, '_fields'):
            return type(value)(*items)
        return type(value)(items)

    if isinstance(value, (set, frozenset)):
        return type(value)(_clone(item, active) for item in value)

    if isinstance(value, bytearray):
        return bytearray(value)

    if isinstance(value, SimpleNamespace):
        return SimpleNamespace(**{name: _clone(item, active) for name, item in vars(value).items()})

    if is_dataclass(value) and not isinstance(value, type):
        result = copy.copy(value)
        for f in fields(value):
            # object.__setattr__ so frozen dataclasses clone too
            object.__setattr__(result, f.name, _clone(getattr(value, f.name), active))
        return result

    raise CloneError(f"{type(value).__name__} object cannot be cloned into state")
