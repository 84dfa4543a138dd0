"""
Uniform child access over structured state values.

State trees are built from dicts, lists, dataclass instances and
SimpleNamespace objects. The recorder, the draft engine and the patcher all
address children through these helpers so that a path segment means the same
thing everywhere: a key for dicts, a non-negative index for lists and an
attribute name for objects.
"""
import copy
from dataclasses import fields, is_dataclass
from types import SimpleNamespace
from typing import Any, List, Tuple


def is_structured(value: Any) -> bool:
    """True for values that can hold addressable children."""
    if isinstance(value, (dict, list, SimpleNamespace)):
        return True
    return is_dataclass(value) and not isinstance(value, type)


def _field_names(node: Any) -> List[str]:
    if is_dataclass(node):
        return [f.name for f in fields(node)]
    return list(vars(node))


def has_child(node: Any, key: Any) -> bool:
    if isinstance(node, dict):
        return key in node
    if isinstance(node, list):
        return isinstance(key, int) and not isinstance(key, bool) and 0 <= key < len(node)
    return isinstance(key, str) and key in _field_names(node)


def get_child(node: Any, key: Any) -> Any:
    """Read one child. Raises KeyError/IndexError/AttributeError when missing."""
    if isinstance(node, (dict, list)):
        return node[key]
    return getattr(node, key)


def _is_frozen(node: Any) -> bool:
    params = getattr(type(node), "__dataclass_params__", None)
    return params is not None and params.frozen


def set_child(node: Any, key: Any, value: Any) -> None:
    """Assign one child. A list index equal to the list length appends.

    Frozen dataclasses are assigned with object.__setattr__; callers only ever
    pass private copies (shadow nodes or draft copies), never published ones.
    """
    if isinstance(node, dict):
        node[key] = value
    elif isinstance(node, list):
        if key == len(node):
            node.append(value)
        else:
            node[key] = value
    elif _is_frozen(node):
        object.__setattr__(node, key, value)
    else:
        setattr(node, key, value)


def iter_children(node: Any) -> List[Tuple[Any, Any]]:
    """Return (key, value) pairs as a list, safe to use while assigning."""
    if isinstance(node, dict):
        return list(node.items())
    if isinstance(node, list):
        return list(enumerate(node))
    return [(name, getattr(node, name)) for name in _field_names(node)]


def shallow_copy(node: Any) -> Any:
    return copy.copy(node)
