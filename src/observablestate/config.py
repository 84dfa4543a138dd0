"""
Library-wide defaults for observablestate.

Containers read these once, at construction. Changing a default affects
containers created afterwards, never existing ones.
"""
from typing import Any, Callable

from observablestate.clone import deep_clone

_default_batch_mode: bool = False
_clone_function: Callable[[Any], Any] = deep_clone


def set_default_batch_mode(enabled: bool) -> None:
    """Set whether new containers start in batching mode when not told otherwise."""
    global _default_batch_mode
    _default_batch_mode = bool(enabled)


def get_default_batch_mode() -> bool:
    return _default_batch_mode


def set_clone_function(clone: Callable[[Any], Any]) -> None:
    """Replace the deep clone used for initial values and written values.

    The function must return a value sharing no mutable references with its
    input and raise on values it cannot clone.

    Args:
        clone: One-argument clone function
    """
    global _clone_function
    if not callable(clone):
        raise TypeError("clone function must be callable")
    _clone_function = clone


def get_clone_function() -> Callable[[Any], Any]:
    return _clone_function


def reset_config() -> None:
    """Restore all defaults."""
    global _default_batch_mode, _clone_function
    _default_batch_mode = False
    _clone_function = deep_clone
