"""
Mutation recorder: transparent wrappers that turn writes into records.

A recorder wraps one structured node of the shadow tree. Reads hand back
clones of leaf values and structured children as further recorders whose path
extends the parent's. Writes update the shadow node with a deep clone of the
assigned value and then report ``(path, value, previous)`` to ``on_change``.

Recorders never apply anything themselves; deciding whether a write is
applied now or queued is up to whoever supplied ``on_change``.

Usage:
    rec = wrap({'user': {'name': 'Alice'}}, on_change, RecorderCache())
    rec.user.name = 'Bob'          # on_change(('user', 'name'), 'Bob', 'Alice')
    rec['user']['age'] = 30        # item syntax works for dicts as well
    rec.items.append(4)            # list append is an indexed write at len()

Limitations:
    - Deletion is not recorded and raises TypeError
    - Lists only offer append/extend as in-place mutators; sort/insert/pop
      would change the shadow without a record, so reassign the list instead
    - Dict keys that collide with recorder internals (``_target``, ``_path``,
      ...) are only reachable with item syntax
"""
from dataclasses import fields, is_dataclass
from typing import Any, Callable, Iterator, Tuple

from observablestate import nodes
from observablestate.clone import deep_clone
from observablestate.recorder_cache import RecorderCache

# on_change(path, new_value, previous_value)
ChangeCallback = Callable[[Tuple[Any, ...], Any, Any], None]


def _is_dunder(name: str) -> bool:
    return name.startswith('__') and name.endswith('__')


class Recorder:
    """Base class for all recorders. Holds the target and its path."""

    __slots__ = ('_target', '_path', '_on_change', '_cache', '_clone', '__weakref__')

    def __init__(self, target: Any, path: Tuple[Any, ...], on_change: ChangeCallback,
                 cache: RecorderCache, clone: Callable[[Any], Any] = deep_clone):
        object.__setattr__(self, '_target', target)
        object.__setattr__(self, '_path', path)
        object.__setattr__(self, '_on_change', on_change)
        object.__setattr__(self, '_cache', cache)
        object.__setattr__(self, '_clone', clone)

    @property
    def __recorded_target__(self) -> Any:
        return object.__getattribute__(self, '_target')

    @property
    def __recorded_path__(self) -> Tuple[Any, ...]:
        return object.__getattribute__(self, '_path')

    def _child(self, key: Any) -> Any:
        value = nodes.get_child(self._target, key)
        if not nodes.is_structured(value):
            # Leaves such as tuples or bytearrays may still hold mutable parts
            return self._clone(value)
        return wrap(value, self._on_change, self._cache, self._path + (key,), self._clone)

    def _write(self, key: Any, value: Any) -> None:
        target = self._target
        previous = nodes.get_child(target, key) if nodes.has_child(target, key) else None
        # Clone first: a CloneError must leave the shadow untouched
        nodes.set_child(target, key, self._clone(value))
        self._on_change(self._path + (key,), value, previous)

    def _dotted(self) -> str:
        return '.'.join(str(segment) for segment in self._path) or '<root>'

    def __delattr__(self, name: str) -> None:
        raise TypeError(f"Deleting '{name}' at '{self._dotted()}' is not recorded; assign a new parent value instead")

    def __delitem__(self, key: Any) -> None:
        raise TypeError(f"Deleting {key!r} at '{self._dotted()}' is not recorded; assign a new parent value instead")

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Recorder):
            other = other.__recorded_target__
        return self._target == other

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._dotted()}: {self._target!r})"


class MappingRecorder(Recorder):
    """Recorder for dicts. Keys are reachable as attributes and as items."""

    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        if _is_dunder(name):
            raise AttributeError(name)
        target = object.__getattribute__(self, '_target')
        if name not in target:
            raise AttributeError(f"State at '{self._dotted()}' has no key '{name}'")
        return self._child(name)

    def __setattr__(self, name: str, value: Any) -> None:
        self._write(name, value)

    def __getitem__(self, key: Any) -> Any:
        if key not in self._target:
            raise KeyError(key)
        return self._child(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._write(key, value)

    def __contains__(self, key: Any) -> bool:
        return key in self._target

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._target))

    def __len__(self) -> int:
        return len(self._target)


class SequenceRecorder(Recorder):
    """Recorder for lists. Only index assignment, append and extend are recorded."""

    __slots__ = ()

    def _index(self, index: Any) -> int:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"list indices must be integers, not {type(index).__name__}")
        if index < 0:
            index += len(self._target)
        return index

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return [self._child(i) for i in range(len(self._target))[index]]
        position = self._index(index)
        if not 0 <= position < len(self._target):
            raise IndexError("list index out of range")
        return self._child(position)

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            raise TypeError(f"Slice assignment at '{self._dotted()}' is not recorded; assign the whole list instead")
        position = self._index(index)
        if not 0 <= position <= len(self._target):
            raise IndexError("list assignment index out of range")
        self._write(position, value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"List state at '{self._dotted()}' has no attribute '{name}'")

    def append(self, value: Any) -> None:
        """Record an indexed write one past the end."""
        self._write(len(self._target), value)

    def extend(self, values: Any) -> None:
        """Append each value in turn; one record per value."""
        for value in list(values):
            self.append(value)

    def __contains__(self, item: Any) -> bool:
        if isinstance(item, Recorder):
            item = item.__recorded_target__
        return item in self._target

    def __iter__(self) -> Iterator[Any]:
        for position in range(len(self._target)):
            yield self._child(position)

    def __len__(self) -> int:
        return len(self._target)


class ObjectRecorder(Recorder):
    """Recorder for dataclass instances and SimpleNamespace objects."""

    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        if _is_dunder(name):
            raise AttributeError(name)
        target = object.__getattribute__(self, '_target')
        if not nodes.has_child(target, name):
            raise AttributeError(f"{type(target).__name__} has no field '{name}'")
        return self._child(name)

    def __setattr__(self, name: str, value: Any) -> None:
        target = self._target
        if is_dataclass(target) and name not in {f.name for f in fields(target)}:
            raise AttributeError(f"{type(target).__name__} has no field '{name}'")
        self._write(name, value)


def wrap(target: Any, on_change: ChangeCallback, cache: RecorderCache,
         path: Tuple[Any, ...] = (), clone: Callable[[Any], Any] = deep_clone) -> Recorder:
    """Return the recorder for ``target``, creating and caching it if needed.

    Args:
        target: Structured shadow node to wrap
        on_change: Receives (path, new_value, previous_value) after each write
        cache: Per-container recorder cache
        path: Path of ``target`` from the shadow root
        clone: Deep clone used for values written into the shadow

    Raises:
        TypeError: if ``target`` is not a structured value
    """
    recorder = cache.get(target)
    if recorder is not None:
        return recorder

    if isinstance(target, dict):
        recorder_type = MappingRecorder
    elif isinstance(target, list):
        recorder_type = SequenceRecorder
    elif nodes.is_structured(target):
        recorder_type = ObjectRecorder
    else:
        raise TypeError(f"Cannot record writes on {type(target).__name__}")

    recorder = recorder_type(target, tuple(path), on_change, cache, clone)
    cache.set(target, recorder)
    return recorder


def unwrap(value: Any) -> Any:
    """Return a plain, alias-free copy of a recorder's current value (or of any value)."""
    return deep_clone(value)
