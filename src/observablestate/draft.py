"""
Copy-on-write draft engine.

``produce(base, recipe)`` hands ``recipe`` a mutable Draft of ``base`` and
returns the next immutable value:

- nothing written: the result *is* ``base``
- something written: every node on the path from the root to a written node
  is a fresh shallow copy, every other subtree is shared with ``base``

``base`` itself is never mutated. Drafts are only valid inside the recipe.

Example:
    >>> base = {'a': {'b': 1}, 'c': {'d': 2}}
    >>> nxt = produce(base, lambda d: d.get('a').set('b', 10))
    >>> nxt['a']['b'], nxt['c'] is base['c'], base['a']['b']
    (10, True, 1)
"""
from typing import Any, Callable, Optional

from observablestate import nodes


class Draft:
    """Mutable stand-in for one structured node of the base tree.

    Reads go to the node's copy once it exists, otherwise to the base node.
    Structured children are returned as child drafts, created on first access
    and parked in the copy so repeated reads return the same draft. The first
    write marks this draft and every ancestor as modified.
    """

    __slots__ = ('_base', '_copy', '_parent', '_modified', '_revoked')

    def __init__(self, base: Any, parent: Optional['Draft'] = None):
        self._base = base
        self._copy = None
        self._parent = parent
        self._modified = False
        self._revoked = False

    def _check(self) -> None:
        if self._revoked:
            raise RuntimeError("Draft used after its produce() call finished")

    def _source(self) -> Any:
        return self._copy if self._copy is not None else self._base

    def _prepare_copy(self) -> None:
        if self._copy is None:
            self._copy = nodes.shallow_copy(self._base)

    def _mark_modified(self) -> None:
        draft = self
        while draft is not None and not draft._modified:
            draft._modified = True
            draft._prepare_copy()
            draft = draft._parent

    @property
    def base(self) -> Any:
        """The node this draft was created from; never mutated."""
        return self._base

    @property
    def modified(self) -> bool:
        return self._modified

    def has(self, key: Any) -> bool:
        self._check()
        return nodes.has_child(self._source(), key)

    def get(self, key: Any) -> Any:
        """Return the child at ``key``: a Draft for structured values, else the value."""
        self._check()
        value = nodes.get_child(self._source(), key)
        if isinstance(value, Draft) or not nodes.is_structured(value):
            return value
        self._prepare_copy()
        child = Draft(value, parent=self)
        nodes.set_child(self._copy, key, child)
        return child

    def set(self, key: Any, value: Any) -> None:
        self._check()
        source = self._source()
        if nodes.has_child(source, key):
            current = nodes.get_child(source, key)
            if current is value or (isinstance(current, Draft) and not current._modified and current._base is value):
                return
        self._prepare_copy()
        nodes.set_child(self._copy, key, value)
        self._mark_modified()

    __getitem__ = get
    __setitem__ = set
    __contains__ = has

    def __len__(self) -> int:
        return len(nodes.iter_children(self._source()))

    def __repr__(self) -> str:
        state = 'modified' if self._modified else 'clean'
        return f"Draft({type(self._base).__name__}, {state})"


def _finalize(value: Any) -> Any:
    if not isinstance(value, Draft):
        return value
    if not value._modified:
        _revoke_all(value)
        return value._base
    value._revoked = True
    result = value._copy
    for key, child in nodes.iter_children(result):
        if isinstance(child, Draft):
            nodes.set_child(result, key, _finalize(child))
    return result


def _revoke_all(draft: Draft) -> None:
    # Drafts parked in copies that never make it into a result
    draft._revoked = True
    if draft._copy is not None:
        for _, child in nodes.iter_children(draft._copy):
            if isinstance(child, Draft):
                _revoke_all(child)


def produce(base: Any, recipe: Callable[[Draft], Any]) -> Any:
    """Run ``recipe`` against a draft of ``base`` and return the next value.

    Args:
        base: Structured value (dict, list, dataclass, SimpleNamespace)
        recipe: Called once with the root Draft; its return value is ignored

    Returns:
        ``base`` if the recipe wrote nothing, else a new structurally shared value

    Raises:
        TypeError: if ``base`` is not structured
        Whatever ``recipe`` raises; ``base`` is left untouched
    """
    if not nodes.is_structured(base):
        raise TypeError(f"produce() needs a structured base, got {type(base).__name__}")
    root = Draft(base)
    try:
        recipe(root)
    except BaseException:
        _revoke_all(root)
        raise
    return _finalize(root)
