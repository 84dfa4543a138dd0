"""
Identity-keyed recorder cache.

Keeps at most one live recorder per underlying state object so repeated reads
of the same subtree return the same wrapper. Entries are weak: once nothing
references a recorder it drops out of the cache, and the cache never keeps a
state object alive on its own.

Example:
    cache = RecorderCache()
    cache.set(user_dict, recorder)
    cache.get(user_dict) is recorder   # True while recorder is referenced
    cache.reset()                      # after a root replacement
"""
import logging
import weakref
from typing import Any, Optional

logger = logging.getLogger(__name__)


class RecorderCache:
    """
    Weak identity cache from state objects to their recorders.

    Dicts and lists are neither hashable nor weak-referenceable, so entries are
    keyed by ``id(obj)`` and hold the *recorder* weakly. A live recorder holds
    its target strongly, so while an entry exists its id cannot be recycled.
    """

    def __init__(self):
        self._entries: 'weakref.WeakValueDictionary[int, Any]' = weakref.WeakValueDictionary()

    def get(self, obj: Any) -> Optional[Any]:
        """Return the live recorder for ``obj`` or None."""
        recorder = self._entries.get(id(obj))
        if recorder is not None and recorder.__recorded_target__ is obj:
            return recorder
        return None

    def has(self, obj: Any) -> bool:
        return self.get(obj) is not None

    def set(self, obj: Any, recorder: Any) -> None:
        self._entries[id(obj)] = recorder

    def reset(self) -> None:
        """Drop every entry, e.g. when the paths below the root change meaning."""
        dropped = len(self._entries)
        self._entries = weakref.WeakValueDictionary()
        logger.debug(f"CACHE: reset ({dropped} recorder(s) dropped)")

    def __len__(self) -> int:
        return len(self._entries)
