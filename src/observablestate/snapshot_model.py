"""
Record dataclasses for the mutation pipeline.

MutationRecord is the unit that flows from the recorder to the patcher.
BatchState is the saved form of a batch queue, used to restore the queue
after a scoped batch.

Design Philosophy: Correct by Construction
- Immutable records (frozen dataclass)
- Paths are tuples, never lists
- The leading shadow-root segment is stripped once, at creation
"""
from dataclasses import dataclass
from typing import Any, Tuple

# Key under which the shadow root holds the state value
ROOT_KEY = 'set'


@dataclass(frozen=True)
class MutationRecord:
    """One intercepted write: the state-relative path and the cloned new value.

    An empty path means the whole state value was replaced.
    """
    path: Tuple[Any, ...]
    value: Any

    @classmethod
    def from_write(cls, raw_path: Tuple[Any, ...], value: Any) -> 'MutationRecord':
        """Create a record from a shadow-root path, stripping the root segment."""
        path = tuple(raw_path)
        if path and path[0] == ROOT_KEY:
            path = path[1:]
        return cls(path=path, value=value)

    @property
    def is_root_replacement(self) -> bool:
        return not self.path

    @property
    def dotted_path(self) -> str:
        return '.'.join(str(segment) for segment in self.path) or '<root>'


@dataclass(frozen=True)
class BatchState:
    """Saved batch mode flag and pending records."""
    enabled: bool
    records: Tuple[MutationRecord, ...] = ()
