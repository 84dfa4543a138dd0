"""
Ordered buffer of pending mutation records with a batching flag.

The queue only stores records. Applying them is the container's job, which
drains the queue and hands the records to the patcher as one transaction.
"""
import logging
from typing import Iterator, List

from observablestate.snapshot_model import BatchState, MutationRecord

logger = logging.getLogger(__name__)


class BatchQueue:
    """Pending records plus the "batching active" flag.

    Not thread-safe (all operations expected on the owning thread).
    """

    def __init__(self, enabled: bool = False):
        self._enabled = enabled
        self._records: List[MutationRecord] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self, flag: bool) -> None:
        self._enabled = bool(flag)

    def push(self, record: MutationRecord) -> None:
        """Queue a field record. Root replacements are never queued."""
        if record.is_root_replacement:
            raise ValueError("Root replacement records bypass the batch queue")
        self._records.append(record)
        logger.debug(f"BATCH: queued {record.dotted_path} (pending={len(self._records)})")

    def drain(self) -> List[MutationRecord]:
        """Remove and return all pending records in enqueue order."""
        records, self._records = self._records, []
        return records

    def clear(self) -> None:
        dropped = len(self._records)
        self._records = []
        if dropped:
            logger.debug(f"BATCH: cleared {dropped} pending record(s)")

    def save(self) -> BatchState:
        return BatchState(enabled=self._enabled, records=tuple(self._records))

    def restore(self, state: BatchState) -> None:
        """Put the flag and pending records back exactly as saved."""
        self._enabled = state.enabled
        self._records = list(state.records)

    def begin_scope(self) -> BatchState:
        """Save the current state, then batch into an empty queue.

        Returns:
            The saved state, to be handed back to restore() when the scope ends
        """
        saved = self.save()
        self._enabled = True
        self._records = []
        return saved

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MutationRecord]:
        return iter(list(self._records))
