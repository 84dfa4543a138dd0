"""
ObservableState: the container a UI component holds its state in.

The container publishes an immutable snapshot and exposes a mutable-looking
write surface. Writes go through recorders into mutation records, which are
either applied at once (one copy-on-write transaction per write) or queued
while batching and applied together on flush.

Lifecycle:
- Created with an initial value (deep-cloned twice: once for the snapshot,
  once for the private shadow tree the recorders wrap)
- Every applied transaction replaces the snapshot and notifies listeners
- dispose() drops listeners, pending records and cached recorders
"""
from contextlib import contextmanager
import logging
from typing import Any, Callable, Generator, Iterable, List, Optional, Tuple

from observablestate import config
from observablestate.batch_queue import BatchQueue
from observablestate.patcher import apply_records, replay
from observablestate.recorder import MappingRecorder, wrap
from observablestate.recorder_cache import RecorderCache
from observablestate.snapshot_model import ROOT_KEY, BatchState, MutationRecord

logger = logging.getLogger(__name__)

# on_each_change(path, new_value, previous_value)
ChangeTracer = Callable[[Tuple[Any, ...], Any, Any], None]
SnapshotListener = Callable[[Any], None]


class ObservableState:
    """
    Snapshot holder and write surface for one piece of UI state.

    Reading:
        state.snapshot / state.get_snapshot() -> current immutable snapshot

    Writing:
        state.set.user.name = "Bob"     # field write (queued while batching)
        state.set = {"count": 0}        # root replacement (always immediate)

    Batching:
        state.enable_batch(True)        # queue field writes
        state.update()                  # apply queued writes as one transaction
        state.enable_batch(False)       # apply queued writes, stop batching
        state.batch(fn) / with state.batching(): ...   # all-or-nothing scope

    Root replacements bypass the queue. Field writes queued before a root
    replacement stay queued and are applied against the new root on the next
    flush.

    Thread safety: Not thread-safe (all operations expected on the UI thread).
    """

    def __init__(
        self,
        initial_value: Any,
        batch_mode: Optional[bool] = None,
        on_each_change: Optional[ChangeTracer] = None,
        clone: Optional[Callable[[Any], Any]] = None,
    ):
        """
        Initialize the container.

        Args:
            initial_value: Plain data to start from; never referenced afterwards
            batch_mode: Start in batching mode. None uses config.get_default_batch_mode()
            on_each_change: Diagnostic hook called for every intercepted write with
                            (path, new_value, previous_value); new_value is a private
                            copy, and the hook never affects control flow
            clone: Deep clone to use. None uses config.get_clone_function()

        Raises:
            CloneError: if ``initial_value`` cannot be cloned
        """
        self._clone = clone if clone is not None else config.get_clone_function()
        if batch_mode is None:
            batch_mode = config.get_default_batch_mode()

        self._snapshot = self._clone(initial_value)
        self._shadow = {ROOT_KEY: self._clone(initial_value)}
        self._cache = RecorderCache()
        self._queue = BatchQueue(enabled=batch_mode)
        self._on_each_change = on_each_change
        self._listeners: List[SnapshotListener] = []
        self._disposed = False
        self._root: MappingRecorder = wrap(self._shadow, self._on_write, self._cache, clone=self._clone)

        logger.debug(f"Created ObservableState: type={type(self._snapshot).__name__}, batch_mode={batch_mode}")

    # === Reading ===

    @property
    def snapshot(self) -> Any:
        """Current published snapshot. Treat as read-only."""
        return self._snapshot

    def get_snapshot(self) -> Any:
        return self._snapshot

    @property
    def is_batching(self) -> bool:
        return self._queue.enabled

    @property
    def pending_count(self) -> int:
        """Number of queued field records waiting for a flush."""
        return len(self._queue)

    # === Writing ===

    @property
    def set(self) -> Any:
        """Write surface: a recorder over the shadow copy of the state."""
        self._check_alive()
        return self._root[ROOT_KEY]

    @set.setter
    def set(self, value: Any) -> None:
        self._check_alive()
        self._root[ROOT_KEY] = value

    def update(self) -> None:
        """Apply queued records while batching; no-op otherwise."""
        if self._queue.enabled:
            self._flush()

    def enable_batch(self, enabled: bool) -> None:
        """Switch batching on or off. Switching off applies everything pending first."""
        if enabled:
            if not self._queue.enabled:
                self._queue.enable(True)
                logger.debug("BATCH: enabled")
            return

        try:
            self._flush()
        finally:
            if self._queue.enabled:
                self._queue.enable(False)
                logger.debug("BATCH: disabled")

    def batch(self, fn: Callable[[], Any]) -> Any:
        """Run ``fn`` as one all-or-nothing batch and return its result.

        Writes made by ``fn`` are queued and applied together when it returns.
        If ``fn`` raises, none of them are applied, the previous batch mode and
        pending records are restored, and the exception is re-raised unchanged.
        """
        with self.batching():
            return fn()

    @contextmanager
    def batching(self) -> Generator['ObservableState', None, None]:
        """Context-manager form of batch().

        Example:
            with state.batching():
                state.set.a = 1
                state.set.b = 2
            # both applied here, in one transaction
        """
        saved = self._queue.begin_scope()
        logger.debug(f"BATCH: scope opened (saved enabled={saved.enabled}, pending={len(saved.records)})")
        try:
            yield self
            self._flush()
        except BaseException:
            self._rollback(saved)
            raise
        self._queue.restore(saved)
        logger.debug("BATCH: scope closed")

    # === Listeners ===

    def connect_listener(self, callback: SnapshotListener) -> None:
        """Subscribe to snapshot publication. Callback receives the new snapshot."""
        if callback not in self._listeners:
            self._listeners.append(callback)
            logger.debug(f"Connected snapshot listener: {callback}")

    def disconnect_listener(self, callback: SnapshotListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)
            logger.debug(f"Disconnected snapshot listener: {callback}")

    def dispose(self) -> None:
        """Release listeners, pending records and cached recorders."""
        self._listeners.clear()
        self._queue.clear()
        self._cache.reset()
        self._disposed = True
        logger.debug("Disposed ObservableState")

    # === Internals ===

    def _check_alive(self) -> None:
        if self._disposed:
            raise RuntimeError("ObservableState has been disposed")

    def _on_write(self, path: Tuple[Any, ...], value: Any, previous: Any) -> None:
        """Recorder callback: turn one write into a record and route it."""
        self._check_alive()
        record = MutationRecord.from_write(path, self._clone(value))
        self._trace(record, previous)

        if record.is_root_replacement:
            self._replace_root(record.value)
        elif self._queue.enabled:
            self._queue.push(record)
        else:
            self._commit([record])

    def _trace(self, record: MutationRecord, previous: Any) -> None:
        logger.debug(f"WRITE: {record.dotted_path} = {record.value!r}")
        if self._on_each_change is None:
            return
        try:
            self._on_each_change(record.path, self._clone(record.value), previous)
        except Exception as e:
            logger.warning(f"Error in on_each_change callback for {record.dotted_path}: {e}")

    def _replace_root(self, value: Any) -> None:
        # Every cached path below the old root is meaningless now
        self._cache.reset()
        logger.debug(f"ROOT: replaced state ({len(self._queue)} pending record(s) kept)")
        self._publish(value)

    def _flush(self) -> None:
        records = self._queue.drain()
        if not records:
            return
        logger.debug(f"FLUSH: applying {len(records)} record(s)")
        self._commit(records)

    def _commit(self, records: List[MutationRecord]) -> None:
        try:
            next_snapshot = apply_records(self._snapshot, records)
        except Exception:
            # The shadow already holds these writes; drop them so reads match the snapshot
            self._resync_shadow(list(self._queue))
            raise
        if next_snapshot is self._snapshot:
            logger.debug("FLUSH: no change, nothing published")
            return
        self._publish(next_snapshot)

    def _publish(self, snapshot: Any) -> None:
        self._snapshot = snapshot
        for callback in list(self._listeners):
            try:
                callback(snapshot)
            except Exception as e:
                logger.warning(f"Snapshot listener failed: {e}")

    def _rollback(self, saved: BatchState) -> None:
        """Restore batch state and rebuild the shadow from snapshot + pending records."""
        self._queue.restore(saved)
        self._resync_shadow(saved.records)
        logger.debug(f"BATCH: scope rolled back ({len(saved.records)} pending record(s) restored)")

    def _resync_shadow(self, pending: Iterable[MutationRecord]) -> None:
        self._shadow[ROOT_KEY] = self._clone(self._snapshot)
        self._cache.reset()
        replay(self._shadow[ROOT_KEY], [MutationRecord(record.path, self._clone(record.value)) for record in pending])

    def __repr__(self) -> str:
        mode = 'batching' if self._queue.enabled else 'immediate'
        return f"ObservableState({mode}, pending={len(self._queue)}, snapshot={self._snapshot!r})"


def create_container(
    initial_value: Any,
    batch_mode: Optional[bool] = None,
    on_each_change: Optional[ChangeTracer] = None,
) -> Tuple[Callable[[], Any], ObservableState]:
    """Create a container and return ``(get_snapshot, state)``.

    Example:
        >>> get_snapshot, state = create_container({'user': {'name': 'Alice'}})
        >>> state.set.user.name = 'Bob'
        >>> get_snapshot()
        {'user': {'name': 'Bob'}}
    """
    state = ObservableState(initial_value, batch_mode=batch_mode, on_each_change=on_each_change)
    return state.get_snapshot, state
