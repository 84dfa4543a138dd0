"""
Observable state container with copy-on-write snapshots.

This package gives a UI component a single state value that reads like a
plain nested object and writes as if it were mutable, while every write is
applied as an immutable update so renderers can detect change by identity.

Key Features:
- Deep attribute/item writes recorded as path-addressed mutation records
- Copy-on-write snapshots sharing every untouched subtree
- Batching: queue writes, apply them in one transaction
- Scoped all-or-nothing batches with rollback on error
- Whole-state replacement through the same write surface

Quick Start:
    >>> from observablestate import create_container
    >>>
    >>> get_snapshot, state = create_container({'user': {'name': 'Alice'}, 'count': 0})
    >>> state.set.user.name = 'Bob'
    >>> get_snapshot()['user']['name']
    'Bob'
    >>>
    >>> with state.batching():
    ...     state.set.count = 1
    ...     state.set.count = 2
    >>> get_snapshot()['count']
    2

Architecture:
    write -> recorder -> MutationRecord -> (queue while batching) -> patcher
          -> produce() transaction -> new snapshot -> listeners

Modules:
    - container: ObservableState facade and create_container()
    - recorder: Write-intercepting wrappers over the shadow tree
    - recorder_cache: Weak identity cache, one recorder per live object
    - patcher: Applies records onto drafts along their paths
    - batch_queue: Pending records and the batching flag
    - draft: Copy-on-write produce() engine
    - clone: Deep clone for plain state data
    - config: Library-wide defaults (batch mode, clone function)
"""

# Errors
from observablestate.errors import ObservableStateError, CloneError, PatchPathError

# Clone and draft engine
from observablestate.clone import deep_clone
from observablestate.draft import Draft, produce

# Records
from observablestate.snapshot_model import MutationRecord, BatchState, ROOT_KEY

# Recorder
from observablestate.recorder import (
    Recorder,
    MappingRecorder,
    SequenceRecorder,
    ObjectRecorder,
    wrap,
    unwrap,
)
from observablestate.recorder_cache import RecorderCache

# Patcher and queue
from observablestate.patcher import apply_record, apply_records, apply_record_in_place
from observablestate.batch_queue import BatchQueue

# Configuration
from observablestate.config import (
    set_default_batch_mode,
    get_default_batch_mode,
    set_clone_function,
    get_clone_function,
    reset_config,
)

# Container
from observablestate.container import ObservableState, create_container

__all__ = [
    # Errors
    'ObservableStateError',
    'CloneError',
    'PatchPathError',
    # Clone and draft engine
    'deep_clone',
    'Draft',
    'produce',
    # Records
    'MutationRecord',
    'BatchState',
    'ROOT_KEY',
    # Recorder
    'Recorder',
    'MappingRecorder',
    'SequenceRecorder',
    'ObjectRecorder',
    'wrap',
    'unwrap',
    'RecorderCache',
    # Patcher and queue
    'apply_record',
    'apply_records',
    'apply_record_in_place',
    'BatchQueue',
    # Configuration
    'set_default_batch_mode',
    'get_default_batch_mode',
    'set_clone_function',
    'get_clone_function',
    'reset_config',
    # Container
    'ObservableState',
    'create_container',
]

__version__ = '1.0.0'
__description__ = 'Observable state container with copy-on-write snapshots'
