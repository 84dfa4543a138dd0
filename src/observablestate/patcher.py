"""
Path-addressed patcher.

Applies mutation records by walking their path and assigning the last
segment. The walk never creates intermediate structure: every segment but
the last must already resolve to a structured value, otherwise the record
does not fit the tree and PatchPathError is raised.

Records are independent patches. Several records for overlapping paths are
applied one after another in the order given; nothing is merged or reordered.
"""
import logging
from typing import Any, Iterable, Sequence

from observablestate import nodes
from observablestate.draft import Draft, produce
from observablestate.errors import PatchPathError
from observablestate.snapshot_model import MutationRecord

logger = logging.getLogger(__name__)


def _walk_parent(root: Any, record: MutationRecord) -> Any:
    """Follow ``record.path[:-1]`` from ``root`` (a Draft or a plain node)."""
    if record.is_root_replacement:
        raise PatchPathError(record.path, "Root replacement cannot be applied as a patch")

    if not (isinstance(root, Draft) or nodes.is_structured(root)):
        raise PatchPathError((), f"Cannot patch into a {type(root).__name__} state value")
    node = root
    for depth, segment in enumerate(record.path[:-1]):
        if isinstance(node, Draft):
            present = node.has(segment)
        else:
            present = nodes.is_structured(node) and nodes.has_child(node, segment)
        if not present:
            raise PatchPathError(record.path[:depth + 1], "Missing intermediate segment")
        node = node.get(segment) if isinstance(node, Draft) else nodes.get_child(node, segment)
        if not (isinstance(node, Draft) or nodes.is_structured(node)):
            raise PatchPathError(record.path[:depth + 1], f"Segment holds a {type(node).__name__}, not structured state")
    return node


def _check_last(parent: Any, record: MutationRecord) -> None:
    # A list only accepts existing indices or exactly one past the end
    base = parent.base if isinstance(parent, Draft) else parent
    last = record.path[-1]
    if isinstance(base, list):
        size = len(parent)
        if not isinstance(last, int) or isinstance(last, bool) or not 0 <= last <= size:
            raise PatchPathError(record.path, f"Index out of range for list of length {size}")


def apply_record(draft: Draft, record: MutationRecord) -> None:
    """Apply one record onto a draft inside a produce() transaction."""
    parent = _walk_parent(draft, record)
    _check_last(parent, record)
    parent.set(record.path[-1], record.value)


def apply_record_in_place(root: Any, record: MutationRecord) -> None:
    """Apply one record directly onto a plain mutable tree."""
    parent = _walk_parent(root, record)
    _check_last(parent, record)
    nodes.set_child(parent, record.path[-1], record.value)


def apply_records(snapshot: Any, records: Sequence[MutationRecord]) -> Any:
    """Apply ``records`` in order inside one transaction and return the next snapshot.

    Returns ``snapshot`` itself when no record changed anything. On any
    failure the exception propagates and ``snapshot`` is untouched.
    """
    if not records:
        return snapshot
    if not nodes.is_structured(snapshot):
        raise PatchPathError(records[0].path[:1], f"Cannot patch into a {type(snapshot).__name__} state value")

    def recipe(draft: Draft) -> None:
        for record in records:
            apply_record(draft, record)

    result = produce(snapshot, recipe)
    logger.debug(f"PATCH: applied {len(records)} record(s), changed={result is not snapshot}")
    return result


def replay(root: Any, records: Iterable[MutationRecord]) -> int:
    """Apply records in place, skipping ones that no longer fit. Returns the applied count."""
    applied = 0
    for record in records:
        try:
            apply_record_in_place(root, record)
        except PatchPathError as e:
            logger.warning(f"Pending record {record.dotted_path} no longer fits the state: {e}")
            continue
        applied += 1
    return applied
