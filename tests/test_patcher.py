"""Tests for the path-addressed patcher."""
from dataclasses import dataclass, field
from typing import Dict

import pytest

from observablestate import MutationRecord, PatchPathError, apply_record_in_place, apply_records
from observablestate.patcher import replay


def _rec(path, value):
    return MutationRecord(path=tuple(path), value=value)


@dataclass(frozen=True)
class Limits:
    caps: Dict[str, int] = field(default_factory=dict)
    label: str = "default"


class TestApplyRecords:
    """apply_records() runs records in one transaction."""

    def test_applies_in_order(self):
        snapshot = {"count": 0}

        result = apply_records(snapshot, [_rec(["count"], 1), _rec(["count"], 2)])

        assert result == {"count": 2}
        assert snapshot == {"count": 0}

    def test_overlapping_paths_are_independent_patches(self):
        snapshot = {"a": {"b": 1, "c": 2}}

        result = apply_records(snapshot, [_rec(["a"], {"b": 10}), _rec(["a", "c"], 20)])

        assert result == {"a": {"b": 10, "c": 20}}

    def test_empty_records_return_snapshot(self):
        snapshot = {"a": 1}

        assert apply_records(snapshot, []) is snapshot

    def test_unchanged_branches_shared(self):
        snapshot = {"a": {"x": 1}, "b": {"y": 2}}

        result = apply_records(snapshot, [_rec(["a", "x"], 5)])

        assert result["b"] is snapshot["b"]

    def test_writes_below_frozen_dataclass(self):
        snapshot = {"limits": Limits(caps={"cpu": 1})}

        result = apply_records(snapshot, [_rec(["limits", "caps", "cpu"], 4), _rec(["limits", "label"], "big")])

        assert result == {"limits": Limits(caps={"cpu": 4}, label="big")}
        assert snapshot == {"limits": Limits(caps={"cpu": 1})}

    def test_list_segments(self):
        snapshot = {"rows": [{"v": 1}, {"v": 2}]}

        result = apply_records(snapshot, [_rec(["rows", 1, "v"], 3), _rec(["rows", 2], {"v": 4})])

        assert result == {"rows": [{"v": 1}, {"v": 3}, {"v": 4}]}
        assert result["rows"][0] is snapshot["rows"][0]

    def test_missing_intermediate_segment(self):
        snapshot = {"a": {}}

        with pytest.raises(PatchPathError) as excinfo:
            apply_records(snapshot, [_rec(["a", "b", "c"], 1)])

        assert excinfo.value.path == ("a", "b")
        assert "a.b" in str(excinfo.value)

    def test_intermediate_segment_not_structured(self):
        with pytest.raises(PatchPathError):
            apply_records({"a": 5}, [_rec(["a", "b"], 1)])

    def test_list_index_out_of_range(self):
        with pytest.raises(PatchPathError):
            apply_records({"rows": [1]}, [_rec(["rows", 3], 1)])

    def test_failure_is_all_or_nothing(self):
        snapshot = {"a": 0, "b": {}}

        with pytest.raises(PatchPathError):
            apply_records(snapshot, [_rec(["a"], 1), _rec(["missing", "x"], 1)])

        assert snapshot == {"a": 0, "b": {}}

    def test_scalar_snapshot_rejected(self):
        with pytest.raises(PatchPathError):
            apply_records(3, [_rec(["a"], 1)])

    def test_root_replacement_rejected(self):
        with pytest.raises(PatchPathError):
            apply_records({"a": 1}, [_rec([], {"a": 2})])

    def test_patch_path_error_is_lookup_error(self):
        with pytest.raises(LookupError):
            apply_records({}, [_rec(["a", "b"], 1)])


def test_apply_record_in_place():
    tree = {"a": {"b": [1]}}

    apply_record_in_place(tree, _rec(["a", "b", 1], 2))

    assert tree == {"a": {"b": [1, 2]}}


def test_replay_skips_records_that_no_longer_fit():
    tree = {"a": {}}

    applied = replay(tree, [_rec(["a", "x"], 1), _rec(["gone", "y"], 2), _rec(["z"], 3)])

    assert applied == 2
    assert tree == {"a": {"x": 1}, "z": 3}
