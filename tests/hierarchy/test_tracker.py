from __future__ import annotations

from org_hierarchy.hierarchy.model import RelationshipChange
from org_hierarchy.hierarchy.tracker import PendingChangeTracker


def test_latest_change_for_an_employee_wins():
    tracker = PendingChangeTracker()

    tracker.record_change("X", "M1")
    tracker.record_change("X", "M2")

    assert tracker.diff() == [RelationshipChange("X", "M2")]
    assert len(tracker) == 1


def test_diff_keeps_first_recorded_order():
    tracker = PendingChangeTracker()

    tracker.record_change("b", "1")
    tracker.record_change("a", "1")
    tracker.record_change("b", "2")

    assert [c.employee_id for c in tracker.diff()] == ["b", "a"]


def test_has_changes_and_clear():
    tracker = PendingChangeTracker()
    assert not tracker.has_changes()

    tracker.record_change("X", None)
    assert tracker.has_changes()
    assert "X" in tracker
    assert tracker.get("X") == RelationshipChange("X", None)

    tracker.clear()
    assert not tracker.has_changes()
    assert tracker.get("X") is None


def test_change_back_to_baseline_is_dropped():
    tracker = PendingChangeTracker({"X": "M0"})

    tracker.record_change("X", "M1")
    tracker.record_change("X", "M0")

    assert tracker.diff() == []


def test_rebase_drops_entries_already_applied():
    tracker = PendingChangeTracker({"X": "M0", "Y": "M0"})
    tracker.record_change("X", "M1")
    tracker.record_change("Y", "M2")

    tracker.rebase({"X": "M1", "Y": "M0"})

    assert tracker.diff() == [RelationshipChange("Y", "M2")]


def test_forget_removes_single_entry():
    tracker = PendingChangeTracker()
    tracker.record_change("X", "M1")
    tracker.record_change("Y", "M1")

    tracker.forget("X")
    tracker.forget("missing")

    assert tracker.diff() == [RelationshipChange("Y", "M1")]


def test_diff_entries_serialize_as_absolute_assignments():
    tracker = PendingChangeTracker()
    tracker.record_change("7", "3")

    assert [c.to_dict() for c in tracker.diff()] == [{"employeeId": "7", "managerId": "3"}]
    assert RelationshipChange.from_dict({"employeeId": 7, "managerId": 3}) == RelationshipChange("7", "3")


def test_unsaved_references_lists_ids_missing_from_baseline():
    tracker = PendingChangeTracker({"1": None, "2": "1"})
    tracker.record_change("2", "NEW")
    tracker.record_change("NEW", "1")
    tracker.record_change("1", None)

    assert tracker.unsaved_references() == ["NEW"]

    tracker.forget("2")
    tracker.forget("NEW")
    assert tracker.unsaved_references() == []
