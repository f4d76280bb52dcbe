from __future__ import annotations

import pytest

from org_hierarchy.core.exceptions import ConflictError, ValidationError
from org_hierarchy.employees.relationships import check_diff_shape, merge_relationships
from org_hierarchy.hierarchy.model import RelationshipChange as Change

CURRENT = {"1": None, "2": "1", "3": "1", "4": "2"}


def test_merge_applies_absolute_assignments():
    merged = merge_relationships(CURRENT, [Change("4", "3"), Change("2", None)])

    assert merged == {"1": None, "2": None, "3": "1", "4": "3"}
    assert CURRENT["4"] == "2"


def test_merge_rejects_missing_employee_or_manager():
    with pytest.raises(ConflictError):
        merge_relationships(CURRENT, [Change("9", "1")])
    with pytest.raises(ConflictError):
        merge_relationships(CURRENT, [Change("4", "9")])


def test_merge_rejects_cycle_with_stored_data():
    with pytest.raises(ConflictError) as exc:
        merge_relationships(CURRENT, [Change("1", "4")])

    assert "1, 2, 4" in str(exc.value)


def test_diff_shape_checks():
    check_diff_shape([Change("1", "2"), Change("2", None)])

    with pytest.raises(ValidationError):
        check_diff_shape([Change("1", "2"), Change("1", "3")])
    with pytest.raises(ValidationError):
        check_diff_shape([Change("3", "3")])


def test_submitting_the_same_diff_twice_matches_submitting_it_once():
    diff = [Change("4", "3"), Change("2", None)]

    once = merge_relationships(CURRENT, diff)
    twice = merge_relationships(once, diff)

    assert twice == once


def test_in_memory_directory_applies_a_repeated_diff_idempotently(make_directory, org_records):
    diff = [Change("7", "3"), Change("5", "6")]
    once, twice = make_directory(org_records), make_directory(org_records)

    once.save_relationships(diff)
    twice.save_relationships(diff)
    twice.save_relationships(diff)

    assert {k: r.manager_id for k, r in twice.records.items()} == {k: r.manager_id for k, r in once.records.items()}
