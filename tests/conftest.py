from __future__ import annotations

from dataclasses import replace
from typing import Optional

import pytest

from org_hierarchy.employees.model import EmployeeRecord
from org_hierarchy.employees.relationships import check_diff_shape, merge_relationships


def rec(employee_id: str, manager_id: Optional[str] = None, first: str = "", title: str = "Engineer") -> EmployeeRecord:
    return EmployeeRecord(
        employee_id=employee_id,
        first_name=first or employee_id,
        last_name="Test",
        manager_id=manager_id,
        job_title=title,
        department="Engineering",
    )


class InMemoryDirectory:
    """Employee directory fake; save_relationships validates like the MySQL one."""

    def __init__(self, records):
        self.records = {r.employee_id: r for r in records}
        self.saved_batches = []
        self.list_calls = 0
        self.fail_next_save = None
        self.fail_next_list = None

    def list_active(self):
        self.list_calls += 1
        if self.fail_next_list is not None:
            err, self.fail_next_list = self.fail_next_list, None
            raise err
        return list(self.records.values())

    def get_by_id(self, employee_id):
        return self.records.get(str(employee_id))

    def list_direct_reports(self, manager_id):
        return [r for r in self.records.values() if r.manager_id == str(manager_id)]

    def save_relationships(self, changes):
        changes = list(changes)
        self.saved_batches.append(changes)
        if self.fail_next_save is not None:
            err, self.fail_next_save = self.fail_next_save, None
            raise err
        check_diff_shape(changes)
        merge_relationships({eid: r.manager_id for eid, r in self.records.items()}, changes)
        for change in changes:
            self.records[change.employee_id] = replace(self.records[change.employee_id], manager_id=change.manager_id)
        return len(changes)


@pytest.fixture
def abc_records():
    # A (root) -> B -> C
    return [rec("A"), rec("B", "A"), rec("C", "B")]


@pytest.fixture
def org_records():
    #        1
    #      /   \
    #     2     3
    #    / \     \
    #   4   5     6
    #   |
    #   7
    return [
        rec("1", first="Amelia", title="CEO"),
        rec("2", "1", first="Noah", title="Director"),
        rec("3", "1", first="Isla", title="Director"),
        rec("4", "2", first="Leo", title="Manager"),
        rec("5", "2", first="Ava"),
        rec("6", "3", first="Mia"),
        rec("7", "4", first="Jack"),
    ]


@pytest.fixture
def make_directory():
    return InMemoryDirectory


@pytest.fixture
def directory(org_records):
    return InMemoryDirectory(org_records)


@pytest.fixture
def make_record():
    return rec
