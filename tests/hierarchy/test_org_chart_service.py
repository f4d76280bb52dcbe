from __future__ import annotations

import pytest

from org_hierarchy.core.enums import CascadePolicy, Role
from org_hierarchy.core.exceptions import AuthorizationError, NotFoundError, UnsavedChangesError, ValidationError
from org_hierarchy.hierarchy.service import OrgChartService


@pytest.fixture
def service(directory):
    return OrgChartService(directory)


def test_org_chart_view(service):
    chart = service.get_org_chart()

    assert chart["totalEmployees"] == 7
    assert chart["hierarchyLevels"] == 4
    assert chart["warnings"] == []
    root = chart["data"][0]
    assert root["id"] == "1"
    assert root["managerName"] is None
    assert [c["id"] for c in root["directReports"]] == ["2", "3"]


def test_org_chart_reports_dangling_managers(make_directory, make_record):
    service = OrgChartService(make_directory([make_record("A"), make_record("B", "ghost")]))

    chart = service.get_org_chart()

    assert [n["id"] for n in chart["data"]] == ["A", "B"]
    assert chart["warnings"][0]["managerId"] == "ghost"


def test_direct_reports_and_chain(service):
    assert [r["id"] for r in service.direct_reports(2)] == ["4", "5"]
    assert [m["id"] for m in service.reporting_chain("7")] == ["4", "2", "1"]

    with pytest.raises(NotFoundError):
        service.direct_reports("99")
    with pytest.raises(ValidationError):
        service.reporting_chain("")


@pytest.mark.parametrize("role", [Role.EMPLOYEE, "employee", "intern", ""])
def test_editing_requires_an_editor_role(service, role):
    with pytest.raises(AuthorizationError):
        service.enter_edit(current_role=role, session_key=1)


def test_editor_roles_are_configurable(directory):
    service = OrgChartService(directory, editor_roles=("admin",))

    with pytest.raises(AuthorizationError):
        service.enter_edit(current_role=Role.HR, session_key=1)
    assert service.enter_edit(current_role="admin", session_key=1)["state"] == "EDITING"


def test_sessions_have_independent_editors(service):
    service.enter_edit(current_role=Role.ADMIN, session_key="alice")
    service.move(current_role=Role.ADMIN, session_key="alice", employee_id="7", manager_id="3")
    service.toggle_collapse(session_key="alice", employee_id="2")

    bob = service.snapshot(session_key="bob")

    assert bob["state"] == "VIEWING"
    assert bob["pendingChanges"] == []
    assert bob["collapsed"] == []
    assert service.snapshot(session_key="alice")["collapsed"] == ["2"]


def test_full_edit_session(service, directory):
    service.enter_edit(current_role=Role.MANAGER, session_key=1)
    snap = service.move(current_role=Role.MANAGER, session_key=1, employee_id=7, manager_id=3)
    assert snap["pendingChanges"] == [{"employeeId": "7", "managerId": "3"}]

    result = service.save(current_role=Role.MANAGER, session_key=1)

    assert result.submitted == 1
    assert directory.records["7"].manager_id == "3"
    assert service.snapshot(session_key=1)["state"] == "VIEWING"


def test_add_and_remove_through_service(service):
    service.enter_edit(current_role=Role.HR, session_key=1)

    added = service.add(
        current_role=Role.HR,
        session_key=1,
        parent_id="3",
        attributes={"firstName": "Zoe", "lastName": "New"},
        employee_id="42",
    )
    assert added["node"] == {
        "id": "42",
        "fullName": "Zoe New",
        "jobTitle": None,
        "department": None,
        "managerId": "3",
    }
    assert added["totalEmployees"] == 8

    removed = service.remove(
        current_role=Role.HR, session_key=1, employee_id="2", cascade=CascadePolicy.REMOVE_SUBTREE.value
    )
    assert removed["totalEmployees"] == 4


def test_remove_uses_configured_default_cascade(directory):
    service = OrgChartService(directory, default_cascade=CascadePolicy.REMOVE_SUBTREE)
    service.enter_edit(current_role=Role.ADMIN, session_key=1)

    snap = service.remove(current_role=Role.ADMIN, session_key=1, employee_id="2")

    assert snap["totalEmployees"] == 3
    assert snap["pendingChanges"] == []


def test_refresh_reports_dropped_changes(service, directory):
    service.enter_edit(current_role=Role.ADMIN, session_key=1)
    service.move(current_role=Role.ADMIN, session_key=1, employee_id="7", manager_id="6")
    del directory.records["6"]

    snap = service.refresh(session_key=1)

    assert snap["droppedChanges"] == [{"employeeId": "7", "managerId": "6"}]
    assert snap["hasChanges"] is False


def test_close_editor_forgets_session_state(service):
    service.toggle_collapse(session_key=1, employee_id="2")

    service.close_editor(1)

    assert service.snapshot(session_key=1)["collapsed"] == []


def test_org_chart_reports_reporting_loops(make_directory, make_record):
    service = OrgChartService(
        make_directory([make_record("R"), make_record("X", "Y"), make_record("Y", "X")])
    )

    chart = service.get_org_chart()

    assert [n["id"] for n in chart["data"]] == ["R"]
    assert chart["warnings"] == [
        {
            "type": "cyclic-reference",
            "employeeIds": ["X", "Y"],
            "message": "Employees X, Y form a circular reporting chain; they are not shown in the chart",
        }
    ]


def test_direct_reports_reads_only_the_manager_and_their_reports(service, directory):
    list_calls = directory.list_calls

    reports = service.direct_reports("3")

    assert [r["id"] for r in reports] == ["6"]
    assert reports[0]["managerId"] == "3"
    assert directory.list_calls == list_calls


def test_exit_edit_releases_the_session_editor(service):
    service.enter_edit(current_role=Role.ADMIN, session_key=1)
    assert service.open_editors() == 1

    snap = service.exit_edit(session_key=1)

    assert snap["state"] == "VIEWING"
    assert service.open_editors() == 0


def test_idle_editors_are_evicted_but_active_edits_are_kept(directory):
    service = OrgChartService(directory, max_editors=2)
    service.enter_edit(current_role=Role.ADMIN, session_key="editing")
    service.move(current_role=Role.ADMIN, session_key="editing", employee_id="7", manager_id="3")

    for viewer in ("v1", "v2", "v3"):
        service.snapshot(session_key=viewer)

    assert service.open_editors() == 2
    assert service.snapshot(session_key="editing")["pendingChanges"] == [{"employeeId": "7", "managerId": "3"}]


def test_end_session_refuses_to_drop_unsaved_changes(service):
    service.enter_edit(current_role=Role.ADMIN, session_key=1)
    service.move(current_role=Role.ADMIN, session_key=1, employee_id="7", manager_id="3")

    with pytest.raises(UnsavedChangesError):
        service.end_session(session_key=1)
    assert service.end_session(session_key=1, discard=True) is True
    assert service.end_session(session_key=1) is False
