from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from ..common.validators import normalize_id, require_id


@dataclass(frozen=True)
class Node:
    """One employee's position in the hierarchy.

    Nodes are immutable snapshots; the Forest replaces a node when its manager
    changes, so callers never hold a mutable reference into the arena.
    """

    id: str
    display_name: str = ""
    title: Optional[str] = None
    department: Optional[str] = None
    manager_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fullName": self.display_name,
            "jobTitle": self.title,
            "department": self.department,
            "managerId": self.manager_id,
        }


@dataclass(frozen=True)
class DanglingReference:
    """Builder warning: a record points at a manager that is not in the input."""

    employee_id: str
    manager_id: str

    @property
    def message(self) -> str:
        return f"Employee {self.employee_id} references unknown manager {self.manager_id}; shown as a root"

    def to_dict(self) -> dict:
        return {
            "type": "dangling-reference",
            "employeeId": self.employee_id,
            "managerId": self.manager_id,
            "message": self.message,
        }


@dataclass(frozen=True)
class CyclicReference:
    """Builder warning: these records form a reporting loop and have no root."""

    employee_ids: Tuple[str, ...]

    @property
    def message(self) -> str:
        return (
            f"Employees {', '.join(self.employee_ids)} form a circular reporting chain; "
            "they are not shown in the chart"
        )

    def to_dict(self) -> dict:
        return {
            "type": "cyclic-reference",
            "employeeIds": list(self.employee_ids),
            "message": self.message,
        }


@dataclass(frozen=True)
class MoveRequest:
    """A single reparent command, as produced by a drag-and-drop gesture."""

    node_id: str
    new_parent_id: Optional[str]


@dataclass(frozen=True)
class RelationshipChange:
    """One diff entry: an absolute assignment of ``employee_id``'s manager."""

    employee_id: str
    manager_id: Optional[str]

    def to_dict(self) -> dict:
        return {"employeeId": self.employee_id, "managerId": self.manager_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RelationshipChange":
        employee_id = data.get("employeeId", data.get("employee_id"))
        manager_id = data.get("managerId", data.get("manager_id"))
        return cls(
            employee_id=require_id(employee_id, "employeeId"),
            manager_id=normalize_id(manager_id),
        )


BuildWarning = Union[DanglingReference, CyclicReference]
