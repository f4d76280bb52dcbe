from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..hierarchy.model import RelationshipChange
from .model import EmployeeRecord


class EmployeeDirectory(Protocol):
    """Repository interface for the employee directory.

    Note (DIP): the org chart engine depends on this interface, not on MySQL.
    ``save_relationships`` is the only write path the engine uses.
    """

    def list_active(self) -> Sequence[EmployeeRecord]:
        raise NotImplementedError

    def get_by_id(self, employee_id: str) -> Optional[EmployeeRecord]:
        raise NotImplementedError

    def list_direct_reports(self, manager_id: str) -> Sequence[EmployeeRecord]:
        raise NotImplementedError

    def save_relationships(self, changes: Sequence[RelationshipChange]) -> int:
        raise NotImplementedError
