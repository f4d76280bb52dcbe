from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from .model import RelationshipChange


class PendingChangeTracker:
    """Records manager reassignments that have not been saved yet.

    Only deltas are kept, one per employee; a later change for the same
    employee replaces the earlier one. When the canonical manager of an
    employee is known (the baseline), changing it back removes the entry.
    """

    def __init__(self, baseline: Optional[Mapping[str, Optional[str]]] = None):
        self._changes: Dict[str, Optional[str]] = {}
        self._baseline: Dict[str, Optional[str]] = dict(baseline or {})

    def __len__(self) -> int:
        return len(self._changes)

    def __contains__(self, employee_id: object) -> bool:
        return employee_id in self._changes

    def record_change(self, employee_id: str, manager_id: Optional[str]) -> None:
        if employee_id in self._baseline and self._baseline[employee_id] == manager_id:
            self._changes.pop(employee_id, None)
            return
        self._changes[employee_id] = manager_id

    def get(self, employee_id: str) -> Optional[RelationshipChange]:
        if employee_id not in self._changes:
            return None
        return RelationshipChange(employee_id=employee_id, manager_id=self._changes[employee_id])

    def forget(self, employee_id: str) -> None:
        self._changes.pop(employee_id, None)

    def has_changes(self) -> bool:
        return bool(self._changes)

    def diff(self) -> List[RelationshipChange]:
        return [RelationshipChange(employee_id=e, manager_id=m) for e, m in self._changes.items()]

    def unsaved_references(self) -> List[str]:
        """Ids named by the diff that the directory does not know yet."""

        referenced: List[str] = []
        for employee_id, manager_id in self._changes.items():
            for node_id in (employee_id, manager_id):
                if node_id is not None and node_id not in self._baseline and node_id not in referenced:
                    referenced.append(node_id)
        return referenced

    def clear(self) -> None:
        self._changes.clear()

    def rebase(self, baseline: Mapping[str, Optional[str]]) -> None:
        """Adopt a new canonical state; entries that now match it are dropped."""

        self._baseline = dict(baseline)
        for employee_id, manager_id in list(self._changes.items()):
            if employee_id in self._baseline and self._baseline[employee_id] == manager_id:
                del self._changes[employee_id]
