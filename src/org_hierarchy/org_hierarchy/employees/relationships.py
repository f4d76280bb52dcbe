from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence

from ..core.exceptions import ConflictError, ValidationError
from ..hierarchy.cycle_guard import cyclic_ids
from ..hierarchy.model import RelationshipChange


def check_diff_shape(changes: Sequence[RelationshipChange]) -> None:
    """Reject a diff that is malformed on its own (before looking at stored data)."""

    seen: set[str] = set()
    for change in changes:
        if change.employee_id in seen:
            raise ValidationError(f"Employee {change.employee_id} appears more than once in the diff")
        seen.add(change.employee_id)
        if change.employee_id == change.manager_id:
            raise ValidationError(f"Employee {change.employee_id} cannot be their own manager")


def merge_relationships(
    current: Mapping[str, Optional[str]],
    changes: Sequence[RelationshipChange],
) -> Dict[str, Optional[str]]:
    """Apply a diff to the stored ``employee -> manager`` map and re-validate it.

    Raises ConflictError when the diff no longer fits the stored data: an
    employee or manager was removed meanwhile, or other edits combined with
    this diff would form a reporting cycle.
    """

    merged = dict(current)
    for change in changes:
        if change.employee_id not in merged:
            raise ConflictError(
                f"Employee {change.employee_id} no longer exists; your edits were based on stale data"
            )
        if change.manager_id is not None and change.manager_id not in merged:
            raise ConflictError(
                f"Manager {change.manager_id} no longer exists; your edits were based on stale data"
            )
        merged[change.employee_id] = change.manager_id

    looped = cyclic_ids(merged)
    if looped:
        raise ConflictError(
            "Reporting lines changed concurrently and saving would create a cycle "
            f"({', '.join(sorted(looped))}); your edits were based on stale data"
        )
    return merged
