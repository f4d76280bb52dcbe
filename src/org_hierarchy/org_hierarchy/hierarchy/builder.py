from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from ..common.validators import normalize_id, require_id
from ..employees.model import EmployeeRecord
from .cycle_guard import cyclic_ids
from .forest import Forest
from .model import BuildWarning, CyclicReference, DanglingReference, Node

logger = logging.getLogger(__name__)

RecordLike = Union[EmployeeRecord, Mapping[str, Any]]


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def node_from_record(
    record: RecordLike,
    *,
    node_id: Optional[str] = None,
    manager_id: Optional[str] = None,
    override_manager: bool = False,
) -> Node:
    """Turn a directory record (or a plain mapping) into a Node.

    Mappings may use snake_case or the camelCase keys of the JSON API, and may
    carry either first/last name or an already formatted ``display_name``.
    """

    if isinstance(record, EmployeeRecord):
        rid = record.employee_id
        display_name = record.full_name
        title = record.job_title
        department = record.department
        rmanager = record.manager_id
    else:
        rid = _first(record, "id", "employee_id", "employeeId")
        display_name = _first(record, "display_name", "displayName", "fullName")
        if display_name is None:
            first = _first(record, "first_name", "firstName") or ""
            last = _first(record, "last_name", "lastName") or ""
            display_name = f"{first} {last}".strip()
        title = _first(record, "title", "job_title", "jobTitle")
        department = _first(record, "department")
        rmanager = _first(record, "manager_id", "managerId")

    return Node(
        id=node_id if node_id is not None else require_id(rid, "id"),
        display_name=str(display_name or ""),
        title=title,
        department=department,
        manager_id=manager_id if override_manager else normalize_id(rmanager),
    )


class HierarchyBuilder:
    """Builds a Forest from the flat employee list of the directory.

    The builder does not repair bad data. Managers missing from the input
    (dangling references) become roots; records caught in a reporting loop
    stay out of the tree and are reported as a single cyclic-reference warning.
    """

    def build(self, records: Iterable[RecordLike]) -> Forest:
        nodes: List[Node] = [node_from_record(r) for r in records]
        known = {n.id for n in nodes}

        warnings: List[BuildWarning] = []
        for n in nodes:
            if n.manager_id is not None and n.manager_id not in known:
                warning = DanglingReference(employee_id=n.id, manager_id=n.manager_id)
                logger.warning(warning.message)
                warnings.append(warning)

        # Forest.add rejects duplicate ids with ValidationError.
        forest = Forest(nodes, warnings=warnings)
        if cyclic_ids(forest.manager_map()):
            # Loops are reported, not repaired; everything hanging off a loop has no root either.
            reachable = {node_id for root in forest.roots() for node_id in forest.iter_subtree(root.id)}
            cut_off = tuple(n.id for n in nodes if n.id not in reachable)
            warning = CyclicReference(employee_ids=cut_off)
            logger.warning(warning.message)
            forest.warnings.append(warning)

        logger.info(
            "Built org forest: %d node(s), %d root(s), %d warning(s)",
            len(forest),
            len(forest.roots()),
            len(forest.warnings),
        )
        return forest
