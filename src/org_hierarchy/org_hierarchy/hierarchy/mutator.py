from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional, Union

from ..common.validators import normalize_id, require_id
from ..core.enums import CascadePolicy
from ..core.exceptions import ValidationError
from .builder import node_from_record
from .cycle_guard import CycleGuard
from .forest import Forest
from .model import MoveRequest, Node
from .tracker import PendingChangeTracker

logger = logging.getLogger(__name__)


def parse_cascade_policy(value: Union[CascadePolicy, str, None], default: CascadePolicy) -> CascadePolicy:
    if value is None or value == "":
        return default
    try:
        return CascadePolicy(value)
    except ValueError:
        raise ValidationError(f"Unknown cascade policy: {value!r}")


class TreeMutator:
    """Add/remove/move operations on a Forest.

    Every check runs before the first write, so a failed call leaves both the
    forest and the tracker untouched. Reparenting goes through ``move_node``
    only, and ``move_node`` always consults the CycleGuard first.
    """

    def __init__(
        self,
        forest: Forest,
        tracker: PendingChangeTracker,
        *,
        default_cascade: CascadePolicy = CascadePolicy.PROMOTE_CHILDREN,
    ):
        self._forest = forest
        self._tracker = tracker
        self._guard = CycleGuard(forest)
        self._default_cascade = default_cascade

    @property
    def forest(self) -> Forest:
        return self._forest

    @property
    def guard(self) -> CycleGuard:
        return self._guard

    def add_node(
        self,
        parent_id: Any,
        attributes: Optional[Mapping[str, Any]] = None,
        *,
        node_id: Any = None,
        track: bool = False,
    ) -> Node:
        parent_id = require_id(parent_id, "parentId")
        self._forest.require(parent_id)

        new_id = normalize_id(node_id) or uuid.uuid4().hex
        if new_id in self._forest:
            raise ValidationError(f"Employee {new_id} is already in the org chart")

        node = node_from_record(attributes or {}, node_id=new_id, manager_id=parent_id, override_manager=True)
        self._forest.add(node)
        if track:
            self._tracker.record_change(new_id, parent_id)
        logger.debug("Added node %s under %s", new_id, parent_id)
        return node

    def remove_node(self, node_id: Any, cascade_policy: Union[CascadePolicy, str, None] = None) -> Forest:
        node_id = require_id(node_id, "employeeId")
        policy = parse_cascade_policy(cascade_policy, self._default_cascade)
        node = self._forest.require(node_id)

        if policy is CascadePolicy.PROMOTE_CHILDREN:
            for child_id in self._forest.children_of(node_id):
                self._forest.set_manager(child_id, node.manager_id)
                self._tracker.record_change(child_id, node.manager_id)
            removed = [node_id]
        else:
            removed = list(self._forest.iter_subtree(node_id))

        for rid in reversed(removed):
            self._forest.remove(rid)
            self._tracker.forget(rid)

        logger.info("Removed %d node(s) starting at %s (%s)", len(removed), node_id, policy.value)
        return self._forest

    def move_node(self, node_id: Any, new_parent_id: Any) -> Forest:
        node_id = require_id(node_id, "employeeId")
        new_parent_id = normalize_id(new_parent_id)

        self._forest.require(node_id)
        if new_parent_id is not None:
            self._forest.require(new_parent_id)

        if node_id == new_parent_id:
            logger.info("Rejected move of %s: self-parent", node_id)
            raise ValidationError("An employee cannot be their own manager")
        if self._guard.would_create_cycle(node_id, new_parent_id):
            logger.info("Rejected move of %s under %s: circular reporting", node_id, new_parent_id)
            raise ValidationError("This would create a circular reporting relationship")

        self._forest.set_manager(node_id, new_parent_id)
        self._tracker.record_change(node_id, new_parent_id)
        return self._forest

    def apply(self, request: MoveRequest) -> Forest:
        return self.move_node(request.node_id, request.new_parent_id)
