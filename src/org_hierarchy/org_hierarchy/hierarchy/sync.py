from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from ..core.enums import CascadePolicy, EditorState
from ..core.exceptions import ConflictError, InvalidStateError, UnsavedChangesError, ValidationError
from ..employees.repository import EmployeeDirectory
from .builder import HierarchyBuilder
from .forest import Forest
from .model import MoveRequest, Node, RelationshipChange
from .mutator import TreeMutator
from .tracker import PendingChangeTracker
from .visibility import VisibilityState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveResult:
    submitted: int
    updated: int
    reloaded: bool


class PersistenceSync:
    """One org chart editor: Viewing -> Editing -> Saving -> Viewing/Editing.

    Edits are applied to the local forest immediately and accumulated as a
    diff in the tracker; ``save`` submits that diff in a single call and then
    rebuilds the forest from the directory rather than trusting local state.
    """

    def __init__(
        self,
        directory: EmployeeDirectory,
        *,
        builder: Optional[HierarchyBuilder] = None,
        default_cascade: CascadePolicy = CascadePolicy.PROMOTE_CHILDREN,
        preserve_collapse: bool = False,
    ):
        self._directory = directory
        self._builder = builder or HierarchyBuilder()
        self._default_cascade = default_cascade
        self._preserve_collapse = preserve_collapse
        self._lock = threading.Lock()

        self._state = EditorState.VIEWING
        self._tracker = PendingChangeTracker()
        self._visibility = VisibilityState()
        self._forest = Forest()
        self._mutator = TreeMutator(self._forest, self._tracker, default_cascade=default_cascade)
        self._dirty = False
        self._stale = False

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def forest(self) -> Forest:
        return self._forest

    @property
    def tracker(self) -> PendingChangeTracker:
        return self._tracker

    @property
    def visibility(self) -> VisibilityState:
        return self._visibility

    @property
    def stale(self) -> bool:
        return self._stale

    # --- loading ---

    def load(self) -> List[RelationshipChange]:
        """(Re)build the forest from the directory.

        While editing, pending changes are replayed onto the fresh forest;
        the ones that no longer apply are dropped and returned.
        """

        with self._lock:
            if self._state is EditorState.SAVING:
                raise InvalidStateError("Cannot refresh while a save is in progress")
            return self._reload(replay=self._state is EditorState.EDITING)

    def _reload(self, *, replay: bool) -> List[RelationshipChange]:
        forest = self._builder.build(self._directory.list_active())
        self._forest = forest
        self._tracker.rebase(forest.manager_map())
        self._mutator = TreeMutator(forest, self._tracker, default_cascade=self._default_cascade)
        self._dirty = False
        self._stale = False
        if self._preserve_collapse:
            self._visibility.prune(forest)
        else:
            self._visibility.reset()

        if not replay:
            self._tracker.clear()
            return []
        return self._replay()

    def _replay(self) -> List[RelationshipChange]:
        dropped: List[RelationshipChange] = []
        guard = self._mutator.guard
        for change in self._tracker.diff():
            applicable = (
                change.employee_id in self._forest
                and (change.manager_id is None or change.manager_id in self._forest)
                and not guard.would_create_cycle(change.employee_id, change.manager_id)
            )
            if applicable:
                self._forest.set_manager(change.employee_id, change.manager_id)
                self._dirty = True
            else:
                self._tracker.forget(change.employee_id)
                dropped.append(change)
        if dropped:
            logger.warning("Dropped %d pending change(s) that no longer apply after refresh", len(dropped))
        return dropped

    # --- edit mode ---

    def enter_edit(self) -> None:
        with self._lock:
            if self._state is not EditorState.VIEWING:
                raise InvalidStateError(f"Cannot enter edit mode from {self._state.value}")
            self._state = EditorState.EDITING

    def exit_edit(self, discard: bool = False) -> None:
        with self._lock:
            if self._state is not EditorState.EDITING:
                raise InvalidStateError(f"Cannot leave edit mode from {self._state.value}")
            if self._tracker.has_changes() and not discard:
                raise UnsavedChangesError("You have unsaved changes; save or discard them first")

            had_local_edits = self._dirty or self._tracker.has_changes()
            self._tracker.clear()
            self._state = EditorState.VIEWING
            if had_local_edits:
                self._reload(replay=False)

    def _require_editing(self) -> None:
        if self._state is not EditorState.EDITING:
            raise InvalidStateError(f"Org chart is not editable while {self._state.value}")

    # --- commands, delegated to the mutator ---

    def add_node(self, parent_id: Any, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Node:
        with self._lock:
            self._require_editing()
            node = self._mutator.add_node(parent_id, attributes, **kwargs)
            self._dirty = True
            return node

    def remove_node(self, node_id: Any, cascade_policy: Any = None) -> Forest:
        with self._lock:
            self._require_editing()
            forest = self._mutator.remove_node(node_id, cascade_policy)
            self._dirty = True
            return forest

    def move_node(self, node_id: Any, new_parent_id: Any) -> Forest:
        with self._lock:
            self._require_editing()
            forest = self._mutator.move_node(node_id, new_parent_id)
            self._dirty = True
            return forest

    def apply(self, request: MoveRequest) -> Forest:
        return self.move_node(request.node_id, request.new_parent_id)

    def toggle_collapse(self, node_id: str) -> bool:
        self._forest.require(node_id)
        return self._visibility.toggle_collapse(node_id)

    # --- persistence ---

    def save(self) -> SaveResult:
        with self._lock:
            if self._state is not EditorState.EDITING:
                raise InvalidStateError(f"Cannot save while {self._state.value}")
            if not self._tracker.has_changes():
                raise InvalidStateError("There are no pending changes to save")
            unsaved = self._tracker.unsaved_references()
            if unsaved:
                # Reporting lines can only point at employees the directory already has.
                raise ValidationError(
                    f"Employees {', '.join(unsaved)} were added in this session and are not in the directory yet; "
                    "create them first or move their reports elsewhere"
                )
            self._state = EditorState.SAVING
            diff = self._tracker.diff()

        logger.info("Submitting %d manager relationship change(s)", len(diff))
        try:
            updated = self._directory.save_relationships(diff)
        except ConflictError:
            logger.warning("Save rejected as conflicting; discarding local changes and reloading")
            with self._lock:
                self._tracker.clear()
                try:
                    self._reload(replay=False)
                except Exception:
                    self._stale = True
                    logger.exception("Reload after conflict failed; org chart may be stale")
                finally:
                    self._state = EditorState.EDITING
            raise
        except Exception:
            logger.warning("Save failed; %d pending change(s) kept for retry", len(diff))
            with self._lock:
                self._state = EditorState.EDITING
            raise

        with self._lock:
            self._tracker.clear()
            self._state = EditorState.VIEWING
            reloaded = True
            try:
                self._reload(replay=False)
            except Exception:
                # The save itself went through; report the failed rebuild as stale data.
                reloaded = False
                self._stale = True
                logger.exception("Saved, but reloading the org chart failed; showing stale data")
        logger.info("Saved org chart: %d change(s), %d row(s) updated", len(diff), updated)
        return SaveResult(submitted=len(diff), updated=int(updated or 0), reloaded=reloaded)

    # --- view ---

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "state": self._state.value,
                "hasChanges": self._tracker.has_changes(),
                "pendingChanges": [c.to_dict() for c in self._tracker.diff()],
                "collapsed": self._visibility.collapsed_ids(),
                "warnings": [w.to_dict() for w in self._forest.warnings],
                "stale": self._stale,
                "totalEmployees": len(self._forest),
                "hierarchyLevels": self._forest.hierarchy_levels(),
                "data": self._forest.to_tree(self._visibility),
            }
