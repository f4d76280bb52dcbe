from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any, Callable, Iterable, List, Mapping, Optional

from ..common.validators import require_id
from ..core.constants import EDITOR_ROLES, MAX_EDITOR_SESSIONS
from ..core.enums import CascadePolicy, EditorState, Role
from ..core.exceptions import AuthorizationError, NotFoundError, UnsavedChangesError
from ..employees.repository import EmployeeDirectory
from .builder import HierarchyBuilder, node_from_record
from .cycle_guard import CycleGuard
from .sync import PersistenceSync, SaveResult

logger = logging.getLogger(__name__)


class OrgChartService:
    """Use case: view and edit the reporting hierarchy.

    Each user session gets its own editor (PersistenceSync), so pending
    changes and collapsed nodes never leak between sessions.
    """

    def __init__(
        self,
        directory: EmployeeDirectory,
        *,
        editor_roles: Iterable[str] = EDITOR_ROLES,
        default_cascade: CascadePolicy = CascadePolicy.PROMOTE_CHILDREN,
        preserve_collapse: bool = False,
        editor_factory: Optional[Callable[[], PersistenceSync]] = None,
        max_editors: int = MAX_EDITOR_SESSIONS,
    ):
        self._directory = directory
        self._builder = HierarchyBuilder()
        self._editor_roles = {str(r) for r in editor_roles}
        self._default_cascade = default_cascade
        self._preserve_collapse = preserve_collapse
        self._editor_factory = editor_factory or self._new_editor
        self._max_editors = max(1, int(max_editors))
        self._editors: "OrderedDict[str, PersistenceSync]" = OrderedDict()
        self._editors_lock = threading.Lock()

    def _new_editor(self) -> PersistenceSync:
        return PersistenceSync(
            self._directory,
            builder=self._builder,
            default_cascade=self._default_cascade,
            preserve_collapse=self._preserve_collapse,
        )

    def _require_editor_role(self, current_role: Role) -> None:
        try:
            role = Role(current_role)
        except ValueError:
            raise AuthorizationError("Unknown role")
        if role.value not in self._editor_roles:
            raise AuthorizationError("You do not have permission to edit the org chart")

    def editor_for(self, session_key: Any) -> PersistenceSync:
        key = require_id(session_key, "session")
        with self._editors_lock:
            editor = self._editors.get(key)
            if editor is None:
                editor = self._editor_factory()
                self._editors[key] = editor
                created = True
            else:
                self._editors.move_to_end(key)
                created = False
            self._evict_idle_locked()
        if created:
            editor.load()
            logger.info("Opened org chart editor for session %s", key)
        return editor

    def _evict_idle_locked(self) -> None:
        # Least recently used first; editors in the middle of an edit are never dropped.
        excess = len(self._editors) - self._max_editors
        if excess <= 0:
            return
        for key in list(self._editors)[:-1]:
            if excess <= 0:
                break
            if self._editors[key].state is EditorState.VIEWING:
                del self._editors[key]
                excess -= 1
                logger.info("Evicted idle org chart editor for session %s", key)

    def close_editor(self, session_key: Any) -> bool:
        with self._editors_lock:
            return self._editors.pop(require_id(session_key, "session"), None) is not None

    def end_session(self, *, session_key: Any, discard: bool = False) -> bool:
        key = require_id(session_key, "session")
        with self._editors_lock:
            editor = self._editors.get(key)
        if editor is not None and editor.tracker.has_changes() and not discard:
            raise UnsavedChangesError("You have unsaved changes; save or discard them first")
        return self.close_editor(key)

    def open_editors(self) -> int:
        with self._editors_lock:
            return len(self._editors)

    # --- read-only queries (fresh from the directory) ---

    def get_org_chart(self) -> dict:
        forest = self._builder.build(self._directory.list_active())
        return {
            "data": forest.to_tree(),
            "totalEmployees": len(forest),
            "hierarchyLevels": forest.hierarchy_levels(),
            "warnings": [w.to_dict() for w in forest.warnings],
        }

    def direct_reports(self, manager_id: Any) -> List[dict]:
        manager_id = require_id(manager_id, "managerId")
        if self._directory.get_by_id(manager_id) is None:
            raise NotFoundError(f"Employee {manager_id} not found in the org chart")
        return [node_from_record(r).to_dict() for r in self._directory.list_direct_reports(manager_id)]

    def reporting_chain(self, employee_id: Any) -> List[dict]:
        employee_id = require_id(employee_id, "employeeId")
        forest = self._builder.build(self._directory.list_active())
        forest.require(employee_id)
        return [forest.require(m).to_dict() for m in CycleGuard(forest).chain_of(employee_id)]

    # --- editor commands ---

    def snapshot(self, *, session_key: Any) -> dict:
        return self.editor_for(session_key).snapshot()

    def enter_edit(self, *, current_role: Role, session_key: Any) -> dict:
        self._require_editor_role(current_role)
        editor = self.editor_for(session_key)
        editor.enter_edit()
        return editor.snapshot()

    def exit_edit(self, *, session_key: Any, discard: bool = False) -> dict:
        editor = self.editor_for(session_key)
        editor.exit_edit(discard=bool(discard))
        snapshot = editor.snapshot()
        # A viewer is cheap to rebuild; only editing sessions need to stay registered.
        self.close_editor(session_key)
        return snapshot

    def move(self, *, current_role: Role, session_key: Any, employee_id: Any, manager_id: Any) -> dict:
        self._require_editor_role(current_role)
        editor = self.editor_for(session_key)
        editor.move_node(employee_id, manager_id)
        return editor.snapshot()

    def add(
        self,
        *,
        current_role: Role,
        session_key: Any,
        parent_id: Any,
        attributes: Optional[Mapping[str, Any]] = None,
        employee_id: Any = None,
        track: bool = False,
    ) -> dict:
        self._require_editor_role(current_role)
        editor = self.editor_for(session_key)
        node = editor.add_node(parent_id, attributes, node_id=employee_id, track=bool(track))
        snapshot = editor.snapshot()
        snapshot["node"] = node.to_dict()
        return snapshot

    def remove(self, *, current_role: Role, session_key: Any, employee_id: Any, cascade: Any = None) -> dict:
        self._require_editor_role(current_role)
        editor = self.editor_for(session_key)
        editor.remove_node(employee_id, cascade)
        return editor.snapshot()

    def toggle_collapse(self, *, session_key: Any, employee_id: Any) -> bool:
        return self.editor_for(session_key).toggle_collapse(require_id(employee_id, "employeeId"))

    def refresh(self, *, session_key: Any) -> dict:
        editor = self.editor_for(session_key)
        dropped = editor.load()
        snapshot = editor.snapshot()
        snapshot["droppedChanges"] = [c.to_dict() for c in dropped]
        return snapshot

    def save(self, *, current_role: Role, session_key: Any) -> SaveResult:
        self._require_editor_role(current_role)
        return self.editor_for(session_key).save()
