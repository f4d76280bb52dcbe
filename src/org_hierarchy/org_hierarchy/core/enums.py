from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles as stored in the session by the login flow."""

    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class CascadePolicy(str, Enum):
    """What happens to the reports of a removed node."""

    PROMOTE_CHILDREN = "promote-children"
    REMOVE_SUBTREE = "remove-subtree"


class EditorState(str, Enum):
    """Lifecycle of one org chart editor."""

    VIEWING = "VIEWING"
    EDITING = "EDITING"
    SAVING = "SAVING"
