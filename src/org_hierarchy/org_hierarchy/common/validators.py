from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def normalize_id(value: Any) -> Optional[str]:
    """Normalise an employee id coming from MySQL, JSON or a form.

    Ids are compared as strings everywhere in the engine, so ``7`` and ``"7"``
    name the same employee. Empty values mean "no id".
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid employee id: {value!r}")
    text = str(value).strip()
    return text or None


def require_id(value: Any, field_name: str) -> str:
    node_id = normalize_id(value)
    if node_id is None:
        raise ValidationError(f"{field_name} is required")
    return node_id
