from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EmployeeRecord:
    """Domain entity: one row of the employee directory.

    Note: This is a plain data object (no DB access code). Ids are kept as
    strings so records from MySQL and JSON compare equal.
    """

    employee_id: str
    first_name: str
    last_name: str
    manager_id: Optional[str] = None
    job_title: Optional[str] = None
    department: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
