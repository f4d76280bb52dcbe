from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .core.constants import EDITOR_ROLES, MAX_EDITOR_SESSIONS
from .core.enums import CascadePolicy
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .hierarchy.service import OrgChartService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeDirectory

    org_chart_service: OrgChartService


def build_services(directory: EmployeeDirectory, *, settings: Any = None, conn: Optional[DatabaseConnection] = None) -> Container:
    org_chart_service = OrgChartService(
        directory,
        editor_roles=getattr(settings, "EDITOR_ROLES", EDITOR_ROLES),
        default_cascade=CascadePolicy(getattr(settings, "DEFAULT_CASCADE_POLICY", CascadePolicy.PROMOTE_CHILDREN.value)),
        preserve_collapse=bool(getattr(settings, "PRESERVE_COLLAPSE_ON_RELOAD", False)),
        max_editors=int(getattr(settings, "MAX_EDITOR_SESSIONS", MAX_EDITOR_SESSIONS)),
    )
    return Container(conn=conn, employees_repo=directory, org_chart_service=org_chart_service)


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    employees_repo = MySQLEmployeeDirectory(conn)
    return build_services(employees_repo, settings=settings, conn=conn)
