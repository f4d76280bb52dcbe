from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Optional, Sequence

import mysql.connector

from ..common.validators import normalize_id
from ..core.constants import DIRECT_REPORTS_LIMIT, TERMINATED_STATUS
from ..core.exceptions import NetworkError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..hierarchy.model import RelationshipChange
from .model import EmployeeRecord
from .relationships import check_diff_shape, merge_relationships
from .repository import EmployeeDirectory

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = "employee_id, first_name, last_name, job_title, department, manager_id"

# CR_CONNECTION_ERROR, CR_CONN_HOST_ERROR, CR_SERVER_GONE_ERROR, CR_SERVER_LOST
_CONNECTION_ERRNOS = {2002, 2003, 2006, 2013}


def _to_record(row: dict) -> EmployeeRecord:
    return EmployeeRecord(
        employee_id=str(row["employee_id"]),
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        manager_id=normalize_id(row.get("manager_id")),
        job_title=row.get("job_title"),
        department=row.get("department"),
    )


@contextmanager
def _network_errors():
    # Connection-level failures mean the directory is unreachable; SQL errors propagate as-is.
    try:
        yield
    except mysql.connector.Error as e:
        connection_lost = isinstance(
            e, (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError)
        ) or e.errno in _CONNECTION_ERRNOS
        if not connection_lost:
            raise
        logger.warning("Employee directory unreachable: %s", e)
        raise NetworkError("Employee directory is unreachable, please retry") from e


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[EmployeeRecord]:
        with _network_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM employees
                WHERE is_active=1 AND status<>%s
                ORDER BY first_name, last_name
                """,
                (TERMINATED_STATUS,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_by_id(self, employee_id: str) -> Optional[EmployeeRecord]:
        with _network_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SELECT_COLUMNS} FROM employees WHERE employee_id=%s AND is_active=1",
                (employee_id,),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def list_direct_reports(self, manager_id: str) -> Sequence[EmployeeRecord]:
        with _network_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM employees
                WHERE manager_id=%s AND is_active=1 AND status<>%s
                ORDER BY first_name, last_name
                LIMIT %s
                """,
                (manager_id, TERMINATED_STATUS, DIRECT_REPORTS_LIMIT),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def save_relationships(self, changes: Sequence[RelationshipChange]) -> int:
        changes = list(changes)
        check_diff_shape(changes)
        if not changes:
            return 0

        with _network_errors(), db_cursor(self._conn_factory) as (_, cur):
            # Lock the active rows so the acyclicity check and the updates see the same data.
            cur.execute(
                "SELECT employee_id, manager_id FROM employees WHERE is_active=1 AND status<>%s FOR UPDATE",
                (TERMINATED_STATUS,),
            )
            current = {str(r["employee_id"]): normalize_id(r.get("manager_id")) for r in fetchall(cur)}
            merge_relationships(current, changes)

            updated = 0
            for change in changes:
                cur.execute(
                    "UPDATE employees SET manager_id=%s WHERE employee_id=%s",
                    (change.manager_id, change.employee_id),
                )
                updated += cur.rowcount
            logger.info("Saved %d manager relationship(s), %d row(s) updated", len(changes), updated)
            return updated
