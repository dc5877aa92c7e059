from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EmployeeStatus, SalaryType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, employee_code, full_name, position, site_id, supervisor_id,
    salary_type, hourly_rate, daily_salary, status
"""


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_code=r.get("employee_code"),
        full_name=r["full_name"],
        position=r.get("position"),
        site_id=int(r["site_id"]) if r.get("site_id") is not None else None,
        supervisor_id=int(r["supervisor_id"]) if r.get("supervisor_id") is not None else None,
        salary_type=SalaryType(str(r.get("salary_type") or SalaryType.DAILY.value).lower()),
        hourly_rate=as_decimal(r.get("hourly_rate")),
        daily_salary=as_decimal(r.get("daily_salary")),
        status=EmployeeStatus(r["status"]),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_active(self, *, site_id: Optional[int] = None) -> Sequence[Employee]:
        clauses = ["status=%s"]
        params: list[object] = [EmployeeStatus.ACTIVE.value]
        if site_id is not None:
            clauses.append("site_id=%s")
            params.append(int(site_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {' AND '.join(clauses)} ORDER BY full_name ASC",
                tuple(params),
            )
            return [_to_employee(r) for r in fetchall(cur)]
