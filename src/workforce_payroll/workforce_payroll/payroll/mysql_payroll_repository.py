from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import PayrollEstimation, PayrollFigures
from .repository import AutomationStateRepository, PayrollEstimationRepository

_COLUMNS = """
    estimation_id, employee_id, week_start, week_end, regular_hours, overtime_hours,
    base_pay, overtime_pay, bonuses, deductions, gross_total, net_total, updated_at
"""


def _to_estimation(r: dict) -> PayrollEstimation:
    return PayrollEstimation(
        estimation_id=int(r["estimation_id"]),
        employee_id=int(r["employee_id"]),
        week_start=r["week_start"],
        week_end=r["week_end"],
        regular_hours=as_decimal(r["regular_hours"]),
        overtime_hours=as_decimal(r["overtime_hours"]),
        base_pay=as_decimal(r["base_pay"]),
        overtime_pay=as_decimal(r["overtime_pay"]),
        bonuses=as_decimal(r["bonuses"]),
        deductions=as_decimal(r["deductions"]),
        gross_total=as_decimal(r["gross_total"]),
        net_total=as_decimal(r["net_total"]),
        updated_at=r.get("updated_at"),
    )


class MySQLPayrollEstimationRepository(PayrollEstimationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(
        self,
        *,
        employee_id: int,
        week_start: date,
        week_end: date,
        figures: PayrollFigures,
        updated_at: datetime,
    ) -> PayrollEstimation:
        # UNIQUE(employee_id, week_start) makes concurrent writers converge on one row.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_estimations(
                    employee_id, week_start, week_end, regular_hours, overtime_hours,
                    base_pay, overtime_pay, bonuses, deductions, gross_total, net_total, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    week_end=VALUES(week_end),
                    regular_hours=VALUES(regular_hours),
                    overtime_hours=VALUES(overtime_hours),
                    base_pay=VALUES(base_pay),
                    overtime_pay=VALUES(overtime_pay),
                    bonuses=VALUES(bonuses),
                    deductions=VALUES(deductions),
                    gross_total=VALUES(gross_total),
                    net_total=VALUES(net_total),
                    updated_at=VALUES(updated_at)
                """,
                (
                    int(employee_id),
                    week_start,
                    week_end,
                    figures.regular_hours,
                    figures.overtime_hours,
                    figures.base_pay,
                    figures.overtime_pay,
                    figures.bonuses,
                    figures.deductions,
                    figures.gross_total,
                    figures.net_total,
                    updated_at,
                ),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_estimations WHERE employee_id=%s AND week_start=%s",
                (int(employee_id), week_start),
            )
            return _to_estimation(fetchone(cur))

    def get(self, employee_id: int, week_start: date) -> Optional[PayrollEstimation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_estimations WHERE employee_id=%s AND week_start=%s",
                (int(employee_id), week_start),
            )
            r = fetchone(cur)
            return _to_estimation(r) if r else None

    def list_for_week(self, week_start: date) -> Sequence[PayrollEstimation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_estimations WHERE week_start=%s ORDER BY gross_total DESC",
                (week_start,),
            )
            return [_to_estimation(r) for r in fetchall(cur)]


class MySQLAutomationStateRepository(AutomationStateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_timestamp(self, key: str) -> Optional[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT ts_value FROM payroll_automation_state WHERE state_key=%s", (key,))
            r = fetchone(cur)
            return r["ts_value"] if r else None

    def set_timestamp(self, key: str, value: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_automation_state(state_key, ts_value)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE ts_value=VALUES(ts_value)
                """,
                (key, value),
            )
