from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, clock_in, lunch_start, lunch_end, clock_out,
    total_hours, overtime_hours, site_id, notes
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=r.get("clock_in"),
        lunch_start=r.get("lunch_start"),
        lunch_end=r.get("lunch_end"),
        clock_out=r.get("clock_out"),
        total_hours=as_decimal(r.get("total_hours")),
        overtime_hours=as_decimal(r.get("overtime_hours")),
        site_id=int(r["site_id"]) if r.get("site_id") is not None else None,
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_employee(self, employee_id: int, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(employee_id), start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, clock_in, lunch_start, lunch_end, clock_out,
                    total_hours, overtime_hours, site_id, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    clock_in=VALUES(clock_in),
                    lunch_start=VALUES(lunch_start),
                    lunch_end=VALUES(lunch_end),
                    clock_out=VALUES(clock_out),
                    total_hours=VALUES(total_hours),
                    overtime_hours=VALUES(overtime_hours),
                    site_id=VALUES(site_id),
                    notes=VALUES(notes),
                    updated_at=CURRENT_TIMESTAMP
                """,
                (
                    record.employee_id,
                    record.work_date,
                    record.clock_in,
                    record.lunch_start,
                    record.lunch_end,
                    record.clock_out,
                    record.total_hours,
                    record.overtime_hours,
                    record.site_id,
                    record.notes,
                ),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (record.employee_id, record.work_date),
            )
            return _to_record(fetchone(cur))
