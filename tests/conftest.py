from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.workforce_payroll.workforce_payroll.activity.service import ActivityLogService
from src.workforce_payroll.workforce_payroll.attendance.model import AttendanceRecord
from src.workforce_payroll.workforce_payroll.common.datetime_utils import FixedClock
from src.workforce_payroll.workforce_payroll.core.exceptions import PersistenceError
from src.workforce_payroll.workforce_payroll.employees.model import Employee
from src.workforce_payroll.workforce_payroll.payroll.aggregation import PayrollAggregationService
from src.workforce_payroll.workforce_payroll.payroll.model import PayrollEstimation
from src.workforce_payroll.workforce_payroll.payroll.service import WeeklyPayrollService


class InMemoryEmployees:
    def __init__(self, employees=()):
        self.by_id: dict[int, Employee] = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> Employee:
        self.by_id[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(employee_id)

    def list_active(self, *, site_id: Optional[int] = None):
        items = [e for e in self.by_id.values() if e.is_active and (site_id is None or e.site_id == site_id)]
        return sorted(items, key=lambda e: e.employee_id)


class InMemoryAttendance:
    def __init__(self):
        self.by_key: dict[tuple[int, date], AttendanceRecord] = {}
        self._id = 0

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self.by_key.get((employee_id, work_date))

    def list_for_employee(self, employee_id: int, *, start_date: date, end_date: date):
        items = [
            r for (emp, d), r in self.by_key.items() if emp == employee_id and start_date <= d <= end_date
        ]
        return sorted(items, key=lambda r: r.work_date)

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        existing = self.by_key.get((record.employee_id, record.work_date))
        if existing is None:
            self._id += 1
            record = replace(record, attendance_id=self._id)
        else:
            record = replace(record, attendance_id=existing.attendance_id)
        self.by_key[(record.employee_id, record.work_date)] = record
        return record


class InMemoryEstimations:
    """Keyed like the UNIQUE(employee_id, week_start) table."""

    def __init__(self):
        self.rows: dict[tuple[int, date], PayrollEstimation] = {}
        self.upsert_calls: list[tuple[int, date]] = []
        self._lock = threading.Lock()
        self.fail_for: set[int] = set()
        self.transient_failures = 0

    def upsert(self, *, employee_id, week_start, week_end, figures, updated_at) -> PayrollEstimation:
        if employee_id in self.fail_for:
            raise PersistenceError(f"write failed for {employee_id}")
        with self._lock:
            if self.transient_failures > 0:
                self.transient_failures -= 1
                raise PersistenceError("lock wait timeout exceeded")
        est = PayrollEstimation(
            employee_id=employee_id,
            week_start=week_start,
            week_end=week_end,
            regular_hours=figures.regular_hours,
            overtime_hours=figures.overtime_hours,
            base_pay=figures.base_pay,
            overtime_pay=figures.overtime_pay,
            bonuses=figures.bonuses,
            deductions=figures.deductions,
            gross_total=figures.gross_total,
            net_total=figures.net_total,
            updated_at=updated_at,
        )
        with self._lock:
            self.upsert_calls.append((employee_id, week_start))
            self.rows[(employee_id, week_start)] = est
        return est

    def get(self, employee_id: int, week_start: date) -> Optional[PayrollEstimation]:
        return self.rows.get((employee_id, week_start))

    def list_for_week(self, week_start: date):
        return [e for (_, ws), e in self.rows.items() if ws == week_start]


class InMemoryActivity:
    def __init__(self):
        self.entries = []
        self.broken = False

    def insert(self, entry) -> None:
        if self.broken:
            raise PersistenceError("activity_logs unavailable")
        self.entries.append(entry)


class InMemoryState:
    def __init__(self, values=None):
        self.values: dict[str, datetime] = dict(values or {})

    def get_timestamp(self, key: str) -> Optional[datetime]:
        return self.values.get(key)

    def set_timestamp(self, key: str, value: datetime) -> None:
        self.values[key] = value


class ManualTimer:
    def __init__(self, delay: float, fn):
        self.delay = delay
        self.fn = fn
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.started and not self.cancelled:
            self.fn()


class ManualTimerFactory:
    """Stands in for threading.Timer: timers only run when the test fires them."""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def __call__(self, delay: float, fn) -> ManualTimer:
        timer = ManualTimer(delay, fn)
        self.timers.append(timer)
        return timer

    def live(self) -> list[ManualTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]

    def fire_all(self) -> int:
        live = self.live()
        for t in live:
            t.fire()
        return len(live)


@pytest.fixture
def clock():
    # Wednesday of the week starting Sunday 2026-02-01.
    return FixedClock(datetime(2026, 2, 4, 10, 0, 0))


@pytest.fixture
def employees():
    return InMemoryEmployees()


@pytest.fixture
def attendance():
    return InMemoryAttendance()


@pytest.fixture
def estimations():
    return InMemoryEstimations()


@pytest.fixture
def activity_repo():
    return InMemoryActivity()


@pytest.fixture
def timers():
    return ManualTimerFactory()


@pytest.fixture
def payroll_service(employees, attendance, estimations, clock):
    return WeeklyPayrollService(employees, attendance, estimations, clock=clock)


@pytest.fixture
def aggregation(employees, estimations):
    return PayrollAggregationService(employees, estimations)


@pytest.fixture
def activity_service(activity_repo, clock):
    return ActivityLogService(activity_repo, clock=clock)


@pytest.fixture
def state():
    return InMemoryState()
