from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import Clock
from ..core.enums import PunchAction
from ..core.exceptions import EmployeeNotFound, ValidationError
from ..employees.repository import EmployeeRepository
from ..payroll.calculator.base import PayrollCalculator
from ..payroll.calculator.standard_calculator import StandardPayrollCalculator
from ..sites.geofence import check_geofence
from ..sites.repository import SiteRepository
from .change_source import AttendanceChangeHub
from .model import AttendanceChange, AttendanceRecord
from .repository import AttendanceRepository

log = logging.getLogger(__name__)

# Which punch must already be stamped before each action.
_REQUIRES = {
    PunchAction.CLOCK_IN: None,
    PunchAction.LUNCH_START: PunchAction.CLOCK_IN,
    PunchAction.LUNCH_END: PunchAction.LUNCH_START,
    PunchAction.CLOCK_OUT: PunchAction.CLOCK_IN,
}


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        sites: Optional[SiteRepository] = None,
        *,
        changes: Optional[AttendanceChangeHub] = None,
        calculator: Optional[PayrollCalculator] = None,
        require_location: bool = False,
        clock: Optional[Clock] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._sites = sites
        self._changes = changes
        self._calculator = calculator or StandardPayrollCalculator()
        self._require_location = bool(require_location)
        self._clock = clock or Clock()

    def punch(
        self,
        employee_id: int,
        action: PunchAction,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or self._clock.now()
        today = now.date()
        action = PunchAction(action)

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(int(employee_id))
        if not employee.is_active:
            raise ValidationError("Inactive employees cannot punch")

        self._check_location(employee.site_id, latitude, longitude)

        record = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if record is None:
            record = AttendanceRecord(employee_id=employee.employee_id, work_date=today, site_id=employee.site_id)

        self._check_order(record, action, now)

        record = record.stamp(action, now)
        if action == PunchAction.CLOCK_OUT:
            day = self._calculator.split_day(record)
            record = replace(record, total_hours=day.worked, overtime_hours=day.overtime)

        saved = self._attendance.upsert(record)
        log.info("punch %s employee_id=%s work_date=%s", action.value, employee.employee_id, today)

        if self._changes is not None:
            self._changes.publish(
                AttendanceChange(employee_id=saved.employee_id, work_date=saved.work_date, action=action, occurred_at=now)
            )
        return saved

    def get_today_record(self, employee_id: int, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(employee_id, today or self._clock.today())

    def _check_order(self, record: AttendanceRecord, action: PunchAction, now: datetime) -> None:
        if record.stamped(action) is not None:
            raise ValidationError(f"{action.value} already recorded today")
        if record.is_closed:
            raise ValidationError("The day is already closed")

        required = _REQUIRES[action]
        if required is not None:
            previous = record.stamped(required)
            if previous is None:
                raise ValidationError(f"{action.value} requires {required.value} first")
            if now < previous:
                raise ValidationError(f"{action.value} cannot be earlier than {required.value}")

        if action == PunchAction.CLOCK_OUT and record.lunch_start is not None and record.lunch_end is None:
            raise ValidationError("Finish lunch before clocking out")

    def _check_location(self, site_id: Optional[int], latitude: Optional[float], longitude: Optional[float]) -> None:
        if not self._require_location:
            return
        if latitude is None or longitude is None:
            raise ValidationError("Location is required to punch")
        if site_id is None or self._sites is None:
            return

        site = self._sites.get_by_id(site_id)
        if site is None or not site.has_location:
            return

        inside, dist = check_geofence(latitude, longitude, site.latitude, site.longitude, site.radius_m)
        if not inside:
            raise ValidationError(f"Outside site '{site.name}' radius ({dist:.0f} m > {site.radius_m} m)")
