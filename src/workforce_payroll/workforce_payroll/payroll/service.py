from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock
from ..core.exceptions import EmployeeNotFound, ValidationError
from ..employees.repository import EmployeeRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import ZERO, PayrollEstimation
from .repository import PayrollEstimationRepository
from .week import Week

log = logging.getLogger(__name__)


class WeeklyPayrollService:
    """Turns one employee's attendance for one week into a stored estimation.

    Idempotent: with unchanged attendance, repeated calls store the same
    figures. The store's unique (employee_id, week_start) key keeps a single
    row; concurrent callers race and the last upsert wins. `week_start` is
    taken as given, callers normalize it.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        estimations: PayrollEstimationRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Optional[Clock] = None,
    ):
        self._employees = employees
        self._attendance = attendance
        self._estimations = estimations
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock or Clock()

    def calculate(
        self,
        employee_id: int,
        week_start: date,
        *,
        bonuses: Decimal = ZERO,
        deductions: Optional[Decimal] = None,
    ) -> PayrollEstimation:
        if week_start is None:
            raise ValidationError("week_start is required")
        if employee_id is None:
            raise ValidationError("employee_id is required")

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(int(employee_id))

        week = Week(start=week_start)
        records = self._attendance.list_for_employee(employee.employee_id, start_date=week.start, end_date=week.end)
        figures = self._calculator.compute(employee, week, records, bonuses=bonuses, deductions=deductions)

        estimation = self._estimations.upsert(
            employee_id=employee.employee_id,
            week_start=week.start,
            week_end=week.end,
            figures=figures,
            updated_at=self._clock.now(),
        )
        log.debug(
            "payroll calculated employee_id=%s week_start=%s gross=%s",
            employee.employee_id,
            week.start,
            estimation.gross_total,
        )
        return estimation
