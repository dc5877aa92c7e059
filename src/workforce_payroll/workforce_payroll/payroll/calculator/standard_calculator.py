from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ...attendance.model import AttendanceRecord
from ...common.validators import CENT, require_non_negative, require_rate
from ...core.enums import SalaryType
from ...core.exceptions import ValidationError
from ...employees.model import Employee
from ..model import ZERO, DayHours, PayrollFigures, PayrollPolicy
from ..week import Week
from .base import PayrollCalculator

SECONDS_PER_HOUR = Decimal("3600")


def _q(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: (out - in) - lunch, not below 0, split at the daily threshold.

    Open days (no clock_out yet) count as 0 hours until closed.
    """

    def __init__(self, policy: Optional[PayrollPolicy] = None):
        self._policy = policy or PayrollPolicy()

    @property
    def policy(self) -> PayrollPolicy:
        return self._policy

    def worked_hours(self, record: AttendanceRecord) -> Decimal:
        if record.clock_in is None or record.clock_out is None:
            return ZERO

        seconds = Decimal(str((record.clock_out - record.clock_in).total_seconds()))
        if record.lunch_start is not None and record.lunch_end is not None and record.lunch_end > record.lunch_start:
            seconds -= Decimal(str((record.lunch_end - record.lunch_start).total_seconds()))

        if seconds <= 0:
            return ZERO
        return _q(seconds / SECONDS_PER_HOUR)

    def split_day(self, record: AttendanceRecord) -> DayHours:
        worked = self.worked_hours(record)
        regular = min(worked, self._policy.regular_hours_per_day)
        return DayHours(
            work_date=record.work_date,
            worked=worked,
            regular=regular,
            overtime=max(ZERO, worked - regular),
        )

    def hourly_rate(self, employee: Employee) -> Decimal:
        if employee.salary_type == SalaryType.HOURLY:
            return require_rate(employee.hourly_rate, f"hourly_rate of employee {employee.employee_id}")
        if employee.salary_type == SalaryType.DAILY:
            daily = require_rate(employee.daily_salary, f"daily_salary of employee {employee.employee_id}")
            return daily / self._policy.daily_hours_equivalent
        raise ValidationError(f"Unsupported salary_type {employee.salary_type!r}")

    def compute(
        self,
        employee: Employee,
        week: Week,
        records: Iterable[AttendanceRecord],
        *,
        bonuses: Decimal = ZERO,
        deductions: Optional[Decimal] = None,
    ) -> PayrollFigures:
        rate = self.hourly_rate(employee)
        bonuses = require_non_negative(bonuses, "bonuses")

        days = tuple(
            self.split_day(r)
            for r in sorted(records, key=lambda r: r.work_date)
            if r.employee_id == employee.employee_id and week.contains(r.work_date)
        )
        regular_hours = sum((d.regular for d in days), ZERO)
        overtime_hours = sum((d.overtime for d in days), ZERO)

        base_pay = _q(regular_hours * rate)
        overtime_pay = _q(overtime_hours * rate * self._policy.overtime_multiplier)
        gross_total = base_pay + overtime_pay + _q(bonuses)

        if deductions is None:
            deductions = _q(gross_total * self._policy.deduction_rate)
        else:
            deductions = _q(require_non_negative(deductions, "deductions"))

        return PayrollFigures(
            regular_hours=_q(regular_hours),
            overtime_hours=_q(overtime_hours),
            base_pay=base_pay,
            overtime_pay=overtime_pay,
            bonuses=_q(bonuses),
            deductions=deductions,
            gross_total=gross_total,
            net_total=gross_total - deductions,
            days=days,
        )
