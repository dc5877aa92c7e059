from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from ..employees.repository import EmployeeRepository
from .model import ZERO, EmployeePayrollRow, PayrollSummary
from .repository import PayrollEstimationRepository


def summarize(week_start: date, rows: Iterable[EmployeePayrollRow]) -> PayrollSummary:
    """Roll up a week's employee/estimation join. Pure; never mutates."""

    rows = list(rows)
    estimations = [r.estimation for r in rows if r.estimation is not None]
    processed = sum(1 for e in estimations if e.gross_total > 0)
    return PayrollSummary(
        week_start=week_start,
        total_employees=len(rows),
        processed_count=processed,
        total_payroll=sum((e.gross_total for e in estimations), ZERO),
        pending_approvals=processed,
        total_net=sum((e.net_total for e in estimations), ZERO),
        total_overtime_hours=sum((e.overtime_hours for e in estimations), ZERO),
    )


class PayrollAggregationService:
    """Read-only dashboard view over one week's estimations."""

    def __init__(self, employees: EmployeeRepository, estimations: PayrollEstimationRepository):
        self._employees = employees
        self._estimations = estimations

    def rows_for_week(self, week_start: date, *, site_id: Optional[int] = None) -> List[EmployeePayrollRow]:
        by_employee = {e.employee_id: e for e in self._estimations.list_for_week(week_start)}
        return [
            EmployeePayrollRow(employee=emp, estimation=by_employee.get(emp.employee_id))
            for emp in self._employees.list_active(site_id=site_id)
        ]

    def summary_for_week(self, week_start: date, *, site_id: Optional[int] = None) -> PayrollSummary:
        return summarize(week_start, self.rows_for_week(week_start, site_id=site_id))
