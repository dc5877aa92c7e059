from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from ..common.validators import require_non_negative
from ..core import constants
from ..core.exceptions import ValidationError
from ..employees.model import Employee

ZERO = Decimal("0")


@dataclass(frozen=True)
class PayrollPolicy:
    """Per-organization pay rules (defaults match the original constants)."""

    regular_hours_per_day: Decimal = constants.REGULAR_HOURS_PER_DAY
    overtime_multiplier: Decimal = constants.OVERTIME_MULTIPLIER
    deduction_rate: Decimal = constants.DEDUCTION_RATE
    daily_hours_equivalent: Decimal = constants.DAILY_HOURS_EQUIVALENT

    def __post_init__(self):
        for name in ("regular_hours_per_day", "overtime_multiplier", "deduction_rate", "daily_hours_equivalent"):
            object.__setattr__(self, name, require_non_negative(getattr(self, name), name))
        if self.daily_hours_equivalent == 0:
            raise ValidationError("daily_hours_equivalent must be greater than zero")
        if self.deduction_rate > 1:
            raise ValidationError("deduction_rate must be between 0 and 1")

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "PayrollPolicy":
        values = dict(values or {})
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class DayHours:
    work_date: date
    worked: Decimal
    regular: Decimal
    overtime: Decimal


@dataclass(frozen=True)
class PayrollFigures:
    """Result of the pure weekly computation, before persistence."""

    regular_hours: Decimal
    overtime_hours: Decimal
    base_pay: Decimal
    overtime_pay: Decimal
    bonuses: Decimal
    deductions: Decimal
    gross_total: Decimal
    net_total: Decimal
    days: Tuple[DayHours, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class PayrollEstimation:
    """Stored weekly estimation, unique per (employee_id, week_start)."""

    employee_id: int
    week_start: date
    week_end: date
    regular_hours: Decimal
    overtime_hours: Decimal
    base_pay: Decimal
    overtime_pay: Decimal
    bonuses: Decimal
    deductions: Decimal
    gross_total: Decimal
    net_total: Decimal
    updated_at: Optional[datetime] = None
    estimation_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "regular_hours": str(self.regular_hours),
            "overtime_hours": str(self.overtime_hours),
            "base_pay": str(self.base_pay),
            "overtime_pay": str(self.overtime_pay),
            "bonuses": str(self.bonuses),
            "deductions": str(self.deductions),
            "gross_total": str(self.gross_total),
            "net_total": str(self.net_total),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class EmployeePayrollRow:
    """Read-model: active employee left-joined with the week's estimation."""

    employee: Employee
    estimation: Optional[PayrollEstimation] = None

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee.employee_id,
            "employee_code": self.employee.employee_code,
            "full_name": self.employee.full_name,
            "site_id": self.employee.site_id,
            "salary_type": self.employee.salary_type.value,
            "payroll": self.estimation.to_dict() if self.estimation else None,
        }


@dataclass(frozen=True)
class PayrollSummary:
    week_start: date
    total_employees: int
    processed_count: int
    total_payroll: Decimal
    # Placeholder: no approval state exists yet, so this mirrors processed_count.
    pending_approvals: int
    total_net: Decimal = ZERO
    total_overtime_hours: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "week_start": self.week_start.isoformat(),
            "totalEmployees": self.total_employees,
            "processedCount": self.processed_count,
            "totalPayroll": str(self.total_payroll),
            "pendingApprovals": self.pending_approvals,
            "totalNet": str(self.total_net),
            "totalOvertimeHours": str(self.total_overtime_hours),
        }


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a bulk recompute; partial failure is a result, not an error."""

    week_start: date
    attempted: int
    succeeded: int
    failed: Tuple[int, ...] = ()

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    def to_dict(self) -> dict:
        return {
            "week_start": self.week_start.isoformat(),
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": list(self.failed),
        }
