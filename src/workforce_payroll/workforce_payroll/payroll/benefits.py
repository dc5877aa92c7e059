"""Statutory benefits: year-end bonus (aguinaldo) and severance (finiquito).

Pure Decimal arithmetic. Amounts are rounded half-up to cents; day counts
are kept as given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Optional

from ..common.validators import CENT, require_non_negative
from ..core import constants
from ..core.enums import SalaryType
from ..core.exceptions import EmployeeNotFound, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository

log = logging.getLogger(__name__)


def _q(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BenefitsPolicy:
    aguinaldo_days: Decimal = constants.AGUINALDO_DAYS
    aguinaldo_days_per_service_year: Decimal = constants.AGUINALDO_DAYS_PER_SERVICE_YEAR
    vacation_bonus_rate: Decimal = constants.VACATION_BONUS_RATE
    hours_per_day: Decimal = constants.REGULAR_HOURS_PER_DAY
    days_per_month: Decimal = constants.DAYS_PER_MONTH

    def __post_init__(self):
        for name in self.__dataclass_fields__:
            object.__setattr__(self, name, require_non_negative(getattr(self, name), name))

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "BenefitsPolicy":
        values = dict(values or {})
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class Aguinaldo:
    daily_salary: Decimal
    tenure_years: Decimal
    base_days: Decimal
    additional_days: Decimal
    total_days: Decimal
    amount: Decimal

    def to_dict(self) -> dict:
        return {k: str(getattr(self, k)) for k in self.__dataclass_fields__}


@dataclass(frozen=True)
class Finiquito:
    daily_salary: Decimal
    pending_days: Decimal
    vacation_days: Decimal
    vacation_bonus_rate: Decimal
    proportional_aguinaldo: Decimal
    pending_pay: Decimal
    vacation_pay: Decimal
    vacation_bonus: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {k: str(getattr(self, k)) for k in self.__dataclass_fields__}


def compute_aguinaldo(daily_salary, tenure_years=1, *, policy: Optional[BenefitsPolicy] = None) -> Aguinaldo:
    """Year-end bonus: base days plus extra days per completed year of service."""

    policy = policy or BenefitsPolicy()
    daily = require_non_negative(daily_salary, "daily_salary")
    tenure = require_non_negative(tenure_years, "tenure_years")

    completed_years = tenure.to_integral_value(rounding=ROUND_FLOOR)
    additional = completed_years * policy.aguinaldo_days_per_service_year
    total_days = policy.aguinaldo_days + additional
    return Aguinaldo(
        daily_salary=daily,
        tenure_years=tenure,
        base_days=policy.aguinaldo_days,
        additional_days=additional,
        total_days=total_days,
        amount=_q(daily * total_days),
    )


def compute_finiquito(
    daily_salary,
    *,
    pending_days=0,
    vacation_days=0,
    proportional_aguinaldo=0,
    policy: Optional[BenefitsPolicy] = None,
) -> Finiquito:
    """Severance: unpaid days, unused vacation with its bonus, and the
    proportional year-end bonus (already computed by the caller)."""

    policy = policy or BenefitsPolicy()
    daily = require_non_negative(daily_salary, "daily_salary")
    pending = require_non_negative(pending_days, "pending_days")
    vacations = require_non_negative(vacation_days, "vacation_days")
    aguinaldo = require_non_negative(proportional_aguinaldo, "proportional_aguinaldo")

    pending_pay = _q(pending * daily)
    vacation_pay = _q(vacations * daily)
    vacation_bonus = _q(vacation_pay * policy.vacation_bonus_rate)
    return Finiquito(
        daily_salary=daily,
        pending_days=pending,
        vacation_days=vacations,
        vacation_bonus_rate=policy.vacation_bonus_rate,
        proportional_aguinaldo=_q(aguinaldo),
        pending_pay=pending_pay,
        vacation_pay=vacation_pay,
        vacation_bonus=vacation_bonus,
        total=pending_pay + vacation_pay + vacation_bonus + _q(aguinaldo),
    )


def daily_salary_from_hourly(hourly_rate, hours_per_day=None) -> Decimal:
    hours = constants.REGULAR_HOURS_PER_DAY if hours_per_day is None else hours_per_day
    return _q(require_non_negative(hourly_rate, "hourly_rate") * require_non_negative(hours, "hours_per_day"))


def monthly_salary_from_daily(daily_salary, days_per_month=None) -> Decimal:
    days = constants.DAYS_PER_MONTH if days_per_month is None else days_per_month
    return _q(require_non_negative(daily_salary, "daily_salary") * require_non_negative(days, "days_per_month"))


class BenefitsService:
    """Benefit figures for a stored employee, from their pay configuration."""

    def __init__(self, employees: EmployeeRepository, *, policy: Optional[BenefitsPolicy] = None):
        self._employees = employees
        self._policy = policy or BenefitsPolicy()

    @property
    def policy(self) -> BenefitsPolicy:
        return self._policy

    def daily_salary(self, employee: Employee) -> Decimal:
        if employee.salary_type == SalaryType.DAILY:
            return _q(require_non_negative(employee.daily_salary, f"daily_salary of employee {employee.employee_id}"))
        if employee.salary_type == SalaryType.HOURLY:
            return daily_salary_from_hourly(employee.hourly_rate, self._policy.hours_per_day)
        raise ValidationError(f"Unsupported salary_type {employee.salary_type!r}")

    def for_employee(
        self,
        employee_id: int,
        *,
        tenure_years,
        pending_days=0,
        vacation_days=0,
        proportional_aguinaldo=0,
    ) -> dict:
        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFound(employee_id)

        daily = self.daily_salary(employee)
        aguinaldo = compute_aguinaldo(daily, tenure_years, policy=self._policy)
        finiquito = compute_finiquito(
            daily,
            pending_days=pending_days,
            vacation_days=vacation_days,
            proportional_aguinaldo=proportional_aguinaldo,
            policy=self._policy,
        )
        log.info("benefits computed employee_id=%s aguinaldo=%s finiquito=%s", employee_id, aguinaldo.amount, finiquito.total)
        return {
            "employee_id": employee.employee_id,
            "daily_salary": str(daily),
            "monthly_salary": str(monthly_salary_from_daily(daily, self._policy.days_per_month)),
            "aguinaldo": aguinaldo.to_dict(),
            "finiquito": finiquito.to_dict(),
        }
