from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, Optional

from ...attendance.model import AttendanceRecord
from ...employees.model import Employee
from ..model import DayHours, PayrollFigures
from ..week import Week


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def worked_hours(self, record: AttendanceRecord) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def split_day(self, record: AttendanceRecord) -> DayHours:
        raise NotImplementedError

    @abstractmethod
    def compute(
        self,
        employee: Employee,
        week: Week,
        records: Iterable[AttendanceRecord],
        *,
        bonuses: Decimal = Decimal("0"),
        deductions: Optional[Decimal] = None,
    ) -> PayrollFigures:
        raise NotImplementedError
