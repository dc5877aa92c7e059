from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import EmployeeStatus, SalaryType


@dataclass(frozen=True)
class Employee:
    """Domain entity: a worker and their pay configuration.

    Owned by HR; deactivated on termination, never deleted.
    """

    employee_id: int
    full_name: str
    salary_type: SalaryType
    hourly_rate: Optional[Decimal] = None
    daily_salary: Optional[Decimal] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    site_id: Optional[int] = None
    supervisor_id: Optional[int] = None
    employee_code: Optional[str] = None
    position: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE
