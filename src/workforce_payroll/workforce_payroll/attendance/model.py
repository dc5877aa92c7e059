from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PunchAction


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's punches for one calendar day.

    Upsert key is (employee_id, work_date). Punches fill in the order
    clock_in, lunch_start, lunch_end, clock_out.
    """

    employee_id: int
    work_date: date
    clock_in: Optional[datetime] = None
    lunch_start: Optional[datetime] = None
    lunch_end: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    total_hours: Optional[Decimal] = None
    overtime_hours: Optional[Decimal] = None
    site_id: Optional[int] = None
    notes: Optional[str] = None
    attendance_id: Optional[int] = None

    @property
    def is_closed(self) -> bool:
        return self.clock_in is not None and self.clock_out is not None

    def stamp(self, action: PunchAction, at: datetime) -> "AttendanceRecord":
        return replace(self, **{action.value: at})

    def stamped(self, action: PunchAction) -> Optional[datetime]:
        return getattr(self, action.value)


@dataclass(frozen=True)
class AttendanceChange:
    """Notification that an attendance row was inserted or updated."""

    employee_id: int
    work_date: date
    action: Optional[PunchAction] = None
    occurred_at: Optional[datetime] = None
