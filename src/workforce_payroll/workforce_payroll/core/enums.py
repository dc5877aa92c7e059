from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Operator roles as delivered by the authentication layer."""

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    EMPLOYEE = "employee"
    SYSTEM = "system"


class SalaryType(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PunchAction(str, Enum):
    """Punch actions in the order they fill an attendance day."""

    CLOCK_IN = "clock_in"
    LUNCH_START = "lunch_start"
    LUNCH_END = "lunch_end"
    CLOCK_OUT = "clock_out"


class AutomationStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"


class TriggerKind(str, Enum):
    CUTOFF = "cutoff"
    REACTIVE = "reactive"
    MANUAL_BULK = "manual_bulk"
    MANUAL_SINGLE = "manual_single"
