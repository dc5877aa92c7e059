from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Mapping, Optional

from ..core import constants
from ..core.exceptions import ValidationError

REACTIVE_WEEK_RECORD = "record"
REACTIVE_WEEK_CURRENT = "current"


@dataclass(frozen=True)
class AutomationConfig:
    """Scheduler settings; each scheduler instance owns its own copy.

    `reactive_week` picks which week a reactive recompute targets: the week
    of the changed record ("record") or the week containing now ("current").
    """

    active: bool = True
    cutoff_weekday: int = constants.DEFAULT_CUTOFF_WEEKDAY
    cutoff_time: time = constants.DEFAULT_CUTOFF_TIME
    week_start_weekday: int = constants.DEFAULT_WEEK_START_WEEKDAY
    debounce_seconds: float = constants.DEFAULT_DEBOUNCE_SECONDS
    max_workers: int = constants.DEFAULT_MAX_WORKERS
    retry_attempts: int = constants.DEFAULT_RETRY_ATTEMPTS
    retry_backoff_seconds: float = constants.DEFAULT_RETRY_BACKOFF_SECONDS
    reactive_week: str = REACTIVE_WEEK_RECORD
    tick_interval_seconds: int = constants.DEFAULT_TICK_INTERVAL_SECONDS

    def __post_init__(self):
        for name in ("cutoff_weekday", "week_start_weekday"):
            value = getattr(self, name)
            if not 0 <= int(value) <= 6:
                raise ValidationError(f"{name} must be 0 (Monday) .. 6 (Sunday), got {value!r}")
        if self.debounce_seconds < 0:
            raise ValidationError("debounce_seconds must be non-negative")
        if self.max_workers < 1:
            raise ValidationError("max_workers must be at least 1")
        if self.retry_attempts < 1:
            raise ValidationError("retry_attempts must be at least 1")
        if self.retry_backoff_seconds < 0:
            raise ValidationError("retry_backoff_seconds must be non-negative")
        if self.reactive_week not in (REACTIVE_WEEK_RECORD, REACTIVE_WEEK_CURRENT):
            raise ValidationError(f"reactive_week must be 'record' or 'current', got {self.reactive_week!r}")

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "AutomationConfig":
        values = {k: v for k, v in dict(values or {}).items() if k in cls.__dataclass_fields__}
        cutoff = values.get("cutoff_time")
        if isinstance(cutoff, str):
            values["cutoff_time"] = datetime.strptime(cutoff, "%H:%M").time()
        return cls(**values)
