from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import PayrollEstimation, PayrollFigures


class PayrollEstimationRepository(Protocol):
    def upsert(
        self,
        *,
        employee_id: int,
        week_start: date,
        week_end: date,
        figures: PayrollFigures,
        updated_at: datetime,
    ) -> PayrollEstimation:
        """Insert or overwrite the row keyed by (employee_id, week_start)."""

        raise NotImplementedError

    def get(self, employee_id: int, week_start: date) -> Optional[PayrollEstimation]:
        raise NotImplementedError

    def list_for_week(self, week_start: date) -> Sequence[PayrollEstimation]:
        raise NotImplementedError


class AutomationStateRepository(Protocol):
    """Small key/value store so cutoff bookkeeping survives restarts."""

    def get_timestamp(self, key: str) -> Optional[datetime]:
        raise NotImplementedError

    def set_timestamp(self, key: str, value: datetime) -> None:
        raise NotImplementedError
