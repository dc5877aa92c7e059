from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


class Clock:
    """Injectable source of local wall-clock time."""

    def now(self) -> datetime:
        return now_local()

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock pinned to a given instant until moved with `set`/`advance`."""

    def __init__(self, fixed: datetime):
        self._now = fixed

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, delta) -> None:
        self._now = self._now + delta
