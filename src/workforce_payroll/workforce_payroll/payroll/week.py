from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator

from ..core.constants import DEFAULT_WEEK_START_WEEKDAY

WEEK_LENGTH = timedelta(days=7)


@dataclass(frozen=True)
class Week:
    """A payroll week: `end` is always `start + 6 days`.

    Weeks built through `containing` partition the calendar with no gaps or
    overlaps for a given start weekday.
    """

    start: date

    @property
    def end(self) -> date:
        return self.start + timedelta(days=6)

    @classmethod
    def containing(cls, day: date, start_weekday: int = DEFAULT_WEEK_START_WEEKDAY) -> "Week":
        if isinstance(day, datetime):
            day = day.date()
        offset = (day.weekday() - start_weekday) % 7
        return cls(start=day - timedelta(days=offset))

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def previous(self) -> "Week":
        return Week(start=self.start - WEEK_LENGTH)

    def next(self) -> "Week":
        return Week(start=self.start + WEEK_LENGTH)

    def days(self) -> Iterator[date]:
        for i in range(7):
            yield self.start + timedelta(days=i)


def next_cutoff_after(now: datetime, *, weekday: int, at: time) -> datetime:
    """First cutoff instant strictly after `now`."""

    days_ahead = (weekday - now.weekday()) % 7
    candidate = datetime.combine(now.date() + timedelta(days=days_ahead), at)
    if candidate <= now:
        candidate += WEEK_LENGTH
    return candidate


def closed_week_for_cutoff(cutoff: datetime, *, start_weekday: int = DEFAULT_WEEK_START_WEEKDAY) -> Week:
    """The latest week whose last day is on or before the cutoff's date.

    With Sunday-start weeks and a Sunday 23:59 cutoff this is the week that
    ended the Saturday before.
    """

    week = Week.containing(cutoff.date(), start_weekday)
    if week.end > cutoff.date():
        week = week.previous()
    return week
