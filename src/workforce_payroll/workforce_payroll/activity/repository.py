from __future__ import annotations

from typing import Protocol

from .model import ActivityEntry


class ActivityRepository(Protocol):
    def insert(self, entry: ActivityEntry) -> None:
        raise NotImplementedError
