from __future__ import annotations

import logging
import threading
from typing import Callable, List, Protocol

from .model import AttendanceChange

log = logging.getLogger(__name__)

ChangeCallback = Callable[[AttendanceChange], None]


class AttendanceChangeSource(Protocol):
    """Push feed of attendance inserts/updates.

    Delivery is at-least-once; subscribers must tolerate duplicates.
    """

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""

        raise NotImplementedError


class AttendanceChangeHub(AttendanceChangeSource):
    """In-process change feed the attendance service publishes to."""

    def __init__(self):
        self._lock = threading.Lock()
        self._callbacks: List[ChangeCallback] = []

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def publish(self, change: AttendanceChange) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for cb in callbacks:
            try:
                cb(change)
            except Exception:
                # One broken subscriber must not stop the punch or the others.
                log.exception("attendance change subscriber failed employee_id=%s", change.employee_id)
