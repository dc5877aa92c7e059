from __future__ import annotations

import threading
from typing import Callable, Dict, Hashable, List, Protocol, Tuple


class TimerHandle(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def thread_timer(delay: float, fn: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(delay, fn)
    timer.daemon = True
    return timer


class DebounceTable:
    """One cancellable pending task per key.

    Scheduling a key that is already pending cancels the old timer and starts
    a new one, so a burst of events runs `fn` once, `delay` after the last.
    """

    def __init__(self, delay: float, *, timer_factory: TimerFactory = thread_timer):
        self._delay = float(delay)
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._pending: Dict[Hashable, Tuple[object, TimerHandle]] = {}

    def schedule(self, key: Hashable, fn: Callable[[], None]) -> None:
        token = object()

        def fire() -> None:
            with self._lock:
                current = self._pending.get(key)
                if current is None or current[0] is not token:
                    return
                del self._pending[key]
            fn()

        timer = self._timer_factory(self._delay, fire)
        with self._lock:
            previous = self._pending.get(key)
            if previous is not None:
                previous[1].cancel()
            self._pending[key] = (token, timer)
        timer.start()

    def cancel(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._pending.pop(key, None)
        if entry is None:
            return False
        entry[1].cancel()
        return True

    def cancel_all(self) -> int:
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        for _, timer in entries:
            timer.cancel()
        return len(entries)

    def pending(self) -> List[Hashable]:
        with self._lock:
            return list(self._pending.keys())
