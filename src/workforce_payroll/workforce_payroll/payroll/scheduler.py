"""Payroll automation: decides when the weekly calculator runs.

Triggers:
    - cutoff: wall-clock driven, once per week for every active employee.
    - reactive: an attendance change, debounced per (employee, week).
    - manual bulk / manual single: operator actions, not gated by pause.

All triggers converge on `WeeklyPayrollService.calculate`, whose upsert
keeps one row per (employee, week). Nothing here serializes different
employees; concurrent triggers for the same employee race and the last
upsert wins.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime
from typing import Callable, List, Optional

from ..activity.service import ActivityLogService
from ..attendance.change_source import AttendanceChangeSource
from ..attendance.model import AttendanceChange
from ..common.datetime_utils import Clock
from ..core.actor import SYSTEM_ACTOR, Actor
from ..core.constants import ACTIVITY_MODULE_PAYROLL
from ..core.enums import AutomationStatus, TriggerKind
from ..core.exceptions import AuthorizationError, DomainError, PersistenceError
from ..employees.repository import EmployeeRepository
from .aggregation import PayrollAggregationService
from .automation import REACTIVE_WEEK_CURRENT, AutomationConfig
from .debounce import DebounceTable, TimerFactory, thread_timer
from .model import BatchResult, PayrollEstimation, PayrollSummary
from .repository import AutomationStateRepository
from .service import WeeklyPayrollService
from .week import Week, closed_week_for_cutoff, next_cutoff_after

log = logging.getLogger(__name__)

LAST_CUTOFF_KEY = "last_cutoff"
LAST_PROCESSING_KEY = "last_processing"


class PayrollAutomationScheduler:
    def __init__(
        self,
        payroll: WeeklyPayrollService,
        employees: EmployeeRepository,
        aggregation: PayrollAggregationService,
        activity: ActivityLogService,
        *,
        config: Optional[AutomationConfig] = None,
        state: Optional[AutomationStateRepository] = None,
        clock: Optional[Clock] = None,
        timer_factory: TimerFactory = thread_timer,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._payroll = payroll
        self._employees = employees
        self._aggregation = aggregation
        self._activity = activity
        self._config = config or AutomationConfig()
        self._state = state
        self._clock = clock or Clock()
        self._sleep = sleep

        self._lock = threading.Lock()
        self._active = bool(self._config.active)
        self._debounce = DebounceTable(self._config.debounce_seconds, timer_factory=timer_factory)
        self._unsubscribers: List[Callable[[], None]] = []
        self._latest_summary: Optional[PayrollSummary] = None

        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        # A cutoff persisted before a restart makes the first tick catch up.
        last_cutoff = self._load_state(LAST_CUTOFF_KEY)
        self._last_processing: Optional[datetime] = self._load_state(LAST_PROCESSING_KEY)
        self._next_cutoff = self._cutoff_after(last_cutoff or self._clock.now())

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def config(self) -> AutomationConfig:
        return self._config

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    @property
    def next_cutoff(self) -> datetime:
        with self._lock:
            return self._next_cutoff

    @property
    def last_processing(self) -> Optional[datetime]:
        with self._lock:
            return self._last_processing

    @property
    def latest_summary(self) -> Optional[PayrollSummary]:
        with self._lock:
            return self._latest_summary

    def current_week(self) -> Week:
        return Week.containing(self._clock.now().date(), self._config.week_start_weekday)

    def pending_employees(self) -> List[int]:
        return sorted({employee_id for employee_id, _ in self._debounce.pending()})

    def status(self) -> dict:
        last = self.last_processing
        week = self.current_week()
        return {
            "status": (AutomationStatus.ACTIVE if self.is_active else AutomationStatus.PAUSED).value,
            "current_week": {"start": week.start.isoformat(), "end": week.end.isoformat()},
            "next_cutoff": self.next_cutoff.isoformat(),
            "last_processing": last.isoformat() if last else None,
            "pending_employees": self.pending_employees(),
        }

    def set_active(self, actor: Actor, active: bool) -> None:
        """Operator toggle. Pausing drops reactive recomputes still waiting."""

        self._require_admin(actor)
        with self._lock:
            changed = self._active != bool(active)
            self._active = bool(active)
        if not active:
            dropped = self._debounce.cancel_all()
            if dropped:
                log.info("automation paused, dropped %s pending reactive recomputes", dropped)
        if changed:
            status = AutomationStatus.ACTIVE if active else AutomationStatus.PAUSED
            log.info("payroll automation %s by user_id=%s", status.value, actor.user_id)
            self._activity.log(
                actor,
                "payroll_automation_toggle",
                ACTIVITY_MODULE_PAYROLL,
                f"Payroll automation set to {status.value}",
            )

    def activate(self, actor: Actor) -> None:
        self.set_active(actor, True)

    def pause(self, actor: Actor) -> None:
        self.set_active(actor, False)

    # -------------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------------

    def tick(self) -> Optional[BatchResult]:
        """Run the weekly cutoff if it is due (public for testing).

        After downtime spanning several cutoffs only the most recent one
        runs, for the week that closed last. A cutoff is consumed only once
        its batch has run; a batch that cannot start is retried next tick.
        """

        with self._tick_lock:
            now = self._clock.now()
            with self._lock:
                due = self._next_cutoff
                active = self._active
            if now < due:
                return None

            cutoff = self._latest_cutoff_until(due, now)
            if cutoff != due:
                log.warning("cutoffs from %s missed, processing only %s", due.isoformat(), cutoff.isoformat())

            if not active:
                log.info("cutoff %s skipped, automation paused", cutoff.isoformat())
                self._consume_cutoff(cutoff, now)
                return None

            week = closed_week_for_cutoff(cutoff, start_weekday=self._config.week_start_weekday)
            log.info("cutoff %s reached, processing week %s", cutoff.isoformat(), week.start)
            result = self._run_batch(week.start, trigger=TriggerKind.CUTOFF)
            self._consume_cutoff(cutoff, now)
            self._activity.log(
                SYSTEM_ACTOR,
                "payroll_cutoff_processing",
                ACTIVITY_MODULE_PAYROLL,
                f"Weekly cutoff payroll for {result.succeeded} employees - week {week.start.isoformat()}",
                metadata=result.to_dict(),
            )
            return result

    def handle_attendance_change(self, change: AttendanceChange) -> bool:
        """Debounce a recompute for the changed employee. Returns False when paused."""

        if not self.is_active:
            log.debug("attendance change ignored, automation paused employee_id=%s", change.employee_id)
            return False

        week_start = self._reactive_week_start(change)
        employee_id = int(change.employee_id)
        self._debounce.schedule(
            (employee_id, week_start),
            lambda: self._reactive_recompute(employee_id, week_start),
        )
        return True

    def recalculate_all(self, actor: Actor, *, week_start: Optional[date] = None) -> BatchResult:
        self._require_admin(actor)
        week_start = week_start or self.current_week().start
        result = self._run_batch(week_start, trigger=TriggerKind.MANUAL_BULK)
        self._activity.log(
            actor,
            "bulk_payroll_calculation",
            ACTIVITY_MODULE_PAYROLL,
            f"Payroll calculation for {result.succeeded} employees - week {week_start.isoformat()}",
            metadata=result.to_dict(),
        )
        return result

    def recalculate_employee(self, actor: Actor, employee_id: int, *, week_start: Optional[date] = None) -> PayrollEstimation:
        self._require_admin(actor)
        week_start = week_start or self.current_week().start
        estimation = self._calculate_with_retry(int(employee_id), week_start)
        log.info(
            "payroll trigger=%s employee_id=%s week_start=%s by user_id=%s",
            TriggerKind.MANUAL_SINGLE.value,
            employee_id,
            week_start,
            actor.user_id,
        )
        self._activity.log(
            actor,
            "payroll_recalculation",
            ACTIVITY_MODULE_PAYROLL,
            f"Payroll recalculated for employee {employee_id} - week {week_start.isoformat()}",
            metadata={"employee_id": int(employee_id), "week_start": week_start.isoformat()},
        )
        self._after_run(week_start)
        return estimation

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def connect(self, source: AttendanceChangeSource) -> None:
        self._unsubscribers.append(source.subscribe(self.handle_attendance_change))

    def start(self) -> None:
        """Start the cutoff polling loop in a background thread."""

        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="payroll-scheduler", daemon=True)
        self._thread.start()
        log.info("payroll scheduler started next_cutoff=%s", self.next_cutoff.isoformat())

    def stop(self, timeout: float = 30.0) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._debounce.cancel_all()
        log.info("payroll scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                log.exception("payroll scheduler tick failed")
            self._stop_event.wait(timeout=self._config.tick_interval_seconds)

    def _run_batch(self, week_start: date, *, trigger: TriggerKind) -> BatchResult:
        employees = list(self._employees.list_active())
        succeeded = 0
        failed: List[int] = []

        if employees:
            workers = min(self._config.max_workers, len(employees))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="payroll") as pool:
                futures = {
                    pool.submit(self._payroll.calculate, emp.employee_id, week_start): emp.employee_id
                    for emp in employees
                }
                for future in as_completed(futures):
                    employee_id = futures[future]
                    try:
                        future.result()
                        succeeded += 1
                    except DomainError as e:
                        failed.append(employee_id)
                        log.warning("payroll skipped employee_id=%s week_start=%s: %s", employee_id, week_start, e)
                    except Exception:
                        failed.append(employee_id)
                        log.exception("payroll failed employee_id=%s week_start=%s", employee_id, week_start)

        result = BatchResult(
            week_start=week_start,
            attempted=len(employees),
            succeeded=succeeded,
            failed=tuple(sorted(failed)),
        )
        log.info(
            "payroll batch trigger=%s week_start=%s attempted=%s succeeded=%s failed=%s",
            trigger.value,
            week_start,
            result.attempted,
            result.succeeded,
            len(result.failed),
        )
        self._after_run(week_start)
        return result

    def _reactive_recompute(self, employee_id: int, week_start: date) -> None:
        # A pause can land after the timer fired but before this runs.
        if not self.is_active:
            log.debug("reactive payroll dropped, automation paused employee_id=%s", employee_id)
            return
        try:
            self._calculate_with_retry(employee_id, week_start)
        except DomainError as e:
            log.warning("reactive payroll dropped employee_id=%s week_start=%s: %s", employee_id, week_start, e)
            return
        except Exception:
            log.exception("reactive payroll failed employee_id=%s week_start=%s", employee_id, week_start)
            return
        log.info("payroll trigger=%s employee_id=%s week_start=%s", TriggerKind.REACTIVE.value, employee_id, week_start)
        self._after_run(week_start)

    def _calculate_with_retry(self, employee_id: int, week_start: date) -> PayrollEstimation:
        attempts = self._config.retry_attempts
        attempt = 1
        while True:
            try:
                return self._payroll.calculate(employee_id, week_start)
            except PersistenceError as e:
                if attempt >= attempts:
                    raise
                delay = self._config.retry_backoff_seconds * (2 ** (attempt - 1))
                log.warning(
                    "payroll store error employee_id=%s attempt=%s/%s, retrying in %.2fs: %s",
                    employee_id,
                    attempt,
                    attempts,
                    delay,
                    e,
                )
                self._sleep(delay)
                attempt += 1

    def _after_run(self, week_start: date) -> None:
        now = self._clock.now()
        with self._lock:
            self._last_processing = now
        self._save_state(LAST_PROCESSING_KEY, now)

        try:
            summary = self._aggregation.summary_for_week(week_start)
        except DomainError as e:
            log.warning("payroll summary refresh failed week_start=%s: %s", week_start, e)
            return
        with self._lock:
            self._latest_summary = summary

    def _reactive_week_start(self, change: AttendanceChange) -> date:
        if self._config.reactive_week == REACTIVE_WEEK_CURRENT or change.work_date is None:
            return self.current_week().start
        return Week.containing(change.work_date, self._config.week_start_weekday).start

    def _cutoff_after(self, moment: datetime) -> datetime:
        return next_cutoff_after(moment, weekday=self._config.cutoff_weekday, at=self._config.cutoff_time)

    def _latest_cutoff_until(self, cutoff: datetime, now: datetime) -> datetime:
        following = self._cutoff_after(cutoff)
        while following <= now:
            cutoff = following
            following = self._cutoff_after(cutoff)
        return cutoff

    def _consume_cutoff(self, cutoff: datetime, now: datetime) -> None:
        with self._lock:
            self._next_cutoff = self._cutoff_after(now)
        self._save_state(LAST_CUTOFF_KEY, cutoff)

    def _load_state(self, key: str) -> Optional[datetime]:
        if self._state is None:
            return None
        try:
            return self._state.get_timestamp(key)
        except PersistenceError as e:
            log.warning("automation state %s unavailable: %s", key, e)
            return None

    def _save_state(self, key: str, value: datetime) -> None:
        if self._state is None:
            return
        try:
            self._state.set_timestamp(key, value)
        except PersistenceError as e:
            log.warning("automation state %s not saved: %s", key, e)

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can run payroll automation")
