from datetime import date, datetime
from decimal import Decimal

import pytest

from src.workforce_payroll.workforce_payroll.attendance.change_source import AttendanceChangeHub
from src.workforce_payroll.workforce_payroll.attendance.model import AttendanceChange, AttendanceRecord
from src.workforce_payroll.workforce_payroll.core.actor import Actor
from src.workforce_payroll.workforce_payroll.core.constants import ACTIVITY_MODULE_PAYROLL
from src.workforce_payroll.workforce_payroll.core.enums import Role, SalaryType
from src.workforce_payroll.workforce_payroll.core.exceptions import AuthorizationError, PersistenceError
from src.workforce_payroll.workforce_payroll.employees.model import Employee
from src.workforce_payroll.workforce_payroll.payroll.automation import AutomationConfig
from src.workforce_payroll.workforce_payroll.payroll.scheduler import (
    LAST_CUTOFF_KEY,
    LAST_PROCESSING_KEY,
    PayrollAutomationScheduler,
)

ADMIN = Actor(user_id=1, role=Role.ADMIN)
SUPERVISOR = Actor(user_id=2, role=Role.SUPERVISOR)
WEEK_START = date(2026, 2, 1)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_scheduler(payroll_service, employees, aggregation, activity_service, clock, timers, sleeps):
    def _make(state=None, **overrides):
        settings = {"max_workers": 4, "retry_backoff_seconds": 0.5, **overrides}
        return PayrollAutomationScheduler(
            payroll_service,
            employees,
            aggregation,
            activity_service,
            config=AutomationConfig(**settings),
            state=state,
            clock=clock,
            timer_factory=timers,
            sleep=sleeps.append,
        )

    return _make


def _employee(employee_id, rate="100"):
    return Employee(
        employee_id=employee_id,
        full_name=f"Worker {employee_id}",
        salary_type=SalaryType.HOURLY,
        hourly_rate=Decimal(rate) if rate is not None else None,
    )


def _worked(attendance, employee_id, day: date, hours: int):
    attendance.upsert(
        AttendanceRecord(
            employee_id=employee_id,
            work_date=day,
            clock_in=datetime(day.year, day.month, day.day, 7, 0),
            clock_out=datetime(day.year, day.month, day.day, 7 + hours, 0),
        )
    )


def _change(employee_id, day=date(2026, 2, 2)):
    return AttendanceChange(employee_id=employee_id, work_date=day)


# ---------------------------------------------------------------------------
# Manual bulk
# ---------------------------------------------------------------------------


def test_bulk_run_skips_invalid_employee_and_reports_it(make_scheduler, employees, attendance, estimations, activity_repo):
    for employee_id in (1, 2, 4, 5):
        employees.add(_employee(employee_id))
        _worked(attendance, employee_id, date(2026, 2, 2), 8)
    employees.add(_employee(3, rate=None))

    result = make_scheduler().recalculate_all(ADMIN, week_start=WEEK_START)

    assert result.attempted == 5
    assert result.succeeded == 4
    assert result.failed == (3,)
    assert result.has_failures
    assert sorted(emp for emp, _ in estimations.rows) == [1, 2, 4, 5]

    assert len(activity_repo.entries) == 1
    entry = activity_repo.entries[0]
    assert entry.action == "bulk_payroll_calculation"
    assert entry.module == ACTIVITY_MODULE_PAYROLL
    assert entry.user_id == ADMIN.user_id
    assert entry.metadata["failed"] == [3]


def test_bulk_run_continues_past_store_failure(make_scheduler, employees, estimations):
    for employee_id in (1, 2, 3):
        employees.add(_employee(employee_id))
    estimations.fail_for.add(2)

    result = make_scheduler().recalculate_all(ADMIN, week_start=WEEK_START)

    assert result.succeeded == 2
    assert result.failed == (2,)


def test_bulk_run_defaults_to_current_week(make_scheduler, employees, estimations):
    employees.add(_employee(1))

    result = make_scheduler().recalculate_all(ADMIN)

    assert result.week_start == WEEK_START
    assert (1, WEEK_START) in estimations.rows


def test_bulk_run_with_no_active_employees(make_scheduler):
    result = make_scheduler().recalculate_all(ADMIN, week_start=WEEK_START)
    assert (result.attempted, result.succeeded, result.failed) == (0, 0, ())


def test_run_refreshes_summary_and_last_processing(make_scheduler, employees, attendance, clock, state):
    employees.add(_employee(1))
    _worked(attendance, 1, date(2026, 2, 2), 8)
    scheduler = make_scheduler(state=state)
    assert scheduler.last_processing is None

    scheduler.recalculate_all(ADMIN, week_start=WEEK_START)

    assert scheduler.last_processing == clock.now()
    assert state.values[LAST_PROCESSING_KEY] == clock.now()
    assert scheduler.latest_summary.processed_count == 1
    assert scheduler.latest_summary.total_payroll == Decimal("800.00")


def test_activity_log_failure_does_not_fail_the_run(make_scheduler, employees, activity_repo):
    employees.add(_employee(1))
    activity_repo.broken = True

    result = make_scheduler().recalculate_all(ADMIN, week_start=WEEK_START)

    assert result.succeeded == 1
    assert activity_repo.entries == []


# ---------------------------------------------------------------------------
# Manual single
# ---------------------------------------------------------------------------


def test_single_recalculation_logs_employee(make_scheduler, employees, activity_repo):
    employees.add(_employee(7))

    est = make_scheduler().recalculate_employee(ADMIN, 7, week_start=WEEK_START)

    assert est.employee_id == 7
    assert [e.action for e in activity_repo.entries] == ["payroll_recalculation"]
    assert activity_repo.entries[0].metadata == {"employee_id": 7, "week_start": "2026-02-01"}


def test_single_recalculation_retries_store_errors(make_scheduler, employees, estimations, sleeps):
    employees.add(_employee(1))
    estimations.transient_failures = 2

    est = make_scheduler(retry_attempts=3).recalculate_employee(ADMIN, 1, week_start=WEEK_START)

    assert est.employee_id == 1
    assert sleeps == [0.5, 1.0]


def test_single_recalculation_gives_up_after_retry_budget(make_scheduler, employees, estimations, sleeps, activity_repo):
    employees.add(_employee(1))
    estimations.transient_failures = 10

    with pytest.raises(PersistenceError):
        make_scheduler(retry_attempts=3).recalculate_employee(ADMIN, 1, week_start=WEEK_START)
    assert sleeps == [0.5, 1.0]
    assert activity_repo.entries == []


def test_manual_triggers_require_admin(make_scheduler, employees):
    employees.add(_employee(1))
    scheduler = make_scheduler()

    with pytest.raises(AuthorizationError):
        scheduler.recalculate_all(SUPERVISOR)
    with pytest.raises(AuthorizationError):
        scheduler.recalculate_employee(SUPERVISOR, 1)
    with pytest.raises(AuthorizationError):
        scheduler.pause(SUPERVISOR)
    assert scheduler.is_active


def test_manual_triggers_work_while_paused(make_scheduler, employees):
    employees.add(_employee(1))
    scheduler = make_scheduler()
    scheduler.pause(ADMIN)

    assert scheduler.recalculate_all(ADMIN, week_start=WEEK_START).succeeded == 1
    assert scheduler.recalculate_employee(ADMIN, 1, week_start=WEEK_START).employee_id == 1


# ---------------------------------------------------------------------------
# Reactive
# ---------------------------------------------------------------------------


def test_burst_of_changes_collapses_into_one_recompute(make_scheduler, employees, attendance, estimations, timers):
    employees.add(_employee(1))
    scheduler = make_scheduler()

    for hours in (8, 9, 10):
        _worked(attendance, 1, date(2026, 2, 2), hours)
        assert scheduler.handle_attendance_change(_change(1))

    assert len(timers.timers) == 3
    assert len(timers.live()) == 1
    assert scheduler.pending_employees() == [1]
    assert estimations.upsert_calls == []

    assert timers.fire_all() == 1

    assert estimations.upsert_calls == [(1, WEEK_START)]
    assert estimations.get(1, WEEK_START).overtime_hours == Decimal("2.00")
    assert scheduler.pending_employees() == []


def test_duplicate_change_delivery_is_harmless(make_scheduler, employees, estimations, timers):
    employees.add(_employee(1))
    scheduler = make_scheduler()

    scheduler.handle_attendance_change(_change(1))
    scheduler.handle_attendance_change(_change(1))
    timers.fire_all()

    assert estimations.upsert_calls == [(1, WEEK_START)]


def test_different_employees_debounce_independently(make_scheduler, employees, estimations, timers):
    employees.add(_employee(1))
    employees.add(_employee(2))
    scheduler = make_scheduler()

    scheduler.handle_attendance_change(_change(1))
    scheduler.handle_attendance_change(_change(2))

    assert scheduler.pending_employees() == [1, 2]
    assert timers.fire_all() == 2
    assert sorted(estimations.upsert_calls) == [(1, WEEK_START), (2, WEEK_START)]


def test_paused_scheduler_ignores_changes(make_scheduler, employees, timers, activity_repo):
    employees.add(_employee(1))
    scheduler = make_scheduler()
    scheduler.pause(ADMIN)

    assert scheduler.handle_attendance_change(_change(1)) is False
    assert timers.timers == []
    assert [e.action for e in activity_repo.entries] == ["payroll_automation_toggle"]


def test_pause_drops_pending_recomputes(make_scheduler, employees, estimations, timers):
    employees.add(_employee(1))
    scheduler = make_scheduler()
    scheduler.handle_attendance_change(_change(1))

    scheduler.pause(ADMIN)

    assert scheduler.pending_employees() == []
    assert timers.fire_all() == 0
    assert estimations.upsert_calls == []


def test_toggle_logs_only_on_change(make_scheduler, activity_repo):
    scheduler = make_scheduler()
    scheduler.activate(ADMIN)
    scheduler.pause(ADMIN)
    scheduler.pause(ADMIN)
    scheduler.activate(ADMIN)

    assert len(activity_repo.entries) == 2
    assert scheduler.status()["status"] == "active"


def test_reactive_failure_is_logged_and_dropped(make_scheduler, estimations, timers):
    scheduler = make_scheduler()

    scheduler.handle_attendance_change(_change(42))
    timers.fire_all()

    assert estimations.rows == {}
    assert scheduler.last_processing is None


def test_recompute_already_fired_is_dropped_after_pause(make_scheduler, employees, estimations):
    employees.add(_employee(1))
    scheduler = make_scheduler()
    scheduler.pause(ADMIN)

    # Timer already fired and left the table; only the callback remains.
    scheduler._reactive_recompute(1, WEEK_START)

    assert estimations.upsert_calls == []


def test_reactive_targets_the_week_of_the_record(make_scheduler, employees, estimations, timers):
    employees.add(_employee(1))
    scheduler = make_scheduler()

    scheduler.handle_attendance_change(_change(1, day=date(2026, 1, 28)))
    timers.fire_all()

    assert estimations.upsert_calls == [(1, date(2026, 1, 25))]


def test_reactive_can_target_the_current_week(make_scheduler, employees, estimations, timers):
    employees.add(_employee(1))
    scheduler = make_scheduler(reactive_week="current")

    scheduler.handle_attendance_change(_change(1, day=date(2026, 1, 28)))
    timers.fire_all()

    assert estimations.upsert_calls == [(1, WEEK_START)]


def test_connect_and_stop_manage_the_subscription(make_scheduler, employees, timers):
    employees.add(_employee(1))
    hub = AttendanceChangeHub()
    scheduler = make_scheduler()
    scheduler.connect(hub)

    hub.publish(_change(1))
    assert scheduler.pending_employees() == [1]

    scheduler.stop()
    assert scheduler.pending_employees() == []
    hub.publish(_change(1))
    assert scheduler.pending_employees() == []


# ---------------------------------------------------------------------------
# Cutoff
# ---------------------------------------------------------------------------


def test_tick_before_cutoff_does_nothing(make_scheduler, employees, estimations):
    employees.add(_employee(1))
    scheduler = make_scheduler()

    assert scheduler.next_cutoff == datetime(2026, 2, 8, 23, 59)
    assert scheduler.tick() is None
    assert estimations.rows == {}


def test_tick_after_cutoff_processes_closed_week(make_scheduler, employees, attendance, estimations, clock, activity_repo, state):
    employees.add(_employee(1))
    employees.add(_employee(2))
    _worked(attendance, 1, date(2026, 2, 6), 8)
    scheduler = make_scheduler(state=state)

    clock.set(datetime(2026, 2, 9, 0, 0, 30))
    result = scheduler.tick()

    assert result.week_start == WEEK_START
    assert result.succeeded == 2
    assert sorted(estimations.rows) == [(1, WEEK_START), (2, WEEK_START)]
    assert scheduler.next_cutoff == datetime(2026, 2, 15, 23, 59)
    assert state.values[LAST_CUTOFF_KEY] == datetime(2026, 2, 8, 23, 59)

    entry = activity_repo.entries[-1]
    assert entry.action == "payroll_cutoff_processing"
    assert entry.user_id is None
    assert entry.role == Role.SYSTEM.value

    assert scheduler.tick() is None


def test_missed_cutoff_is_processed_once_after_restart(make_scheduler, employees, estimations, clock, state):
    employees.add(_employee(1))
    state.values[LAST_CUTOFF_KEY] = datetime(2026, 2, 1, 23, 59)
    clock.set(datetime(2026, 2, 10, 9, 0))

    scheduler = make_scheduler(state=state)
    assert scheduler.next_cutoff == datetime(2026, 2, 8, 23, 59)

    result = scheduler.tick()
    assert result.week_start == WEEK_START
    assert scheduler.next_cutoff == datetime(2026, 2, 15, 23, 59)
    assert scheduler.tick() is None
    assert estimations.upsert_calls == [(1, WEEK_START)]


def test_long_outage_processes_the_week_that_closed_last(make_scheduler, employees, estimations, clock, state):
    employees.add(_employee(1))
    state.values[LAST_CUTOFF_KEY] = datetime(2026, 1, 18, 23, 59)
    clock.set(datetime(2026, 2, 4, 10, 0))

    scheduler = make_scheduler(state=state)
    result = scheduler.tick()

    assert result.week_start == date(2026, 1, 25)
    assert list(estimations.rows) == [(1, date(2026, 1, 25))]
    assert state.values[LAST_CUTOFF_KEY] == datetime(2026, 2, 1, 23, 59)
    assert scheduler.next_cutoff == datetime(2026, 2, 8, 23, 59)
    assert scheduler.tick() is None


def test_cutoff_is_retried_when_the_batch_cannot_start(
    make_scheduler, employees, estimations, clock, state, monkeypatch
):
    employees.add(_employee(1))
    scheduler = make_scheduler(state=state)

    def unavailable(*, site_id=None):
        raise PersistenceError("db down")

    monkeypatch.setattr(employees, "list_active", unavailable)
    clock.set(datetime(2026, 2, 9, 0, 1))
    with pytest.raises(PersistenceError):
        scheduler.tick()

    assert scheduler.next_cutoff == datetime(2026, 2, 8, 23, 59)
    assert LAST_CUTOFF_KEY not in state.values

    monkeypatch.undo()
    clock.set(datetime(2026, 2, 9, 0, 2))
    result = scheduler.tick()

    assert result.week_start == WEEK_START
    assert (1, WEEK_START) in estimations.rows
    assert scheduler.next_cutoff == datetime(2026, 2, 15, 23, 59)
    assert state.values[LAST_CUTOFF_KEY] == datetime(2026, 2, 8, 23, 59)


def test_restart_without_history_waits_for_next_cutoff(make_scheduler, clock, state):
    clock.set(datetime(2026, 2, 10, 9, 0))
    scheduler = make_scheduler(state=state)

    assert scheduler.next_cutoff == datetime(2026, 2, 15, 23, 59)
    assert scheduler.tick() is None


def test_cutoff_while_paused_is_skipped(make_scheduler, employees, estimations, clock, state):
    employees.add(_employee(1))
    scheduler = make_scheduler(state=state, active=False)

    clock.set(datetime(2026, 2, 9, 1, 0))

    assert scheduler.tick() is None
    assert estimations.rows == {}
    assert state.values[LAST_CUTOFF_KEY] == datetime(2026, 2, 8, 23, 59)
    assert scheduler.next_cutoff == datetime(2026, 2, 15, 23, 59)


def test_status_reports_schedule(make_scheduler, clock):
    scheduler = make_scheduler()

    status = scheduler.status()

    assert status["status"] == "active"
    assert status["current_week"] == {"start": "2026-02-01", "end": "2026-02-07"}
    assert status["next_cutoff"] == "2026-02-08T23:59:00"
    assert status["last_processing"] is None
    assert status["pending_employees"] == []


def test_start_and_stop_background_loop(make_scheduler):
    scheduler = make_scheduler(tick_interval_seconds=1)

    scheduler.start()
    assert scheduler.is_running
    scheduler.stop(timeout=5)
    assert not scheduler.is_running
