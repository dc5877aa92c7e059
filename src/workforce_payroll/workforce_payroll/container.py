from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .activity.mysql_activity_repository import MySQLActivityRepository
from .activity.service import ActivityLogService
from .attendance.change_source import AttendanceChangeHub
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .payroll.aggregation import PayrollAggregationService
from .payroll.benefits import BenefitsPolicy, BenefitsService
from .payroll.automation import AutomationConfig
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.model import PayrollPolicy
from .payroll.mysql_payroll_repository import MySQLAutomationStateRepository, MySQLPayrollEstimationRepository
from .payroll.scheduler import PayrollAutomationScheduler
from .payroll.service import WeeklyPayrollService
from .sites.mysql_site_repository import MySQLSiteRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    sites_repo: MySQLSiteRepository
    attendance_repo: MySQLAttendanceRepository
    estimations_repo: MySQLPayrollEstimationRepository
    automation_state_repo: MySQLAutomationStateRepository
    activity_repo: MySQLActivityRepository

    attendance_changes: AttendanceChangeHub
    activity_service: ActivityLogService
    attendance_service: AttendanceService
    payroll_service: WeeklyPayrollService
    payroll_aggregation_service: PayrollAggregationService
    payroll_scheduler: PayrollAutomationScheduler
    benefits_service: BenefitsService


def build_container(
    *,
    db_config: dict,
    payroll_policy: Optional[dict] = None,
    automation: Optional[dict] = None,
    benefits: Optional[dict] = None,
    require_location: bool = False,
    clock: Optional[Clock] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    clock = clock or Clock()

    employees_repo = MySQLEmployeeRepository(conn)
    sites_repo = MySQLSiteRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    estimations_repo = MySQLPayrollEstimationRepository(conn)
    automation_state_repo = MySQLAutomationStateRepository(conn)
    activity_repo = MySQLActivityRepository(conn)

    calculator = StandardPayrollCalculator(PayrollPolicy.from_mapping(payroll_policy))
    attendance_changes = AttendanceChangeHub()

    activity_service = ActivityLogService(activity_repo, clock=clock)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        sites_repo,
        changes=attendance_changes,
        calculator=calculator,
        require_location=require_location,
        clock=clock,
    )
    payroll_service = WeeklyPayrollService(
        employees_repo,
        attendance_repo,
        estimations_repo,
        calculator=calculator,
        clock=clock,
    )
    payroll_aggregation_service = PayrollAggregationService(employees_repo, estimations_repo)
    payroll_scheduler = PayrollAutomationScheduler(
        payroll_service,
        employees_repo,
        payroll_aggregation_service,
        activity_service,
        config=AutomationConfig.from_mapping(automation),
        state=automation_state_repo,
        clock=clock,
    )
    payroll_scheduler.connect(attendance_changes)
    benefits_service = BenefitsService(employees_repo, policy=BenefitsPolicy.from_mapping(benefits))

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        sites_repo=sites_repo,
        attendance_repo=attendance_repo,
        estimations_repo=estimations_repo,
        automation_state_repo=automation_state_repo,
        activity_repo=activity_repo,
        attendance_changes=attendance_changes,
        activity_service=activity_service,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
        payroll_aggregation_service=payroll_aggregation_service,
        payroll_scheduler=payroll_scheduler,
        benefits_service=benefits_service,
    )
