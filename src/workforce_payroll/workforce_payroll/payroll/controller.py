from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import admin_required, current_actor, domain_errors, fail, ok
from ..container import Container
from .week import Week


def register(app: Flask, container: Container) -> None:
    scheduler = container.payroll_scheduler

    def _week_start_arg(value: Optional[str]):
        """Normalize any date in the week to the week's start; default is the current week."""

        if not value:
            return scheduler.current_week().start
        return Week.containing(parse_iso_date(value), scheduler.config.week_start_weekday).start

    def _site_arg() -> Optional[int]:
        site = request.args.get("site_id")
        return int(site) if site else None

    @app.route("/api/payroll/summary", methods=["GET"], endpoint="api_payroll_summary")
    @admin_required
    @domain_errors
    def api_payroll_summary():
        try:
            week_start = _week_start_arg(request.args.get("week_start"))
            site_id = _site_arg()
        except ValueError:
            return fail("week_start must be YYYY-MM-DD and site_id an integer", 400, "VALIDATION")
        summary = container.payroll_aggregation_service.summary_for_week(week_start, site_id=site_id)
        return ok(summary.to_dict())

    @app.route("/api/payroll/employees", methods=["GET"], endpoint="api_payroll_employees")
    @admin_required
    @domain_errors
    def api_payroll_employees():
        try:
            week_start = _week_start_arg(request.args.get("week_start"))
            site_id = _site_arg()
        except ValueError:
            return fail("week_start must be YYYY-MM-DD and site_id an integer", 400, "VALIDATION")
        rows = container.payroll_aggregation_service.rows_for_week(week_start, site_id=site_id)
        return ok([r.to_dict() for r in rows])

    @app.route("/api/payroll/recalculate", methods=["POST"], endpoint="api_payroll_recalculate_all")
    @admin_required
    @domain_errors
    def api_payroll_recalculate_all():
        data = request.get_json(silent=True) or {}
        try:
            week_start = _week_start_arg(data.get("week_start"))
        except ValueError:
            return fail("week_start must be YYYY-MM-DD", 400, "VALIDATION")
        result = scheduler.recalculate_all(current_actor(), week_start=week_start)
        return ok(result.to_dict())

    @app.route(
        "/api/payroll/employees/<int:employee_id>/recalculate",
        methods=["POST"],
        endpoint="api_payroll_recalculate_employee",
    )
    @admin_required
    @domain_errors
    def api_payroll_recalculate_employee(employee_id: int):
        data = request.get_json(silent=True) or {}
        try:
            week_start = _week_start_arg(data.get("week_start"))
        except ValueError:
            return fail("week_start must be YYYY-MM-DD", 400, "VALIDATION")
        estimation = scheduler.recalculate_employee(current_actor(), employee_id, week_start=week_start)
        return ok(estimation.to_dict())

    @app.route(
        "/api/payroll/employees/<int:employee_id>/benefits",
        methods=["POST"],
        endpoint="api_payroll_employee_benefits",
    )
    @admin_required
    @domain_errors
    def api_payroll_employee_benefits(employee_id: int):
        data = request.get_json(silent=True) or {}
        figures = container.benefits_service.for_employee(
            employee_id,
            tenure_years=data.get("tenure_years"),
            pending_days=data.get("pending_days", 0),
            vacation_days=data.get("vacation_days", 0),
            proportional_aguinaldo=data.get("proportional_aguinaldo", 0),
        )
        return ok(figures)

    @app.route("/api/payroll/automation", methods=["GET", "POST"], endpoint="api_payroll_automation")
    @admin_required
    @domain_errors
    def api_payroll_automation():
        if request.method == "POST":
            data = request.get_json(silent=True) or {}
            status = str(data.get("status", "")).lower()
            if status not in ("active", "paused"):
                return fail("status must be 'active' or 'paused'", 400, "VALIDATION")
            scheduler.set_active(current_actor(), status == "active")
        return ok(scheduler.status())
