from __future__ import annotations

from flask import Flask, request, session

from ..common.http import current_actor, domain_errors, fail, login_required, ok
from ..container import Container
from ..core.enums import PunchAction


def _record_dict(r) -> dict:
    def _iso(v):
        return v.isoformat() if v else None

    return {
        "employee_id": r.employee_id,
        "date": r.work_date.isoformat(),
        "clock_in": _iso(r.clock_in),
        "lunch_start": _iso(r.lunch_start),
        "lunch_end": _iso(r.lunch_end),
        "clock_out": _iso(r.clock_out),
        "total_hours": str(r.total_hours) if r.total_hours is not None else None,
        "overtime_hours": str(r.overtime_hours) if r.overtime_hours is not None else None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/punch", methods=["POST"], endpoint="api_attendance_punch")
    @login_required
    @domain_errors
    def api_attendance_punch():
        data = request.get_json(silent=True) or {}
        try:
            action = PunchAction(str(data.get("action", "")).strip())
        except ValueError:
            return fail("action must be one of clock_in, lunch_start, lunch_end, clock_out", 400, "VALIDATION")

        # Workers punch for themselves; the session carries their employee id.
        employee_id = session.get("employee_id") or current_actor().user_id
        record = container.attendance_service.punch(
            int(employee_id),
            action,
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )
        return ok(_record_dict(record))

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @login_required
    @domain_errors
    def api_attendance_today():
        employee_id = session.get("employee_id") or current_actor().user_id
        record = container.attendance_service.get_today_record(int(employee_id))
        return ok(_record_dict(record) if record else None)
