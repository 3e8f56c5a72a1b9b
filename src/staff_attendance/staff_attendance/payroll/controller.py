from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify

from ..common.web import arg_date, arg_int, current_actor, json_endpoint, login_required, roles_required
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    reports = container.payroll_report_service

    def _range():
        today = container.clock.today()
        start = arg_date("start", today - timedelta(days=DEFAULT_REPORT_DAYS))
        end = arg_date("end", today)
        return start, end

    def _report():
        actor = current_actor()
        start, end = _range()

        # Staff only ever see their own rows.
        staff_id = arg_int("staff_id") if actor.role in (Role.ADMIN, Role.MANAGER) else actor.staff_id
        data = reports.build_attendance_report(
            organization_id=actor.organization_id,
            start=start,
            end=end,
            staff_id=staff_id,
            location_id=arg_int("location_id"),
        )
        return data, start, end

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="report_attendance")
    @json_endpoint
    @login_required
    def attendance_report():
        data, start, end = _report()
        return jsonify(
            {
                "success": True,
                "start": start.strftime("%Y-%m-%d"),
                "end": end.strftime("%Y-%m-%d"),
                "rows": data.rows,
                "summary": data.summary,
            }
        )

    @app.route("/api/reports/attendance.csv", methods=["GET"], endpoint="report_attendance_csv")
    @json_endpoint
    @login_required
    def attendance_report_csv():
        data, start, end = _report()
        filename = f"attendance_report_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            reports.to_csv(data).encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/reports/daily-status", methods=["GET"], endpoint="report_daily_status")
    @json_endpoint
    @roles_required(Role.ADMIN, Role.MANAGER)
    def daily_status():
        actor = current_actor()
        start, end = _range()
        rows = reports.build_daily_status(
            organization_id=actor.organization_id,
            start=start,
            end=end,
            location_id=arg_int("location_id"),
        )
        return jsonify({"success": True, "rows": rows})
