from __future__ import annotations

from dataclasses import asdict

from flask import Flask, jsonify, request

from ..common.web import arg_date, arg_int, body, body_int, current_actor, json_endpoint, login_required, roles_required
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _record_response(record, message: str):
        return jsonify({"success": True, "message": message, "record": service.to_dict(record)})

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @json_endpoint
    @login_required
    def today():
        actor = current_actor()
        view = service.get_today(organization_id=actor.organization_id, staff_id=actor.staff_id)
        return jsonify(
            {
                "success": True,
                "state": view.state.value,
                "live_minutes": view.live_minutes,
                "actions": {k: (v.value if k == "state" else v) for k, v in asdict(view.actions).items()},
                "record": service.to_dict(view.record) if view.record else None,
            }
        )

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @json_endpoint
    @login_required
    def clock_in():
        actor = current_actor()
        record = service.clock_in(
            organization_id=actor.organization_id,
            staff_id=actor.staff_id,
            location_id=body_int(body(), "location_id"),
        )
        return _record_response(record, "Clocked in"), 201

    def _transition(action, message: str, record_id: int):
        actor = current_actor()
        record = action(organization_id=actor.organization_id, staff_id=actor.staff_id, record_id=record_id)
        return _record_response(record, message)

    @app.route("/api/attendance/<int:record_id>/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @json_endpoint
    @login_required
    def clock_out(record_id: int):
        return _transition(service.clock_out, "Clocked out", record_id)

    @app.route("/api/attendance/<int:record_id>/lunch/start", methods=["POST"], endpoint="attendance_start_lunch")
    @json_endpoint
    @login_required
    def start_lunch(record_id: int):
        return _transition(service.start_lunch, "Lunch started", record_id)

    @app.route("/api/attendance/<int:record_id>/lunch/end", methods=["POST"], endpoint="attendance_end_lunch")
    @json_endpoint
    @login_required
    def end_lunch(record_id: int):
        return _transition(service.end_lunch, "Lunch ended", record_id)

    @app.route("/api/attendance/<int:record_id>/break/start", methods=["POST"], endpoint="attendance_start_break")
    @json_endpoint
    @login_required
    def start_break(record_id: int):
        return _transition(service.start_break, "Break started", record_id)

    @app.route("/api/attendance/<int:record_id>/break/end", methods=["POST"], endpoint="attendance_end_break")
    @json_endpoint
    @login_required
    def end_break(record_id: int):
        return _transition(service.end_break, "Break ended", record_id)

    @app.route("/api/attendance/open", methods=["GET"], endpoint="attendance_open")
    @json_endpoint
    @login_required
    def open_record():
        actor = current_actor()
        record = service.get_open_record(organization_id=actor.organization_id, staff_id=actor.staff_id)
        return jsonify(
            {"success": True, "clocked_in": record is not None, "record": service.to_dict(record) if record else None}
        )

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @json_endpoint
    @login_required
    def history():
        actor = current_actor()
        limit = arg_int("limit") or DEFAULT_HISTORY_LIMIT
        records = service.get_history(organization_id=actor.organization_id, staff_id=actor.staff_id, limit=limit)
        return jsonify({"success": True, "records": [service.to_dict(r) for r in records]})

    @app.route("/api/attendance/records", methods=["GET"], endpoint="attendance_records")
    @json_endpoint
    @roles_required(Role.ADMIN, Role.MANAGER)
    def records():
        actor = current_actor()
        today = container.clock.today()
        start = arg_date("start", today)
        end = arg_date("end", today)

        status_s = request.args.get("status")
        try:
            status = AttendanceStatus(status_s) if status_s else None
        except ValueError:
            raise ValidationError("Invalid status")

        rows = service.list_records(
            organization_id=actor.organization_id,
            start=start,
            end=end,
            staff_id=arg_int("staff_id"),
            location_id=arg_int("location_id"),
            status=status,
        )
        return jsonify({"success": True, "records": [service.to_dict(r) for r in rows]})

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @json_endpoint
    @roles_required(Role.ADMIN, Role.MANAGER)
    def summary():
        actor = current_actor()
        s = service.get_today_summary(organization_id=actor.organization_id, location_id=arg_int("location_id"))
        data = asdict(s)
        data["work_date"] = s.work_date.strftime("%Y-%m-%d")
        return jsonify({"success": True, "summary": data})
