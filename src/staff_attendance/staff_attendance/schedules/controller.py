from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.web import arg_date, arg_int, body, body_int, current_actor, json_endpoint, login_required, roles_required
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.route("/api/schedules", methods=["GET"], endpoint="schedules_list")
    @json_endpoint
    @login_required
    def list_schedules():
        actor = current_actor()
        today = container.clock.today()
        start = arg_date("start", today)
        end = arg_date("end", start + timedelta(days=6))

        staff_id = arg_int("staff_id") if actor.role in (Role.ADMIN, Role.MANAGER) else actor.staff_id
        shifts = service.list_range(organization_id=actor.organization_id, start=start, end=end, staff_id=staff_id)
        return jsonify(
            {
                "success": True,
                "schedules": [
                    {
                        "id": s.schedule_id,
                        "staff_id": s.staff_id,
                        "work_date": s.work_date.strftime("%Y-%m-%d"),
                        "start_time": s.start_time.strftime("%H:%M"),
                        "end_time": s.end_time.strftime("%H:%M"),
                        "location_id": s.location_id,
                        "note": s.note or "",
                    }
                    for s in shifts
                ],
            }
        )

    @app.route("/api/schedules", methods=["POST"], endpoint="schedules_assign")
    @json_endpoint
    @roles_required(Role.ADMIN, Role.MANAGER)
    def assign_schedule():
        actor = current_actor()
        data = body()
        try:
            work_date = parse_iso_date(data.get("work_date") or "")
        except (TypeError, ValueError):
            raise ValidationError("Invalid schedule data")

        staff_id = body_int(data, "staff_id") or 0
        schedule_id = service.assign(
            current_role=actor.role,
            organization_id=actor.organization_id,
            staff_id=staff_id,
            work_date=work_date,
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            location_id=body_int(data, "location_id"),
            note=data.get("note"),
        )
        return jsonify({"success": True, "message": "Shift scheduled", "id": schedule_id}), 201

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="schedules_delete")
    @json_endpoint
    @roles_required(Role.ADMIN, Role.MANAGER)
    def delete_schedule(schedule_id: int):
        actor = current_actor()
        service.delete(current_role=actor.role, organization_id=actor.organization_id, schedule_id=schedule_id)
        return jsonify({"success": True, "message": "Schedule deleted"})
