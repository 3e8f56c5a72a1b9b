from __future__ import annotations

from datetime import date

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.web import arg_int, body, body_int, current_actor, json_endpoint, login_required, roles_required
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .model import LeaveBalance, LeaveRequest, LeaveType


def _to_dict(req: LeaveRequest) -> dict:
    return {
        "id": req.request_id,
        "staff_id": req.staff_id,
        "leave_type_id": req.leave_type_id,
        "leave_type": req.leave_type,
        "is_paid": req.is_paid,
        "start_date": req.start_date.strftime("%Y-%m-%d"),
        "end_date": req.end_date.strftime("%Y-%m-%d"),
        "days": req.days,
        "reason": req.reason,
        "status": req.status.value,
        "decided_by": req.decided_by,
        "decision_note": req.decision_note or "",
    }


def _type_to_dict(t: LeaveType) -> dict:
    return {
        "id": t.type_id,
        "name": t.name,
        "days_allowed": t.days_allowed,
        "is_unlimited": t.is_unlimited,
        "is_paid": t.is_paid,
        "requires_approval": t.requires_approval,
        "carry_forward_allowed": t.carry_forward_allowed,
        "max_carry_forward_days": t.max_carry_forward_days,
    }


def _balance_to_dict(b: LeaveBalance) -> dict:
    return {
        "leave_type_id": b.leave_type.type_id,
        "leave_type": b.leave_type.name,
        "year": b.year,
        "is_unlimited": b.leave_type.is_unlimited,
        "allocated": b.allocated,
        "used": b.used,
        "pending": b.pending,
        "remaining": b.remaining,
    }


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    def _parse_date(v) -> date:
        try:
            return parse_iso_date(v or "")
        except (TypeError, ValueError):
            raise ValidationError("Invalid date (YYYY-MM-DD)")

    def _create(actor, staff_id: int):
        data = body()
        request_id = service.create(
            current_role=actor.role,
            organization_id=actor.organization_id,
            staff_id=staff_id,
            leave_type_id=body_int(data, "leave_type_id"),
            start_date=_parse_date(data.get("start_date")),
            end_date=_parse_date(data.get("end_date")),
            reason=data.get("reason", ""),
            allow_over_balance=data.get("allow_over_balance") is True,
        )
        return jsonify({"success": True, "message": "Leave request submitted", "id": request_id}), 201

    @app.route("/api/leave", methods=["GET"], endpoint="leave_mine")
    @json_endpoint
    @login_required
    def my_leave():
        actor = current_actor()
        data = service.list_mine(organization_id=actor.organization_id, staff_id=actor.staff_id)
        return jsonify({"success": True, "requests": [_to_dict(r) for r in data]})

    @app.route("/api/leave", methods=["POST"], endpoint="leave_create")
    @json_endpoint
    @login_required
    def create_leave():
        actor = current_actor()
        return _create(actor, actor.staff_id)

    @app.route("/api/leave/staff/<int:staff_id>", methods=["POST"], endpoint="leave_create_for_staff")
    @json_endpoint
    @roles_required(Role.ADMIN)
    def create_leave_for_staff(staff_id: int):
        return _create(current_actor(), staff_id)

    @app.route("/api/leave/types", methods=["GET"], endpoint="leave_types")
    @json_endpoint
    @login_required
    def leave_types():
        actor = current_actor()
        types = service.get_leave_types(actor.organization_id)
        return jsonify({"success": True, "types": [_type_to_dict(t) for t in types]})

    @app.route("/api/leave/types", methods=["POST"], endpoint="leave_types_create")
    @json_endpoint
    @roles_required(Role.ADMIN)
    def create_leave_type():
        actor = current_actor()
        data = body()
        type_id = service.create_leave_type(
            current_role=actor.role,
            organization_id=actor.organization_id,
            name=data.get("name", ""),
            days_allowed=data.get("days_allowed"),
            is_paid=data.get("is_paid", True),
            requires_approval=data.get("requires_approval", True),
            carry_forward_allowed=data.get("carry_forward_allowed", False),
            max_carry_forward_days=data.get("max_carry_forward_days", 0),
        )
        return jsonify({"success": True, "message": "Leave type created", "id": type_id}), 201

    @app.route("/api/leave/types/defaults", methods=["POST"], endpoint="leave_types_defaults")
    @json_endpoint
    @roles_required(Role.ADMIN)
    def create_default_leave_types():
        actor = current_actor()
        types = service.create_default_leave_types(current_role=actor.role, organization_id=actor.organization_id)
        return jsonify({"success": True, "types": [_type_to_dict(t) for t in types]})

    @app.route("/api/leave/balances", methods=["GET"], endpoint="leave_balances")
    @json_endpoint
    @login_required
    def leave_balances():
        actor = current_actor()
        year = arg_int("year") or container.clock.today().year
        staff_id = actor.staff_id
        if actor.role in (Role.ADMIN, Role.MANAGER):
            staff_id = arg_int("staff_id") or actor.staff_id
        balances = service.get_staff_balances(organization_id=actor.organization_id, staff_id=staff_id, year=year)
        return jsonify(
            {"success": True, "staff_id": staff_id, "year": year, "balances": [_balance_to_dict(b) for b in balances]}
        )

    @app.route("/api/leave/pending", methods=["GET"], endpoint="leave_pending")
    @json_endpoint
    @roles_required(Role.ADMIN, Role.MANAGER)
    def pending_leave():
        actor = current_actor()
        data = service.list_pending(current_role=actor.role, organization_id=actor.organization_id)
        return jsonify({"success": True, "requests": [_to_dict(r) for r in data]})

    @app.route("/api/leave/<int:request_id>/approve", methods=["POST"], endpoint="leave_approve")
    @json_endpoint
    @roles_required(Role.ADMIN, Role.MANAGER)
    def approve_leave(request_id: int):
        actor = current_actor()
        service.approve(
            current_role=actor.role,
            organization_id=actor.organization_id,
            decided_by=actor.staff_id,
            request_id=request_id,
            note=body().get("note", ""),
        )
        return jsonify({"success": True, "message": "Leave request approved"})

    @app.route("/api/leave/<int:request_id>/reject", methods=["POST"], endpoint="leave_reject")
    @json_endpoint
    @roles_required(Role.ADMIN, Role.MANAGER)
    def reject_leave(request_id: int):
        actor = current_actor()
        service.reject(
            current_role=actor.role,
            organization_id=actor.organization_id,
            decided_by=actor.staff_id,
            request_id=request_id,
            note=body().get("note", ""),
        )
        return jsonify({"success": True, "message": "Leave request rejected"})

    @app.route("/api/leave/<int:request_id>/cancel", methods=["POST"], endpoint="leave_cancel")
    @json_endpoint
    @login_required
    def cancel_leave(request_id: int):
        actor = current_actor()
        service.cancel(organization_id=actor.organization_id, staff_id=actor.staff_id, request_id=request_id)
        return jsonify({"success": True, "message": "Leave request cancelled"})
