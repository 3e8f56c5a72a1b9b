from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import body, current_actor, json_endpoint, login_required, roles_required
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/settings/attendance", methods=["GET"], endpoint="settings_get")
    @json_endpoint
    @login_required
    def get_settings():
        actor = current_actor()
        settings = container.settings_service.get(actor.organization_id)
        return jsonify({"success": True, "settings": settings.to_dict()})

    @app.route("/api/settings/attendance", methods=["PUT"], endpoint="settings_update")
    @json_endpoint
    @roles_required(Role.ADMIN)
    def update_settings():
        actor = current_actor()
        data = body()
        settings = container.settings_service.update(
            current_role=actor.role,
            organization_id=actor.organization_id,
            updated_by=actor.staff_id,
            attendance=data.get("attendance"),
            lunch=data.get("lunch"),
            breaks=data.get("breaks"),
        )
        return jsonify({"success": True, "message": "Settings saved", "settings": settings.to_dict()})
