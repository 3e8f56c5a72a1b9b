from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AttendanceError,
    AuthorizationError,
    ConcurrentUpdateError,
    InactiveStaff,
    InsufficientLeaveBalance,
    LicenseExpired,
    LicenseRejected,
    MissingOrganizationContext,
    OrganizationMismatch,
    RecordNotFound,
    StaffNotFound,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_NOT_FOUND = (RecordNotFound, StaffNotFound)
_FORBIDDEN = (InactiveStaff, LicenseExpired, LicenseRejected, MissingOrganizationContext, OrganizationMismatch)


@dataclass(frozen=True)
class Actor:
    """The signed-in staff member, as placed in the session by the auth layer."""

    staff_id: int
    organization_id: int
    role: Role


def current_actor() -> Actor:
    return Actor(
        staff_id=int(session["staff_id"]),
        organization_id=int(session["organization_id"]),
        role=Role(session.get("role") or Role.STAFF.value),
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "staff_id" not in session or "organization_id" not in session:
            return jsonify({"success": False, "message": "Please sign in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            if session.get("role") not in allowed:
                return jsonify({"success": False, "message": "You do not have permission for this action"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_endpoint(view):
    """Translate domain errors raised by services into JSON responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except AttendanceError as e:
            if isinstance(e, _NOT_FOUND):
                status = 404
            elif isinstance(e, _FORBIDDEN):
                status = 403
            else:
                status = 409
            return jsonify({"success": False, **e.to_dict()}), status
        except ConcurrentUpdateError as e:
            return jsonify({"success": False, "code": "CONCURRENT_UPDATE", "message": str(e)}), 409
        except AuthorizationError as e:
            return jsonify({"success": False, "message": str(e)}), 403
        except InsufficientLeaveBalance as e:
            return (
                jsonify({"success": False, "message": str(e), "available": e.available, "requested": e.requested}),
                400,
            )
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return jsonify({"success": False, "message": "Internal server error"}), 500

    return wrapper


def body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def arg_date(name: str, default: date) -> date:
    value = request.args.get(name)
    if not value:
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid {name} date (YYYY-MM-DD)")


def arg_int(name: str) -> Optional[int]:
    value = request.args.get(name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}")


def body_int(data: dict, name: str) -> Optional[int]:
    value = data.get(name)
    if value in (None, ""):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {name}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}")
