from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import LicenseStatus, Role, StaffStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StaffProfile
from .repository import StaffRepository

_COLUMNS = """
    staff_id, full_name, email, organization_id, location_id,
    role, staff_status, job_title, license_status
"""


def _to_profile(r: dict) -> StaffProfile:
    license_status = r.get("license_status")
    return StaffProfile(
        staff_id=int(r["staff_id"]),
        full_name=r["full_name"],
        email=r["email"],
        organization_id=r.get("organization_id"),
        location_id=r.get("location_id"),
        role=Role(r.get("role") or Role.STAFF.value),
        staff_status=StaffStatus(r.get("staff_status") or StaffStatus.ACTIVE.value),
        job_title=r.get("job_title"),
        license_status=LicenseStatus(license_status) if license_status else None,
    )


class MySQLStaffRepository(StaffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, staff_id: int) -> Optional[StaffProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff_profiles WHERE staff_id=%s", (int(staff_id),))
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def list_for_organization(self, organization_id: int, *, location_id: Optional[int] = None) -> Sequence[StaffProfile]:
        clauses = ["organization_id=%s", "staff_status=%s"]
        params: list[object] = [int(organization_id), StaffStatus.ACTIVE.value]
        if location_id is not None:
            clauses.append("location_id=%s")
            params.append(int(location_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff_profiles
                WHERE {" AND ".join(clauses)}
                ORDER BY full_name ASC
                """,
                tuple(params),
            )
            return [_to_profile(r) for r in fetchall(cur)]
