from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import LicenseStatus, Role, StaffStatus


@dataclass(frozen=True)
class StaffProfile:
    """Domain entity: a staff member as seen by attendance.

    Note: Profiles are owned by the onboarding flow; this package only reads them.
    """

    staff_id: int
    full_name: str
    email: str
    organization_id: Optional[int]
    location_id: Optional[int]
    role: Role = Role.STAFF
    staff_status: StaffStatus = StaffStatus.ACTIVE
    job_title: Optional[str] = None
    license_status: Optional[LicenseStatus] = None
