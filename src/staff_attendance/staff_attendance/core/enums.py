from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for authorization inside one organization."""

    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    """Day-level attendance classification stored on each record."""

    PRESENT = "Present"
    PARTIAL = "Partial"
    ABSENT = "Absent"
    ON_LEAVE = "On Leave"
    # Legacy values written for external locum entries.
    WORKED = "Worked"
    NO_SHOW = "No-show"


class AttendanceState(str, Enum):
    """Position of a day's record in the clock-in state machine."""

    NO_RECORD = "NO_RECORD"
    WORKING = "WORKING"
    ON_LUNCH = "ON_LUNCH"
    ON_BREAK = "ON_BREAK"
    CLOSED = "CLOSED"


class StaffStatus(str, Enum):
    ACTIVE = "Active"
    INVITED = "Invited"
    INACTIVE = "Inactive"
    ARCHIVED = "Archived"


class LicenseStatus(str, Enum):
    """Verification state of a professional licence."""

    PENDING = "Pending"
    VERIFIED = "Verified"
    EXPIRED = "Expired"
    REJECTED = "Rejected"


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"
