from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import UNLIMITED_LEAVE_DAYS
from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveType:
    type_id: int
    organization_id: int
    name: str
    days_allowed: int
    is_paid: bool = True
    requires_approval: bool = True
    carry_forward_allowed: bool = False
    max_carry_forward_days: int = 0

    @property
    def is_unlimited(self) -> bool:
        return self.days_allowed >= UNLIMITED_LEAVE_DAYS


# Kenya Employment Act defaults seeded for a new organization.
DEFAULT_LEAVE_TYPES = (
    {
        "name": "Annual Leave",
        "days_allowed": 21,
        "is_paid": True,
        "carry_forward_allowed": True,
        "max_carry_forward_days": 10,
    },
    {"name": "Sick Leave - Paid", "days_allowed": 14, "is_paid": True},
    {"name": "Sick Leave - Unpaid", "days_allowed": UNLIMITED_LEAVE_DAYS, "is_paid": False},
    {"name": "Maternity Leave", "days_allowed": 90, "is_paid": True},
    {"name": "Paternity Leave", "days_allowed": 14, "is_paid": True},
    {"name": "Compassionate Leave", "days_allowed": 5, "is_paid": True},
    {"name": "Study Leave", "days_allowed": 10, "is_paid": True},
    {"name": "Unpaid Leave", "days_allowed": UNLIMITED_LEAVE_DAYS, "is_paid": False},
    {
        "name": "Comp Off",
        "days_allowed": 10,
        "is_paid": True,
        "carry_forward_allowed": True,
        "max_carry_forward_days": 5,
    },
)


@dataclass(frozen=True)
class LeaveBalance:
    """One staff member's entitlement for one leave type in one calendar year."""

    leave_type: LeaveType
    year: int
    allocated: int
    used: int
    pending: int

    @property
    def remaining(self) -> int:
        return max(self.allocated - self.used - self.pending, 0)


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    organization_id: int
    staff_id: int
    leave_type: str
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    decision_note: Optional[str] = None
    leave_type_id: Optional[int] = None
    is_paid: bool = True

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1
