from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest, LeaveType


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        organization_id: int,
        staff_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        leave_type_id: Optional[int] = None,
        is_paid: bool = True,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, organization_id: int, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        organization_id: int,
        *,
        status: Optional[LeaveStatus] = None,
        staff_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_approved_in_range(self, organization_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        """Approved requests overlapping [start, end]."""

        raise NotImplementedError

    def is_on_approved_leave(self, staff_id: int, work_date: date) -> bool:
        raise NotImplementedError

    def decide(
        self,
        *,
        organization_id: int,
        request_id: int,
        status: LeaveStatus,
        decided_by: int,
        decision_note: Optional[str] = None,
    ) -> bool:
        """Move a Pending request to ``status``; False if it was not pending."""

        raise NotImplementedError

    def list_leave_types(self, organization_id: int) -> Sequence[LeaveType]:
        raise NotImplementedError

    def get_leave_type(self, organization_id: int, type_id: int) -> Optional[LeaveType]:
        raise NotImplementedError

    def create_leave_type(
        self,
        *,
        organization_id: int,
        name: str,
        days_allowed: int,
        is_paid: bool,
        requires_approval: bool,
        carry_forward_allowed: bool,
        max_carry_forward_days: int,
    ) -> int:
        raise NotImplementedError

    def leave_days_by_type(self, organization_id: int, staff_id: int, year: int, status: LeaveStatus) -> dict[int, int]:
        """Requested days per leave type id for requests in ``status`` starting in ``year``."""

        raise NotImplementedError
