from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_date_range, require_int_range, require_non_empty, require_role
from ..core.constants import DEFAULT_LIST_LIMIT, UNLIMITED_LEAVE_DAYS
from ..core.enums import LeaveStatus, Role
from ..core.exceptions import AuthorizationError, InsufficientLeaveBalance, ValidationError
from .model import DEFAULT_LEAVE_TYPES, LeaveBalance, LeaveRequest, LeaveType
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Leave requests checked against the organization's leave-type catalogue.

    Balances are derived from the requests themselves: approved days count as
    used and pending days are held, so rejecting or cancelling a request frees
    its days without a separate counter. Unlimited types skip the check.
    """

    def __init__(self, leave: LeaveRepository):
        self._leave = leave

    # ----- leave types -----

    def get_leave_types(self, organization_id: int) -> Sequence[LeaveType]:
        return self._leave.list_leave_types(int(organization_id))

    def create_leave_type(
        self,
        *,
        current_role: Role,
        organization_id: int,
        name: str,
        days_allowed,
        is_paid: bool = True,
        requires_approval: bool = True,
        carry_forward_allowed: bool = False,
        max_carry_forward_days=0,
    ) -> int:
        require_role(current_role, Role.ADMIN)

        name = require_non_empty(name, "Leave type name")
        days_allowed = require_int_range(days_allowed, "Days allowed", minimum=0, maximum=UNLIMITED_LEAVE_DAYS)
        max_carry = require_int_range(max_carry_forward_days, "Max carry forward days", minimum=0, maximum=days_allowed)
        for flag in (is_paid, requires_approval, carry_forward_allowed):
            if not isinstance(flag, bool):
                raise ValidationError("Leave type flags must be true or false")

        if any(t.name.lower() == name.lower() for t in self.get_leave_types(organization_id)):
            raise ValidationError(f"Leave type '{name}' already exists")

        type_id = self._leave.create_leave_type(
            organization_id=int(organization_id),
            name=name,
            days_allowed=days_allowed,
            is_paid=is_paid,
            requires_approval=requires_approval,
            carry_forward_allowed=carry_forward_allowed,
            max_carry_forward_days=max_carry if carry_forward_allowed else 0,
        )
        logger.info("Leave type created org=%s type=%s name=%s", organization_id, type_id, name)
        return type_id

    def create_default_leave_types(self, *, current_role: Role, organization_id: int) -> Sequence[LeaveType]:
        """Seed the statutory leave types; types that already exist by name are kept as they are."""

        require_role(current_role, Role.ADMIN)

        existing = {t.name.lower() for t in self.get_leave_types(organization_id)}
        for template in DEFAULT_LEAVE_TYPES:
            if template["name"].lower() in existing:
                continue
            self.create_leave_type(current_role=current_role, organization_id=organization_id, **template)
        return self.get_leave_types(organization_id)

    # ----- balances -----

    def get_staff_balances(self, *, organization_id: int, staff_id: int, year: int) -> list[LeaveBalance]:
        used = self._leave.leave_days_by_type(int(organization_id), int(staff_id), int(year), LeaveStatus.APPROVED)
        pending = self._leave.leave_days_by_type(int(organization_id), int(staff_id), int(year), LeaveStatus.PENDING)
        return [
            LeaveBalance(
                leave_type=t,
                year=int(year),
                allocated=t.days_allowed,
                used=used.get(t.type_id, 0),
                pending=pending.get(t.type_id, 0),
            )
            for t in self.get_leave_types(organization_id)
        ]

    # ----- requests -----

    def create(
        self,
        *,
        current_role: Role,
        organization_id: int,
        staff_id: int,
        leave_type_id: int,
        start_date: date,
        end_date: date,
        reason: str,
        allow_over_balance: bool = False,
    ) -> int:
        require_role(current_role, Role.STAFF, Role.MANAGER, Role.ADMIN)
        if allow_over_balance and current_role != Role.ADMIN:
            raise AuthorizationError("Only an admin can confirm leave beyond the available balance")
        require_date_range(start_date, end_date)
        reason = require_non_empty(reason, "Reason")

        if leave_type_id is None:
            raise ValidationError("Leave type is required")
        leave_type = self._leave.get_leave_type(int(organization_id), int(leave_type_id))
        if not leave_type:
            raise ValidationError("Leave type not found")

        requested = (end_date - start_date).days + 1
        if not leave_type.is_unlimited:
            balance = self._balance_for(organization_id, staff_id, leave_type, start_date.year)
            if requested > balance.remaining:
                if not allow_over_balance:
                    logger.warning(
                        "Leave over balance org=%s staff=%s type=%s available=%s requested=%s",
                        organization_id,
                        staff_id,
                        leave_type.type_id,
                        balance.remaining,
                        requested,
                    )
                    raise InsufficientLeaveBalance(balance.remaining, requested)
                logger.info("Leave over balance confirmed by admin org=%s staff=%s", organization_id, staff_id)

        request_id = self._leave.create(
            organization_id=int(organization_id),
            staff_id=int(staff_id),
            leave_type=leave_type.name,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            leave_type_id=leave_type.type_id,
            is_paid=leave_type.is_paid,
        )
        logger.info("Leave requested org=%s staff=%s request=%s", organization_id, staff_id, request_id)

        if not leave_type.requires_approval:
            self._decide(organization_id, request_id, LeaveStatus.APPROVED, staff_id, "Approval not required")
        return request_id

    def approve(
        self,
        *,
        current_role: Role,
        organization_id: int,
        decided_by: int,
        request_id: int,
        note: str = "",
    ) -> None:
        require_role(current_role, Role.ADMIN, Role.MANAGER)
        req = self._get_pending(organization_id, request_id)
        if req.staff_id == int(decided_by):
            raise AuthorizationError("You cannot approve your own leave request")

        self._decide(organization_id, request_id, LeaveStatus.APPROVED, decided_by, note)

    def reject(
        self,
        *,
        current_role: Role,
        organization_id: int,
        decided_by: int,
        request_id: int,
        note: str = "",
    ) -> None:
        require_role(current_role, Role.ADMIN, Role.MANAGER)
        self._get_pending(organization_id, request_id)
        self._decide(organization_id, request_id, LeaveStatus.REJECTED, decided_by, note)

    def cancel(self, *, organization_id: int, staff_id: int, request_id: int) -> None:
        req = self._get_pending(organization_id, request_id)
        if req.staff_id != int(staff_id):
            raise AuthorizationError("You can only cancel your own leave request")

        self._decide(organization_id, request_id, LeaveStatus.CANCELLED, staff_id, "")

    def list_mine(self, *, organization_id: int, staff_id: int) -> Sequence[LeaveRequest]:
        return self._leave.list_requests(int(organization_id), staff_id=int(staff_id), limit=DEFAULT_LIST_LIMIT)

    def list_pending(self, *, current_role: Role, organization_id: int) -> Sequence[LeaveRequest]:
        require_role(current_role, Role.ADMIN, Role.MANAGER)
        return self._leave.list_requests(int(organization_id), status=LeaveStatus.PENDING, limit=500)

    def is_on_approved_leave(self, *, staff_id: int, work_date: date) -> bool:
        return self._leave.is_on_approved_leave(int(staff_id), work_date)

    def _get_pending(self, organization_id: int, request_id: int) -> LeaveRequest:
        req = self._leave.get_by_id(int(organization_id), int(request_id))
        if not req:
            raise ValidationError("Leave request not found")
        if req.status != LeaveStatus.PENDING:
            raise ValidationError("Leave request has already been processed")
        return req

    def _decide(
        self,
        organization_id: int,
        request_id: int,
        status: LeaveStatus,
        decided_by: int,
        note: Optional[str],
    ) -> None:
        ok = self._leave.decide(
            organization_id=int(organization_id),
            request_id=int(request_id),
            status=status,
            decided_by=int(decided_by),
            decision_note=(note.strip() or None) if isinstance(note, str) else None,
        )
        if not ok:
            raise ValidationError("Updating leave request failed")
        logger.info("Leave request %s -> %s by=%s", request_id, status.value, decided_by)

    def _balance_for(self, organization_id: int, staff_id: int, leave_type: LeaveType, year: int) -> LeaveBalance:
        for balance in self.get_staff_balances(organization_id=organization_id, staff_id=staff_id, year=year):
            if balance.leave_type.type_id == leave_type.type_id:
                return balance
        return LeaveBalance(leave_type=leave_type, year=int(year), allocated=leave_type.days_allowed, used=0, pending=0)
