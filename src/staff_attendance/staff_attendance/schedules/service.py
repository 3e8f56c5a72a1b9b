from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..common.validators import require_date_range, require_role
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import ScheduledShift
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    @staticmethod
    def _parse_time(value) -> time:
        if isinstance(value, time):
            return value
        if not isinstance(value, str):
            raise ValidationError("Invalid time (HH:MM)")
        try:
            return datetime.strptime(value.strip(), "%H:%M").time()
        except ValueError:
            raise ValidationError("Invalid time (HH:MM)")

    def assign(
        self,
        *,
        current_role: Role,
        organization_id: int,
        staff_id: int,
        work_date: date,
        start_time,
        end_time,
        location_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        require_role(current_role, Role.ADMIN, Role.MANAGER)

        if int(staff_id) <= 0:
            raise ValidationError("Invalid staff member")

        start_t = self._parse_time(start_time)
        end_t = self._parse_time(end_time)
        if start_t == end_t:
            raise ValidationError("Shift start and end cannot be equal")

        note = note.strip() if note else None
        schedule_id = self._schedules.upsert(
            organization_id=int(organization_id),
            staff_id=int(staff_id),
            work_date=work_date,
            start_time=start_t,
            end_time=end_t,
            location_id=location_id,
            note=note,
        )
        logger.info("Shift scheduled org=%s staff=%s date=%s id=%s", organization_id, staff_id, work_date, schedule_id)
        return schedule_id

    def delete(self, *, current_role: Role, organization_id: int, schedule_id: int) -> None:
        require_role(current_role, Role.ADMIN, Role.MANAGER)

        if not self._schedules.delete(organization_id=int(organization_id), schedule_id=int(schedule_id)):
            raise ValidationError("Deleting schedule failed")

    def list_range(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
    ) -> Sequence[ScheduledShift]:
        require_date_range(start, end)
        return self._schedules.list_range(organization_id=int(organization_id), start=start, end=end, staff_id=staff_id)
