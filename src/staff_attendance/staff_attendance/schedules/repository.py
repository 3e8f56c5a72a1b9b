from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from .model import ScheduledShift


class ScheduleRepository(Protocol):
    def get_for_staff_and_date(self, *, organization_id: int, staff_id: int, work_date: date) -> Optional[ScheduledShift]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        organization_id: int,
        staff_id: int,
        work_date: date,
        start_time: time,
        end_time: time,
        location_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        """Create or update the staff member's shift for the date.

        Returns schedule_id.
        """

        raise NotImplementedError

    def delete(self, *, organization_id: int, schedule_id: int) -> bool:
        raise NotImplementedError

    def list_range(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
    ) -> Sequence[ScheduledShift]:
        raise NotImplementedError
