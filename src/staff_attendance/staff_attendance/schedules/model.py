from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional


@dataclass(frozen=True)
class ScheduledShift:
    """Domain entity: one shift assigned to a staff member on a date."""

    schedule_id: int
    organization_id: int
    staff_id: int
    work_date: date
    start_time: time
    end_time: time
    location_id: Optional[int] = None
    note: Optional[str] = None
