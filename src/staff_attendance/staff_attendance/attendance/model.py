from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class BreakInterval:
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one staff member's attendance for one calendar day.

    Identified by (organization_id, staff_id, work_date). Lunch/break flags and the
    break count are derived from the intervals so they cannot drift apart.
    """

    record_id: Optional[int]
    organization_id: int
    staff_id: int
    work_date: date
    location_id: Optional[int] = None
    shift_id: Optional[int] = None
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    lunch_start: Optional[datetime] = None
    lunch_end: Optional[datetime] = None
    lunch_duration_minutes: Optional[int] = None
    breaks: tuple[BreakInterval, ...] = ()
    total_hours: Optional[float] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    version: int = 1

    @property
    def is_clocked_in(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    @property
    def is_closed(self) -> bool:
        return self.clock_out is not None

    @property
    def is_on_lunch(self) -> bool:
        return self.lunch_start is not None and self.lunch_end is None

    @property
    def is_on_break(self) -> bool:
        return any(b.is_open for b in self.breaks)

    @property
    def break_count(self) -> int:
        return len(self.breaks)

    @property
    def open_break_index(self) -> Optional[int]:
        for i, b in enumerate(self.breaks):
            if b.is_open:
                return i
        return None

    @property
    def has_used_lunch(self) -> bool:
        return self.lunch_start is not None

    @property
    def break_minutes(self) -> int:
        return sum(int(b.duration_minutes or 0) for b in self.breaks if not b.is_open)


# Fields a transition may change; everything else is fixed at clock-in.
MUTABLE_FIELDS = (
    "clock_out",
    "lunch_start",
    "lunch_end",
    "lunch_duration_minutes",
    "breaks",
    "total_hours",
    "status",
)


def record_patch(before: AttendanceRecord, after: AttendanceRecord) -> dict:
    """Changed mutable fields between two versions of the same record."""

    if before.record_id != after.record_id:
        raise ValueError("Cannot diff different attendance records")

    patch = {}
    for f in fields(AttendanceRecord):
        if f.name not in MUTABLE_FIELDS:
            continue
        old = getattr(before, f.name)
        new = getattr(after, f.name)
        if old != new:
            patch[f.name] = new
    return patch


@dataclass(frozen=True)
class AttendanceSummary:
    """Counts for one organization and day (dashboard header)."""

    organization_id: int
    work_date: date
    present_count: int = 0
    partial_count: int = 0
    absent_count: int = 0
    on_leave_count: int = 0
    total_hours_worked: float = 0.0
    total_records: int = 0
