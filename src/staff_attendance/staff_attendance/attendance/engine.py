from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import minutes_between
from ..core.constants import TOTAL_HOURS_PRECISION
from ..core.enums import AttendanceState, AttendanceStatus, LicenseStatus, StaffStatus
from ..core.exceptions import (
    AlreadyClockedIn,
    AlreadyOnBreak,
    AlreadyOnLunch,
    AttendanceError,
    BreakLimitReached,
    BreaksNotEnabled,
    InactiveStaff,
    LicenseExpired,
    LicenseRejected,
    LocationRequired,
    LunchAlreadyUsed,
    LunchNotEnabled,
    MissingOrganizationContext,
    NoScheduledShift,
    NotClockedIn,
    NotOnBreak,
    NotOnLunch,
    OrganizationMismatch,
    ShiftClosed,
    StaffNotFound,
)
from ..settings.model import OrganizationSettings
from ..staff.model import StaffProfile
from .model import AttendanceRecord, BreakInterval

_ZERO = timedelta(0)


@dataclass(frozen=True)
class AllowedActions:
    """What the "today at work" view may offer for the current record."""

    state: AttendanceState
    can_clock_in: bool
    can_clock_out: bool
    can_start_lunch: bool
    can_end_lunch: bool
    can_start_break: bool
    can_end_break: bool
    breaks_remaining: int


class AttendanceEngine:
    """State machine for one staff member's day.

    Every transition takes the current record and ``now`` and returns a new record;
    preconditions are checked before anything is built, so a rejected transition
    raises an ``AttendanceError`` and the input record is untouched. The engine keeps
    no state of its own and never reads the clock.

        [NO_RECORD] --clock_in--> [WORKING] --clock_out--> [CLOSED]
        [WORKING] <--> [ON_LUNCH]    [WORKING] <--> [ON_BREAK]
    """

    # ----- state -----

    def state_of(self, record: Optional[AttendanceRecord]) -> AttendanceState:
        if record is None or record.clock_in is None:
            return AttendanceState.NO_RECORD
        if record.is_closed:
            return AttendanceState.CLOSED
        if record.is_on_lunch:
            return AttendanceState.ON_LUNCH
        if record.is_on_break:
            return AttendanceState.ON_BREAK
        return AttendanceState.WORKING

    def allowed_actions(self, record: Optional[AttendanceRecord], settings: OrganizationSettings) -> AllowedActions:
        max_breaks = int(settings.breaks.max_breaks_per_day)
        used = record.break_count if record else 0

        return AllowedActions(
            state=self.state_of(record),
            can_clock_in=record is None or record.clock_in is None,
            can_clock_out=record is not None and self._clock_out_violation(record) is None,
            can_start_lunch=record is not None and self._start_lunch_violation(record, settings) is None,
            can_end_lunch=record is not None and record.is_on_lunch,
            can_start_break=record is not None and self._start_break_violation(record, settings) is None,
            can_end_break=record is not None and record.is_on_break,
            breaks_remaining=max(max_breaks - used, 0) if settings.breaks.enabled else 0,
        )

    # ----- transitions -----

    def clock_in(
        self,
        existing: Optional[AttendanceRecord],
        staff: Optional[StaffProfile],
        *,
        organization_id: int,
        settings: OrganizationSettings,
        work_date: date,
        now: datetime,
        location_id: Optional[int] = None,
        shift_id: Optional[int] = None,
    ) -> AttendanceRecord:
        """Open today's record. The returned record has no ``record_id`` yet."""

        _raise(self._eligibility_violation(staff, organization_id))

        if existing is not None and existing.is_clocked_in:
            raise AlreadyClockedIn()
        if existing is not None and existing.is_closed:
            raise ShiftClosed()

        location_id = location_id or staff.location_id
        if location_id is None:
            if settings.attendance.require_location_at_clock_in:
                raise LocationRequired()
            raise MissingOrganizationContext("Your staff profile is not linked to a location.")
        if shift_id is None and not settings.attendance.allow_clock_in_without_shift:
            raise NoScheduledShift()

        return AttendanceRecord(
            record_id=None,
            organization_id=int(organization_id),
            staff_id=staff.staff_id,
            work_date=work_date,
            location_id=location_id,
            shift_id=shift_id,
            clock_in=now,
            status=AttendanceStatus.PRESENT,
        )

    def clock_out(self, record: AttendanceRecord, *, now: datetime) -> AttendanceRecord:
        _raise(self._clock_out_violation(record))

        closed = replace(record, clock_out=now)
        return replace(closed, total_hours=self.total_hours(closed))

    def start_lunch(self, record: AttendanceRecord, settings: OrganizationSettings, *, now: datetime) -> AttendanceRecord:
        _raise(self._start_lunch_violation(record, settings))
        return replace(record, lunch_start=now)

    def end_lunch(self, record: AttendanceRecord, *, now: datetime) -> AttendanceRecord:
        if not record.is_on_lunch:
            raise NotOnLunch()
        return replace(
            record,
            lunch_end=now,
            lunch_duration_minutes=max(minutes_between(record.lunch_start, now), 0),
        )

    def start_break(self, record: AttendanceRecord, settings: OrganizationSettings, *, now: datetime) -> AttendanceRecord:
        _raise(self._start_break_violation(record, settings))
        return replace(record, breaks=record.breaks + (BreakInterval(start_time=now),))

    def end_break(self, record: AttendanceRecord, *, now: datetime) -> AttendanceRecord:
        idx = record.open_break_index
        if idx is None:
            raise NotOnBreak()

        open_break = record.breaks[idx]
        closed = replace(
            open_break,
            end_time=now,
            duration_minutes=max(minutes_between(open_break.start_time, now), 0),
        )
        breaks = record.breaks[:idx] + (closed,) + record.breaks[idx + 1:]
        return replace(record, breaks=breaks)

    # ----- derived values -----

    def compute_live_duration(self, record: Optional[AttendanceRecord], now: datetime) -> timedelta:
        """Worked time so far; pure, so repeated calls with the same ``now`` agree.

        During lunch or a break the value stays frozen at the moment the interval
        started; once clocked out it is the finalized worked duration.
        """

        if record is None or record.clock_in is None:
            return _ZERO

        if record.is_closed:
            end = record.clock_out
        elif record.is_on_lunch:
            end = record.lunch_start
        elif record.is_on_break:
            end = record.breaks[record.open_break_index].start_time
        else:
            end = now

        worked = (end - record.clock_in) - self.closed_interval_duration(record)
        return max(worked, _ZERO)

    def worked_duration(self, record: AttendanceRecord) -> timedelta:
        if not record.is_closed:
            return _ZERO
        return self.compute_live_duration(record, record.clock_out)

    def total_hours(self, record: AttendanceRecord) -> float:
        seconds = self.worked_duration(record).total_seconds()
        return round(seconds / 3600, TOTAL_HOURS_PRECISION)

    def closed_interval_duration(
        self,
        record: AttendanceRecord,
        *,
        include_lunch: bool = True,
        include_breaks: bool = True,
    ) -> timedelta:
        total = _ZERO
        if include_lunch and record.lunch_start and record.lunch_end:
            total += max(record.lunch_end - record.lunch_start, _ZERO)
        if include_breaks:
            for b in record.breaks:
                if b.end_time is not None:
                    total += max(b.end_time - b.start_time, _ZERO)
        return total

    def classify_status(
        self,
        record: Optional[AttendanceRecord],
        *,
        work_date: date,
        today: date,
        on_approved_leave: bool = False,
        expected_working_day: bool = True,
    ) -> Optional[AttendanceStatus]:
        """Day status for history rows; ``None`` means the day needs no row."""

        if record is not None and record.clock_in is not None:
            if record.clock_out is not None:
                return AttendanceStatus.PRESENT
            if work_date < today:
                return AttendanceStatus.PARTIAL
            return AttendanceStatus.PRESENT

        if on_approved_leave:
            return AttendanceStatus.ON_LEAVE
        if expected_working_day and work_date <= today:
            return AttendanceStatus.ABSENT
        return None

    # ----- preconditions -----

    @staticmethod
    def _eligibility_violation(staff: Optional[StaffProfile], organization_id: int) -> Optional[AttendanceError]:
        if staff is None:
            return StaffNotFound()
        if not staff.organization_id:
            return MissingOrganizationContext()
        if int(staff.organization_id) != int(organization_id):
            return OrganizationMismatch()
        if staff.staff_status != StaffStatus.ACTIVE:
            return InactiveStaff(f"Your account status is '{staff.staff_status.value}'.")
        if staff.license_status == LicenseStatus.EXPIRED:
            return LicenseExpired()
        if staff.license_status == LicenseStatus.REJECTED:
            return LicenseRejected()
        return None

    @staticmethod
    def _clock_out_violation(record: AttendanceRecord) -> Optional[AttendanceError]:
        if not record.is_clocked_in:
            return NotClockedIn()
        if record.is_on_lunch:
            return AlreadyOnLunch("End your lunch before clocking out.")
        if record.is_on_break:
            return AlreadyOnBreak("End your break before clocking out.")
        return None

    @staticmethod
    def _start_lunch_violation(record: AttendanceRecord, settings: OrganizationSettings) -> Optional[AttendanceError]:
        if not settings.lunch.enabled:
            return LunchNotEnabled()
        if not record.is_clocked_in:
            return NotClockedIn()
        if record.is_on_lunch:
            return AlreadyOnLunch()
        if record.is_on_break:
            return AlreadyOnBreak("Cannot start lunch while on break.")
        if record.has_used_lunch:
            return LunchAlreadyUsed()
        return None

    @staticmethod
    def _start_break_violation(record: AttendanceRecord, settings: OrganizationSettings) -> Optional[AttendanceError]:
        if not settings.breaks.enabled:
            return BreaksNotEnabled()
        if not record.is_clocked_in:
            return NotClockedIn()
        if record.is_on_lunch:
            return AlreadyOnLunch("Cannot start a break while on lunch.")
        if record.is_on_break:
            return AlreadyOnBreak()
        if record.break_count >= int(settings.breaks.max_breaks_per_day):
            return BreakLimitReached(
                f"Maximum of {settings.breaks.max_breaks_per_day} breaks per day reached."
            )
        return None


def _raise(violation: Optional[AttendanceError]) -> None:
    if violation is not None:
        raise violation
