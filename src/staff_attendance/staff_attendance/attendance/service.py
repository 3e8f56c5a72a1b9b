from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import Clock, SystemClock, format_local_time
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_TIMEZONE
from ..core.enums import AttendanceState, AttendanceStatus
from ..core.exceptions import AttendanceError, AuthorizationError, RecordNotFound
from ..schedules.repository import ScheduleRepository
from ..settings.service import SettingsService
from ..staff.repository import StaffRepository
from .engine import AllowedActions, AttendanceEngine
from .model import AttendanceRecord, AttendanceSummary, record_patch
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodayView:
    record: Optional[AttendanceRecord]
    state: AttendanceState
    live_minutes: int
    actions: AllowedActions


class AttendanceService:
    """Use cases around one staff member's day.

    Each action is a read-modify-write: re-read the record, let the engine validate
    and build the next version, then persist only the changed fields with a
    conditional update. The service never retries; callers re-issue after fixing
    the reported condition.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        staff: StaffRepository,
        settings: SettingsService,
        schedules: ScheduleRepository | None = None,
        *,
        engine: AttendanceEngine | None = None,
        clock: Clock | None = None,
        tz_name: str = DEFAULT_TIMEZONE,
    ):
        self._attendance = attendance
        self._staff = staff
        self._settings = settings
        self._schedules = schedules
        self._engine = engine or AttendanceEngine()
        self._clock = clock or SystemClock(tz_name)
        self._tz_name = tz_name

    # ----- transitions -----

    def clock_in(self, *, organization_id: int, staff_id: int, location_id: int | None = None) -> AttendanceRecord:
        now = self._clock.now()
        today = self._clock.today()

        staff = self._staff.get_by_id(int(staff_id))
        settings = self._settings.get(organization_id)
        existing = self._attendance.get_for_staff_and_date(int(organization_id), int(staff_id), today)

        shift = None
        if self._schedules:
            shift = self._schedules.get_for_staff_and_date(
                organization_id=int(organization_id), staff_id=int(staff_id), work_date=today
            )

        draft = self._guarded(
            "clock_in",
            staff_id,
            lambda: self._engine.clock_in(
                existing,
                staff,
                organization_id=int(organization_id),
                settings=settings,
                work_date=today,
                now=now,
                location_id=location_id or (shift.location_id if shift else None),
                shift_id=shift.schedule_id if shift else None,
            ),
        )

        record = self._attendance.create_record(
            organization_id=draft.organization_id,
            staff_id=draft.staff_id,
            work_date=draft.work_date,
            clock_in=draft.clock_in,
            status=draft.status,
            location_id=draft.location_id,
            shift_id=draft.shift_id,
        )
        logger.info("Clock-in org=%s staff=%s record=%s", organization_id, staff_id, record.record_id)
        return record

    def clock_out(self, *, organization_id: int, staff_id: int, record_id: int) -> AttendanceRecord:
        record = self._load_own(organization_id, staff_id, record_id)
        now = self._clock.now()
        after = self._guarded("clock_out", staff_id, lambda: self._engine.clock_out(record, now=now))
        return self._persist("clock_out", record, after)

    def start_lunch(self, *, organization_id: int, staff_id: int, record_id: int) -> AttendanceRecord:
        record = self._load_own(organization_id, staff_id, record_id)
        settings = self._settings.get(organization_id)
        now = self._clock.now()
        after = self._guarded("start_lunch", staff_id, lambda: self._engine.start_lunch(record, settings, now=now))
        return self._persist("start_lunch", record, after)

    def end_lunch(self, *, organization_id: int, staff_id: int, record_id: int) -> AttendanceRecord:
        record = self._load_own(organization_id, staff_id, record_id)
        now = self._clock.now()
        after = self._guarded("end_lunch", staff_id, lambda: self._engine.end_lunch(record, now=now))
        return self._persist("end_lunch", record, after)

    def start_break(self, *, organization_id: int, staff_id: int, record_id: int) -> AttendanceRecord:
        record = self._load_own(organization_id, staff_id, record_id)
        settings = self._settings.get(organization_id)
        now = self._clock.now()
        after = self._guarded("start_break", staff_id, lambda: self._engine.start_break(record, settings, now=now))
        return self._persist("start_break", record, after)

    def end_break(self, *, organization_id: int, staff_id: int, record_id: int) -> AttendanceRecord:
        record = self._load_own(organization_id, staff_id, record_id)
        now = self._clock.now()
        after = self._guarded("end_break", staff_id, lambda: self._engine.end_break(record, now=now))
        return self._persist("end_break", record, after)

    # ----- reads -----

    def get_today_record(self, *, organization_id: int, staff_id: int) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_staff_and_date(int(organization_id), int(staff_id), self._clock.today())

    def get_open_record(self, *, organization_id: int, staff_id: int) -> Optional[AttendanceRecord]:
        """Today's record while the staff member is still on the clock."""
        today = self._clock.today()
        return self._attendance.get_open_record_for_today(int(organization_id), int(staff_id), today)

    def get_today(self, *, organization_id: int, staff_id: int) -> TodayView:
        record = self.get_today_record(organization_id=organization_id, staff_id=staff_id)
        settings = self._settings.get(organization_id)
        live = self._engine.compute_live_duration(record, self._clock.now())
        return TodayView(
            record=record,
            state=self._engine.state_of(record),
            live_minutes=int(live.total_seconds() // 60),
            actions=self._engine.allowed_actions(record, settings),
        )

    def get_history(self, *, organization_id: int, staff_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_staff(int(organization_id), int(staff_id), int(limit))

    def list_records(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
        location_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.query_records_by_date_range(
            int(organization_id),
            start,
            end,
            staff_id=staff_id,
            location_id=location_id,
            status=status,
        )

    def get_today_summary(self, *, organization_id: int, location_id: Optional[int] = None) -> AttendanceSummary:
        today = self._clock.today()
        records = self.list_records(organization_id=organization_id, start=today, end=today, location_id=location_id)

        counts = {"present": 0, "partial": 0, "absent": 0, "on_leave": 0}
        total_hours = 0.0
        for r in records:
            if r.status in (AttendanceStatus.PRESENT, AttendanceStatus.WORKED):
                counts["present"] += 1
            elif r.status == AttendanceStatus.PARTIAL:
                counts["partial"] += 1
            elif r.status in (AttendanceStatus.ABSENT, AttendanceStatus.NO_SHOW):
                counts["absent"] += 1
            elif r.status == AttendanceStatus.ON_LEAVE:
                counts["on_leave"] += 1
            total_hours += float(r.total_hours or 0)

        return AttendanceSummary(
            organization_id=int(organization_id),
            work_date=today,
            present_count=counts["present"],
            partial_count=counts["partial"],
            absent_count=counts["absent"],
            on_leave_count=counts["on_leave"],
            total_hours_worked=round(total_hours, 2),
            total_records=len(records),
        )

    def to_dict(self, record: AttendanceRecord) -> dict:
        live = self._engine.compute_live_duration(record, self._clock.now())
        return {
            "id": record.record_id,
            "organization_id": record.organization_id,
            "staff_id": record.staff_id,
            "location_id": record.location_id,
            "shift_id": record.shift_id,
            "date": record.work_date.strftime("%Y-%m-%d"),
            "clock_in": record.clock_in.isoformat() if record.clock_in else None,
            "clock_out": record.clock_out.isoformat() if record.clock_out else None,
            "clock_in_local": format_local_time(record.clock_in, self._tz_name),
            "clock_out_local": format_local_time(record.clock_out, self._tz_name),
            "lunch_start": record.lunch_start.isoformat() if record.lunch_start else None,
            "lunch_end": record.lunch_end.isoformat() if record.lunch_end else None,
            "lunch_duration_minutes": record.lunch_duration_minutes,
            "is_on_lunch": record.is_on_lunch,
            "breaks": [
                {
                    "start_time": b.start_time.isoformat(),
                    "end_time": b.end_time.isoformat() if b.end_time else None,
                    "duration_minutes": b.duration_minutes,
                }
                for b in record.breaks
            ],
            "break_count": record.break_count,
            "is_on_break": record.is_on_break,
            "total_hours": record.total_hours,
            "live_minutes": int(live.total_seconds() // 60),
            "status": record.status.value,
            "state": self._engine.state_of(record).value,
        }

    # ----- helpers -----

    def _load_own(self, organization_id: int, staff_id: int, record_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(organization_id), int(record_id))
        if not record:
            raise RecordNotFound()
        if record.staff_id != int(staff_id):
            raise AuthorizationError("You can only update your own attendance")
        return record

    def _persist(self, action: str, before: AttendanceRecord, after: AttendanceRecord) -> AttendanceRecord:
        patch = record_patch(before, after)
        if not patch:
            return before

        saved = self._attendance.update_record(
            before.organization_id,
            before.record_id,
            patch,
            expected_version=before.version,
        )
        logger.info(
            "Attendance %s org=%s staff=%s record=%s fields=%s",
            action,
            before.organization_id,
            before.staff_id,
            before.record_id,
            sorted(patch),
        )
        return saved

    @staticmethod
    def _guarded(action: str, staff_id: int, transition: Callable[[], AttendanceRecord]) -> AttendanceRecord:
        try:
            return transition()
        except AttendanceError as e:
            logger.warning("Attendance %s rejected staff=%s code=%s", action, staff_id, e.code)
            raise
