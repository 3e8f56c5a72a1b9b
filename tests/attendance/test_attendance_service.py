from __future__ import annotations

from dataclasses import replace
from datetime import date, time

import pytest

from src.staff_attendance.staff_attendance.attendance.model import AttendanceRecord
from src.staff_attendance.staff_attendance.attendance.service import AttendanceService
from src.staff_attendance.staff_attendance.core.enums import AttendanceState, AttendanceStatus
from src.staff_attendance.staff_attendance.core.exceptions import (
    AlreadyClockedIn,
    AlreadyOnLunch,
    AuthorizationError,
    ConcurrentUpdateError,
    NotOnBreak,
    RecordNotFound,
    ShiftClosed,
)
from src.staff_attendance.staff_attendance.schedules.model import ScheduledShift
from src.staff_attendance.staff_attendance.settings.service import SettingsService
from src.staff_attendance.staff_attendance.staff.model import StaffProfile
from tests.fakes import FrozenClock, InMemoryAttendance, InMemorySchedules, InMemorySettings, InMemoryStaff, utc

ORG = 10


def _service(clock, *, attendance=None, schedules=None):
    staff = InMemoryStaff(
        StaffProfile(staff_id=1, full_name="Amina Otieno", email="a@example.com", organization_id=ORG, location_id=5),
        StaffProfile(staff_id=2, full_name="Brian Kamau", email="b@example.com", organization_id=ORG, location_id=5),
    )
    attendance = attendance or InMemoryAttendance()
    svc = AttendanceService(
        attendance,
        staff,
        SettingsService(InMemorySettings()),
        schedules,
        clock=clock,
    )
    return svc, attendance


def test_full_day_persists_each_transition():
    # 05:00 UTC is 08:00 in Nairobi.
    clock = FrozenClock(utc(2026, 3, 2, 5))
    svc, repo = _service(clock)

    rec = svc.clock_in(organization_id=ORG, staff_id=1)
    assert rec.record_id == 1
    assert rec.work_date == date(2026, 3, 2)

    clock.set(utc(2026, 3, 2, 7))
    svc.start_break(organization_id=ORG, staff_id=1, record_id=rec.record_id)
    clock.set(utc(2026, 3, 2, 7, 15))
    svc.end_break(organization_id=ORG, staff_id=1, record_id=rec.record_id)
    clock.set(utc(2026, 3, 2, 13))
    closed = svc.clock_out(organization_id=ORG, staff_id=1, record_id=rec.record_id)

    assert closed.total_hours == 7.75
    assert closed.version == 4
    assert repo.update_calls == 3
    assert svc.get_today(organization_id=ORG, staff_id=1).state == AttendanceState.CLOSED


def test_work_date_uses_local_day():
    # 22:30 UTC on the 1st is already the 2nd in Nairobi.
    clock = FrozenClock(utc(2026, 3, 1, 22, 30))
    svc, _ = _service(clock)

    rec = svc.clock_in(organization_id=ORG, staff_id=1)
    assert rec.work_date == date(2026, 3, 2)


def test_second_clock_in_same_day_is_rejected():
    clock = FrozenClock(utc(2026, 3, 2, 5))
    svc, _ = _service(clock)
    rec = svc.clock_in(organization_id=ORG, staff_id=1)

    with pytest.raises(AlreadyClockedIn):
        svc.clock_in(organization_id=ORG, staff_id=1)

    clock.advance(60)
    svc.clock_out(organization_id=ORG, staff_id=1, record_id=rec.record_id)
    with pytest.raises(ShiftClosed):
        svc.clock_in(organization_id=ORG, staff_id=1)


def test_rejected_transition_does_not_write():
    clock = FrozenClock(utc(2026, 3, 2, 5))
    svc, repo = _service(clock)
    rec = svc.clock_in(organization_id=ORG, staff_id=1)
    svc.start_lunch(organization_id=ORG, staff_id=1, record_id=rec.record_id)
    calls = repo.update_calls

    with pytest.raises(AlreadyOnLunch):
        svc.clock_out(organization_id=ORG, staff_id=1, record_id=rec.record_id)
    with pytest.raises(NotOnBreak):
        svc.end_break(organization_id=ORG, staff_id=1, record_id=rec.record_id)

    assert repo.update_calls == calls
    assert repo.get_by_id(ORG, rec.record_id).clock_out is None


def test_cannot_touch_someone_elses_record():
    clock = FrozenClock(utc(2026, 3, 2, 5))
    svc, _ = _service(clock)
    rec = svc.clock_in(organization_id=ORG, staff_id=1)

    with pytest.raises(AuthorizationError):
        svc.clock_out(organization_id=ORG, staff_id=2, record_id=rec.record_id)
    with pytest.raises(RecordNotFound):
        svc.clock_out(organization_id=ORG, staff_id=1, record_id=999)


def test_stale_version_raises_concurrent_update():
    clock = FrozenClock(utc(2026, 3, 2, 5))
    repo = InMemoryAttendance()
    svc, _ = _service(clock, attendance=repo)
    rec = svc.clock_in(organization_id=ORG, staff_id=1)

    # Another request wrote in between our read and our write.
    original_get = repo.get_by_id
    repo.get_by_id = lambda org, rid: replace(original_get(org, rid), version=0)

    clock.advance(30)
    with pytest.raises(ConcurrentUpdateError):
        svc.start_break(organization_id=ORG, staff_id=1, record_id=rec.record_id)


def test_clock_in_links_scheduled_shift():
    clock = FrozenClock(utc(2026, 3, 2, 5))
    schedules = InMemorySchedules(
        ScheduledShift(
            schedule_id=7,
            organization_id=ORG,
            staff_id=1,
            work_date=date(2026, 3, 2),
            start_time=time(8, 0),
            end_time=time(17, 0),
            location_id=9,
        )
    )
    svc, _ = _service(clock, schedules=schedules)

    rec = svc.clock_in(organization_id=ORG, staff_id=1)
    assert rec.shift_id == 7
    assert rec.location_id == 9


def test_today_view_reports_live_minutes():
    clock = FrozenClock(utc(2026, 3, 2, 5))
    svc, _ = _service(clock)
    assert svc.get_today(organization_id=ORG, staff_id=1).state == AttendanceState.NO_RECORD

    svc.clock_in(organization_id=ORG, staff_id=1)
    clock.advance(95)

    view = svc.get_today(organization_id=ORG, staff_id=1)
    assert view.state == AttendanceState.WORKING
    assert view.live_minutes == 95
    assert view.actions.can_clock_out is True

    data = svc.to_dict(view.record)
    assert data["clock_in_local"] == "08:00"
    assert data["live_minutes"] == 95
    assert data["state"] == "WORKING"


def test_open_record_only_while_on_the_clock():
    clock = FrozenClock(utc(2026, 3, 2, 5))
    svc, _ = _service(clock)
    assert svc.get_open_record(organization_id=ORG, staff_id=1) is None

    rec = svc.clock_in(organization_id=ORG, staff_id=1)
    assert svc.get_open_record(organization_id=ORG, staff_id=1).record_id == rec.record_id
    assert svc.get_open_record(organization_id=ORG, staff_id=2) is None

    clock.set(utc(2026, 3, 2, 13))
    svc.clock_out(organization_id=ORG, staff_id=1, record_id=rec.record_id)
    assert svc.get_open_record(organization_id=ORG, staff_id=1) is None
    assert svc.get_today_record(organization_id=ORG, staff_id=1).is_closed


def test_today_summary_counts_statuses():
    clock = FrozenClock(utc(2026, 3, 2, 10))
    repo = InMemoryAttendance()
    day = date(2026, 3, 2)
    repo.add(AttendanceRecord(record_id=None, organization_id=ORG, staff_id=1, work_date=day, total_hours=7.5))
    repo.add(
        AttendanceRecord(
            record_id=None, organization_id=ORG, staff_id=2, work_date=day, status=AttendanceStatus.ON_LEAVE
        )
    )
    repo.add(AttendanceRecord(record_id=None, organization_id=ORG, staff_id=3, work_date=date(2026, 3, 1)))
    svc, _ = _service(clock, attendance=repo)

    summary = svc.get_today_summary(organization_id=ORG)
    assert summary.present_count == 1
    assert summary.on_leave_count == 1
    assert summary.total_records == 2
    assert summary.total_hours_worked == 7.5
