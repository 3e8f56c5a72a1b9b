from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta

import pytest

from src.staff_attendance.staff_attendance.attendance.engine import AttendanceEngine
from src.staff_attendance.staff_attendance.core.enums import AttendanceState, AttendanceStatus, LicenseStatus, StaffStatus
from src.staff_attendance.staff_attendance.core.exceptions import (
    AlreadyClockedIn,
    AlreadyOnBreak,
    AlreadyOnLunch,
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
from src.staff_attendance.staff_attendance.settings.model import (
    AttendanceRules,
    BreakRules,
    LunchRules,
    OrganizationSettings,
)
from src.staff_attendance.staff_attendance.staff.model import StaffProfile
from tests.fakes import utc

ORG = 10
DAY = date(2026, 3, 2)

engine = AttendanceEngine()
settings = OrganizationSettings.defaults(ORG)
staff = StaffProfile(staff_id=1, full_name="Amina Otieno", email="amina@example.com", organization_id=ORG, location_id=5)


def _clock_in(at=None, *, profile=staff, cfg=settings, existing=None, **kwargs):
    return engine.clock_in(
        existing,
        profile,
        organization_id=ORG,
        settings=cfg,
        work_date=DAY,
        now=at or utc(2026, 3, 2, 8),
        **kwargs,
    )


def test_clock_in_opens_working_record_at_staff_location():
    rec = _clock_in()

    assert rec.record_id is None
    assert rec.clock_in == utc(2026, 3, 2, 8)
    assert rec.location_id == 5
    assert rec.status == AttendanceStatus.PRESENT
    assert engine.state_of(rec) == AttendanceState.WORKING


def test_clock_in_rejected_when_already_open_or_closed():
    open_rec = replace(_clock_in(), record_id=1)
    with pytest.raises(AlreadyClockedIn):
        _clock_in(existing=open_rec)

    closed = engine.clock_out(open_rec, now=utc(2026, 3, 2, 16))
    with pytest.raises(ShiftClosed):
        _clock_in(existing=closed)


@pytest.mark.parametrize(
    "profile, error",
    [
        (None, StaffNotFound),
        (replace(staff, organization_id=None), MissingOrganizationContext),
        (replace(staff, organization_id=99), OrganizationMismatch),
        (replace(staff, staff_status=StaffStatus.INACTIVE), InactiveStaff),
        (replace(staff, license_status=LicenseStatus.EXPIRED), LicenseExpired),
        (replace(staff, license_status=LicenseStatus.REJECTED), LicenseRejected),
    ],
)
def test_clock_in_eligibility(profile, error):
    with pytest.raises(error) as exc:
        _clock_in(profile=profile)
    assert exc.value.code


def test_clock_in_organization_rules():
    strict = replace(
        settings,
        attendance=AttendanceRules(allow_clock_in_without_shift=False, require_location_at_clock_in=True),
    )
    with pytest.raises(LocationRequired):
        _clock_in(profile=replace(staff, location_id=None), cfg=strict)
    with pytest.raises(NoScheduledShift):
        _clock_in(cfg=strict)

    rec = _clock_in(cfg=strict, shift_id=7)
    assert rec.shift_id == 7


def test_clock_in_without_any_location_is_missing_context():
    unlinked = replace(staff, location_id=None)

    with pytest.raises(MissingOrganizationContext) as exc:
        _clock_in(profile=unlinked)
    assert exc.value.code == "MISSING_ORG_ID"

    rec = _clock_in(profile=unlinked, location_id=3)
    assert rec.location_id == 3


def test_break_scenario_totals_seven_and_three_quarter_hours():
    rec = _clock_in(utc(2026, 3, 2, 8))
    rec = engine.start_break(rec, settings, now=utc(2026, 3, 2, 10))
    rec = engine.end_break(rec, now=utc(2026, 3, 2, 10, 15))
    rec = engine.clock_out(rec, now=utc(2026, 3, 2, 16))

    assert rec.breaks[0].duration_minutes == 15
    assert rec.break_count == 1
    assert rec.total_hours == 7.75
    assert engine.state_of(rec) == AttendanceState.CLOSED


def test_lunch_is_excluded_from_total():
    rec = _clock_in(utc(2026, 3, 2, 8))
    rec = engine.start_lunch(rec, settings, now=utc(2026, 3, 2, 12))
    rec = engine.end_lunch(rec, now=utc(2026, 3, 2, 13))
    rec = engine.clock_out(rec, now=utc(2026, 3, 2, 17))

    assert rec.lunch_duration_minutes == 60
    assert rec.total_hours == 8.0


def test_total_without_lunch_or_breaks_is_elapsed_time():
    rec = engine.clock_out(_clock_in(utc(2026, 3, 2, 8)), now=utc(2026, 3, 2, 12, 20))
    assert rec.total_hours == 4.33


def test_lunch_and_break_are_mutually_exclusive():
    rec = _clock_in()
    on_lunch = engine.start_lunch(rec, settings, now=utc(2026, 3, 2, 12))
    with pytest.raises(AlreadyOnLunch):
        engine.start_break(on_lunch, settings, now=utc(2026, 3, 2, 12, 5))

    on_break = engine.start_break(rec, settings, now=utc(2026, 3, 2, 10))
    with pytest.raises(AlreadyOnBreak):
        engine.start_lunch(on_break, settings, now=utc(2026, 3, 2, 10, 5))
    with pytest.raises(AlreadyOnBreak):
        engine.start_break(on_break, settings, now=utc(2026, 3, 2, 10, 5))


def test_break_limit_is_enforced():
    cfg = replace(settings, breaks=BreakRules(enabled=True, max_breaks_per_day=2))
    rec = _clock_in()
    for start in (9, 11):
        rec = engine.start_break(rec, cfg, now=utc(2026, 3, 2, start))
        rec = engine.end_break(rec, now=utc(2026, 3, 2, start, 10))

    with pytest.raises(BreakLimitReached):
        engine.start_break(rec, cfg, now=utc(2026, 3, 2, 14))
    assert engine.allowed_actions(rec, cfg).breaks_remaining == 0


def test_only_one_lunch_per_day():
    rec = _clock_in()
    rec = engine.start_lunch(rec, settings, now=utc(2026, 3, 2, 12))
    rec = engine.end_lunch(rec, now=utc(2026, 3, 2, 12, 30))

    with pytest.raises(LunchAlreadyUsed):
        engine.start_lunch(rec, settings, now=utc(2026, 3, 2, 14))


def test_end_without_start_fails():
    rec = _clock_in()
    with pytest.raises(NotOnLunch):
        engine.end_lunch(rec, now=utc(2026, 3, 2, 12))
    with pytest.raises(NotOnBreak):
        engine.end_break(rec, now=utc(2026, 3, 2, 12))


def test_disabled_lunch_and_breaks():
    cfg = replace(settings, lunch=LunchRules(enabled=False), breaks=BreakRules(enabled=False))
    rec = _clock_in()
    with pytest.raises(LunchNotEnabled):
        engine.start_lunch(rec, cfg, now=utc(2026, 3, 2, 12))
    with pytest.raises(BreaksNotEnabled):
        engine.start_break(rec, cfg, now=utc(2026, 3, 2, 12))


def test_actions_after_clock_out_fail():
    rec = engine.clock_out(_clock_in(), now=utc(2026, 3, 2, 16))
    with pytest.raises(NotClockedIn):
        engine.clock_out(rec, now=utc(2026, 3, 2, 17))
    with pytest.raises(NotClockedIn):
        engine.start_lunch(rec, settings, now=utc(2026, 3, 2, 17))
    with pytest.raises(NotClockedIn):
        engine.start_break(rec, settings, now=utc(2026, 3, 2, 17))


def test_open_lunch_blocks_clock_out_and_leaves_record_unchanged():
    rec = engine.start_lunch(_clock_in(), settings, now=utc(2026, 3, 2, 12))
    before = replace(rec)

    with pytest.raises(AlreadyOnLunch):
        engine.clock_out(rec, now=utc(2026, 3, 2, 16))

    assert rec == before
    assert rec.clock_out is None


def test_open_break_blocks_clock_out():
    rec = engine.start_break(_clock_in(), settings, now=utc(2026, 3, 2, 10))
    with pytest.raises(AlreadyOnBreak):
        engine.clock_out(rec, now=utc(2026, 3, 2, 16))
    assert engine.allowed_actions(rec, settings).can_clock_out is False


def test_live_duration_is_idempotent_and_frozen_during_lunch():
    rec = _clock_in(utc(2026, 3, 2, 8))
    now = utc(2026, 3, 2, 10, 30)

    assert engine.compute_live_duration(rec, now) == engine.compute_live_duration(rec, now)
    assert engine.compute_live_duration(rec, now) == timedelta(hours=2, minutes=30)

    rec = engine.start_lunch(rec, settings, now=utc(2026, 3, 2, 12))
    assert engine.compute_live_duration(rec, utc(2026, 3, 2, 12, 40)) == timedelta(hours=4)

    rec = engine.end_lunch(rec, now=utc(2026, 3, 2, 13))
    assert engine.compute_live_duration(rec, utc(2026, 3, 2, 14)) == timedelta(hours=5)


def test_live_duration_without_record_and_after_close():
    assert engine.compute_live_duration(None, utc(2026, 3, 2, 9)) == timedelta(0)

    rec = engine.clock_out(_clock_in(utc(2026, 3, 2, 8)), now=utc(2026, 3, 2, 9))
    assert engine.compute_live_duration(rec, utc(2026, 3, 2, 20)) == timedelta(hours=1)


def test_allowed_actions_follow_state():
    assert engine.allowed_actions(None, settings).can_clock_in is True

    rec = _clock_in()
    actions = engine.allowed_actions(rec, settings)
    assert actions.state == AttendanceState.WORKING
    assert actions.can_clock_in is False
    assert actions.can_clock_out and actions.can_start_lunch and actions.can_start_break
    assert actions.breaks_remaining == 2

    on_lunch = engine.start_lunch(rec, settings, now=utc(2026, 3, 2, 12))
    actions = engine.allowed_actions(on_lunch, settings)
    assert actions.state == AttendanceState.ON_LUNCH
    assert actions.can_end_lunch is True
    assert actions.can_start_break is False


def test_classify_status():
    today = DAY
    yesterday = DAY - timedelta(days=1)
    open_rec = _clock_in()
    closed = engine.clock_out(open_rec, now=utc(2026, 3, 2, 16))

    assert engine.classify_status(closed, work_date=today, today=today) == AttendanceStatus.PRESENT
    assert engine.classify_status(open_rec, work_date=today, today=today) == AttendanceStatus.PRESENT
    assert engine.classify_status(open_rec, work_date=yesterday, today=today) == AttendanceStatus.PARTIAL
    assert (
        engine.classify_status(None, work_date=yesterday, today=today, on_approved_leave=True)
        == AttendanceStatus.ON_LEAVE
    )
    assert engine.classify_status(None, work_date=yesterday, today=today) == AttendanceStatus.ABSENT
    assert engine.classify_status(None, work_date=today + timedelta(days=1), today=today) is None
    assert engine.classify_status(None, work_date=yesterday, today=today, expected_working_day=False) is None
