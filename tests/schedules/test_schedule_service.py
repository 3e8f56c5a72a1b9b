from __future__ import annotations

from datetime import date, time

import pytest

from src.staff_attendance.staff_attendance.core.enums import Role
from src.staff_attendance.staff_attendance.core.exceptions import AuthorizationError, ValidationError
from src.staff_attendance.staff_attendance.schedules.service import ScheduleService
from tests.fakes import InMemorySchedules

ORG = 10


def _assign(svc, **overrides):
    kwargs = dict(
        current_role=Role.MANAGER,
        organization_id=ORG,
        staff_id=1,
        work_date=date(2026, 3, 2),
        start_time="08:00",
        end_time="17:00",
        location_id=5,
        note=" front desk ",
    )
    kwargs.update(overrides)
    return svc.assign(**kwargs)


def test_assign_parses_times_and_upserts():
    repo = InMemorySchedules()
    svc = ScheduleService(repo)

    sid = _assign(svc)
    again = _assign(svc, end_time="16:00")

    assert again == sid
    shift = repo.get_for_staff_and_date(organization_id=ORG, staff_id=1, work_date=date(2026, 3, 2))
    assert shift.start_time == time(8, 0)
    assert shift.end_time == time(16, 0)
    assert shift.note == "front desk"


def test_assign_validation():
    svc = ScheduleService(InMemorySchedules())
    with pytest.raises(ValidationError):
        _assign(svc, start_time="8am")
    with pytest.raises(ValidationError):
        _assign(svc, end_time="08:00")
    with pytest.raises(ValidationError):
        _assign(svc, staff_id=0)
    with pytest.raises(AuthorizationError):
        _assign(svc, current_role=Role.STAFF)


def test_overnight_shift_is_allowed():
    svc = ScheduleService(InMemorySchedules())
    assert _assign(svc, start_time="22:00", end_time="06:00") > 0


def test_delete_and_list_range():
    svc = ScheduleService(InMemorySchedules())
    first = _assign(svc)
    _assign(svc, work_date=date(2026, 3, 3))

    listed = svc.list_range(organization_id=ORG, start=date(2026, 3, 1), end=date(2026, 3, 7))
    assert [s.work_date for s in listed] == [date(2026, 3, 2), date(2026, 3, 3)]

    svc.delete(current_role=Role.ADMIN, organization_id=ORG, schedule_id=first)
    assert len(svc.list_range(organization_id=ORG, start=date(2026, 3, 1), end=date(2026, 3, 7))) == 1

    with pytest.raises(ValidationError):
        svc.delete(current_role=Role.ADMIN, organization_id=ORG, schedule_id=first)
