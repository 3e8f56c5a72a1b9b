from __future__ import annotations

from datetime import date, time

from src.staff_attendance.staff_attendance.attendance.model import AttendanceRecord, BreakInterval
from src.staff_attendance.staff_attendance.core.enums import LeaveStatus
from src.staff_attendance.staff_attendance.payroll.service import PayrollReportService
from src.staff_attendance.staff_attendance.schedules.model import ScheduledShift
from src.staff_attendance.staff_attendance.settings.service import SettingsService
from src.staff_attendance.staff_attendance.staff.model import StaffProfile
from tests.fakes import FrozenClock, InMemoryAttendance, InMemoryLeave, InMemorySchedules, InMemorySettings, InMemoryStaff, utc

ORG = 10

staff = InMemoryStaff(
    StaffProfile(staff_id=1, full_name="Amina Otieno", email="a@example.com", organization_id=ORG, location_id=5),
    StaffProfile(staff_id=2, full_name="Brian Kamau", email="b@example.com", organization_id=ORG, location_id=5),
)


def _closed(staff_id: int, day: date, start_h: int, end_h: int, breaks=()) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=None,
        organization_id=ORG,
        staff_id=staff_id,
        work_date=day,
        location_id=5,
        clock_in=utc(day.year, day.month, day.day, start_h),
        clock_out=utc(day.year, day.month, day.day, end_h),
        breaks=breaks,
    )


def test_attendance_report_rows_and_summary():
    repo = InMemoryAttendance()
    repo.add(
        _closed(
            1,
            date(2026, 3, 2),
            5,
            13,
            breaks=(BreakInterval(utc(2026, 3, 2, 7), utc(2026, 3, 2, 7, 15), 15),),
        )
    )
    repo.add(_closed(1, date(2026, 3, 3), 5, 9))
    repo.add(_closed(2, date(2026, 3, 2), 5, 6))

    svc = PayrollReportService(repo, staff, SettingsService(InMemorySettings()), clock=FrozenClock(utc(2026, 3, 4, 9)))
    data = svc.build_attendance_report(organization_id=ORG, start=date(2026, 3, 1), end=date(2026, 3, 7))

    assert len(data.rows) == 3
    row = next(r for r in data.rows if r["work_date"] == "2026-03-02" and r["staff_id"] == 1)
    assert row["full_name"] == "Amina Otieno"
    assert row["clock_in"] == "08:00"
    assert row["clock_out"] == "16:00"
    assert row["break_minutes"] == 15
    assert row["worked_hours"] == "07:45"
    # Breaks are paid by default.
    assert row["payable_hours"] == "08:00"

    assert [s["staff_id"] for s in data.summary] == [1, 2]
    assert data.summary[0]["days"] == 2
    assert data.summary[0]["total_hours"] == "11:45"

    csv_text = PayrollReportService.to_csv(data)
    assert csv_text.splitlines()[0].startswith("staff_id,full_name,work_date")
    assert len(csv_text.strip().splitlines()) == 4


def test_attendance_report_filters_by_staff():
    repo = InMemoryAttendance()
    repo.add(_closed(1, date(2026, 3, 2), 5, 13))
    repo.add(_closed(2, date(2026, 3, 2), 5, 13))

    svc = PayrollReportService(repo, staff, SettingsService(InMemorySettings()), clock=FrozenClock(utc(2026, 3, 4, 9)))
    data = svc.build_attendance_report(organization_id=ORG, start=date(2026, 3, 1), end=date(2026, 3, 7), staff_id=2)

    assert {r["staff_id"] for r in data.rows} == {2}


def test_daily_status_uses_records_leave_and_schedules():
    repo = InMemoryAttendance()
    # Staff 1 worked on the 2nd and left a shift open on the 3rd.
    repo.add(_closed(1, date(2026, 3, 2), 5, 13))
    repo.add(
        AttendanceRecord(
            record_id=None,
            organization_id=ORG,
            staff_id=1,
            work_date=date(2026, 3, 3),
            clock_in=utc(2026, 3, 3, 5),
        )
    )

    leave = InMemoryLeave()
    rid = leave.create(
        organization_id=ORG,
        staff_id=2,
        leave_type="Sick",
        start_date=date(2026, 3, 3),
        end_date=date(2026, 3, 3),
        reason="Flu",
    )
    leave.decide(organization_id=ORG, request_id=rid, status=LeaveStatus.APPROVED, decided_by=9)

    schedules = InMemorySchedules(
        *[
            ScheduledShift(
                schedule_id=i,
                organization_id=ORG,
                staff_id=sid,
                work_date=day,
                start_time=time(8, 0),
                end_time=time(16, 0),
            )
            for i, (sid, day) in enumerate(
                [
                    (1, date(2026, 3, 2)),
                    (1, date(2026, 3, 3)),
                    (2, date(2026, 3, 2)),
                    (2, date(2026, 3, 3)),
                    (2, date(2026, 3, 5)),
                ],
                start=1,
            )
        ]
    )

    svc = PayrollReportService(
        repo,
        staff,
        SettingsService(InMemorySettings()),
        leave=leave,
        schedules=schedules,
        clock=FrozenClock(utc(2026, 3, 4, 9)),
    )
    rows = svc.build_daily_status(organization_id=ORG, start=date(2026, 3, 2), end=date(2026, 3, 5))
    statuses = {(r["staff_id"], r["work_date"]): r["status"] for r in rows}

    assert statuses == {
        (1, "2026-03-02"): "Present",
        (1, "2026-03-03"): "Partial",
        (2, "2026-03-02"): "Absent",
        (2, "2026-03-03"): "On Leave",
    }
