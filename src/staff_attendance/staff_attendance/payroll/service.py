from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.engine import AttendanceEngine
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock, SystemClock, format_local_time, format_minutes, iter_dates
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_TIMEZONE
from ..leave.repository import LeaveRepository
from ..schedules.repository import ScheduleRepository
from ..settings.service import SettingsService
from ..staff.repository import StaffRepository
from .calculator.base import PayrollCalculator
from .calculator.paid_breaks_calculator import PaidBreaksCalculator

REPORT_COLUMNS = (
    "staff_id",
    "full_name",
    "work_date",
    "clock_in",
    "clock_out",
    "lunch_minutes",
    "break_minutes",
    "worked_hours",
    "payable_hours",
    "status",
)


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class PayrollReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        staff: StaffRepository,
        settings: SettingsService,
        *,
        leave: LeaveRepository | None = None,
        schedules: ScheduleRepository | None = None,
        calculator: Optional[PayrollCalculator] = None,
        engine: AttendanceEngine | None = None,
        clock: Clock | None = None,
        tz_name: str = DEFAULT_TIMEZONE,
    ):
        self._attendance = attendance
        self._staff = staff
        self._settings = settings
        self._leave = leave
        self._schedules = schedules
        self._calculator = calculator
        self._engine = engine or AttendanceEngine()
        self._clock = clock or SystemClock(tz_name)
        self._tz_name = tz_name

    def build_attendance_report(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
        location_id: Optional[int] = None,
    ) -> ReportData:
        require_date_range(start, end)

        calculator = self._calculator or PaidBreaksCalculator.for_settings(self._settings.get(organization_id))
        names = self._staff_names(organization_id, location_id)
        records = self._attendance.query_records_by_date_range(
            int(organization_id), start, end, staff_id=staff_id, location_id=location_id
        )

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in records:
            worked = calculator.worked_minutes(r)
            payable = calculator.payable_minutes(r)
            full_name = names.get(r.staff_id, "-")

            out_rows.append(
                {
                    "staff_id": r.staff_id,
                    "full_name": full_name,
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "clock_in": format_local_time(r.clock_in, self._tz_name),
                    "clock_out": format_local_time(r.clock_out, self._tz_name),
                    "lunch_minutes": int(r.lunch_duration_minutes or 0),
                    "break_minutes": r.break_minutes,
                    "worked_hours": format_minutes(worked),
                    "payable_hours": format_minutes(payable),
                    "status": r.status.value,
                }
            )

            s = summary_map.get(r.staff_id)
            if not s:
                s = {
                    "staff_id": r.staff_id,
                    "full_name": full_name,
                    "days": 0,
                    "worked_minutes": 0,
                    "payable_minutes": 0,
                }
                summary_map[r.staff_id] = s
            s["days"] += 1
            s["worked_minutes"] += worked
            s["payable_minutes"] += payable

        ordered = sorted(summary_map.values(), key=lambda x: x["payable_minutes"], reverse=True)
        summary = [
            {
                "staff_id": s["staff_id"],
                "full_name": s["full_name"],
                "days": s["days"],
                "total_hours": format_minutes(s["worked_minutes"]),
                "payable_hours": format_minutes(s["payable_minutes"]),
            }
            for s in ordered
        ]
        return ReportData(rows=out_rows, summary=summary)

    def build_daily_status(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        location_id: Optional[int] = None,
    ) -> list[dict]:
        """One row per staff member per day that has a status worth showing."""

        require_date_range(start, end)
        today = self._clock.today()
        org = int(organization_id)

        staff = self._staff.list_for_organization(org, location_id=location_id)
        records = {
            (r.staff_id, r.work_date): r
            for r in self._attendance.query_records_by_date_range(org, start, end, location_id=location_id)
        }

        leave = self._leave.list_approved_in_range(org, start, end) if self._leave else []
        scheduled = None
        if self._schedules:
            scheduled = {
                (s.staff_id, s.work_date)
                for s in self._schedules.list_range(organization_id=org, start=start, end=end, staff_id=None)
            }

        rows: list[dict] = []
        for day in iter_dates(start, end):
            for member in staff:
                on_leave = any(req.staff_id == member.staff_id and req.covers(day) for req in leave)
                expected = scheduled is None or (member.staff_id, day) in scheduled
                status = self._engine.classify_status(
                    records.get((member.staff_id, day)),
                    work_date=day,
                    today=today,
                    on_approved_leave=on_leave,
                    expected_working_day=expected,
                )
                if status is None:
                    continue
                rows.append(
                    {
                        "work_date": day.strftime("%Y-%m-%d"),
                        "staff_id": member.staff_id,
                        "full_name": member.full_name,
                        "status": status.value,
                    }
                )
        return rows

    @staticmethod
    def to_csv(report: ReportData) -> str:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=REPORT_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(report.rows)
        return buffer.getvalue()

    def _staff_names(self, organization_id: int, location_id: Optional[int]) -> dict[int, str]:
        return {
            s.staff_id: s.full_name
            for s in self._staff.list_for_organization(int(organization_id), location_id=location_id)
        }
