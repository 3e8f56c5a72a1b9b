from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import SystemClock
from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.service import LeaveService
from .payroll.service import PayrollReportService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SettingsService
from .staff.mysql_staff_repository import MySQLStaffRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    clock: SystemClock

    staff_repo: MySQLStaffRepository
    settings_repo: MySQLSettingsRepository
    attendance_repo: MySQLAttendanceRepository
    schedules_repo: MySQLScheduleRepository
    leave_repo: MySQLLeaveRepository

    settings_service: SettingsService
    attendance_service: AttendanceService
    payroll_report_service: PayrollReportService
    schedule_service: ScheduleService
    leave_service: LeaveService


def build_container(*, db_config: dict, tz_name: str = DEFAULT_TIMEZONE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    clock = SystemClock(tz_name)

    staff_repo = MySQLStaffRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    leave_repo = MySQLLeaveRepository(conn)

    settings_service = SettingsService(settings_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        staff_repo,
        settings_service,
        schedules_repo,
        clock=clock,
        tz_name=tz_name,
    )
    payroll_report_service = PayrollReportService(
        attendance_repo,
        staff_repo,
        settings_service,
        leave=leave_repo,
        schedules=schedules_repo,
        clock=clock,
        tz_name=tz_name,
    )
    schedule_service = ScheduleService(schedules_repo)
    leave_service = LeaveService(leave_repo)

    return Container(
        conn=conn,
        clock=clock,
        staff_repo=staff_repo,
        settings_repo=settings_repo,
        attendance_repo=attendance_repo,
        schedules_repo=schedules_repo,
        leave_repo=leave_repo,
        settings_service=settings_service,
        attendance_service=attendance_service,
        payroll_report_service=payroll_report_service,
        schedule_service=schedule_service,
        leave_service=leave_service,
    )
