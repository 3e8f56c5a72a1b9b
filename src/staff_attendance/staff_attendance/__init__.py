"""Staff Attendance package.

This package is organized by feature modules (attendance, leave, schedules, payroll, ...)
with a thin Flask controller layer over service/repository layers. The attendance
state machine itself lives in ``attendance.engine`` and has no storage dependencies.
"""
