from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyClockedIn, ConcurrentUpdateError, RecordNotFound
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, load_json, to_db_datetime
from .model import MUTABLE_FIELDS, AttendanceRecord, BreakInterval
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, organization_id, staff_id, work_date, location_id, shift_id,
    clock_in, clock_out, lunch_start, lunch_end, lunch_duration_minutes,
    breaks, total_hours, status, version
"""


def _breaks_to_json(breaks: Sequence[BreakInterval]) -> str:
    return json.dumps(
        [
            {
                "start_time": to_db_datetime(b.start_time).isoformat(),
                "end_time": to_db_datetime(b.end_time).isoformat() if b.end_time else None,
                "duration_minutes": b.duration_minutes,
            }
            for b in breaks
        ]
    )


def _breaks_from_json(value: Any) -> tuple[BreakInterval, ...]:
    return tuple(
        BreakInterval(
            start_time=from_db_datetime(item["start_time"]),
            end_time=from_db_datetime(item.get("end_time")),
            duration_minutes=item.get("duration_minutes"),
        )
        for item in load_json(value, [])
    )


def _to_record(r: dict) -> AttendanceRecord:
    total = r.get("total_hours")
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        organization_id=int(r["organization_id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        location_id=r.get("location_id"),
        shift_id=r.get("shift_id"),
        clock_in=from_db_datetime(r.get("clock_in")),
        clock_out=from_db_datetime(r.get("clock_out")),
        lunch_start=from_db_datetime(r.get("lunch_start")),
        lunch_end=from_db_datetime(r.get("lunch_end")),
        lunch_duration_minutes=r.get("lunch_duration_minutes"),
        breaks=_breaks_from_json(r.get("breaks")),
        total_hours=float(total) if total is not None else None,
        status=AttendanceStatus(r["status"]),
        version=int(r.get("version") or 1),
    )


def _db_value(field: str, value: Any) -> Any:
    if field == "breaks":
        return _breaks_to_json(value)
    if field == "status":
        return AttendanceStatus(value).value
    if isinstance(value, datetime):
        return to_db_datetime(value)
    return value


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, organization_id: int, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE organization_id=%s AND record_id=%s",
                (int(organization_id), int(record_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_staff_and_date(self, organization_id: int, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE organization_id=%s AND staff_id=%s AND work_date=%s
                """,
                (int(organization_id), int(staff_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_open_record_for_today(self, organization_id: int, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE organization_id=%s AND staff_id=%s AND work_date=%s
                  AND clock_in IS NOT NULL AND clock_out IS NULL
                """,
                (int(organization_id), int(staff_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_staff(self, organization_id: int, staff_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE organization_id=%s AND staff_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (int(organization_id), int(staff_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_record(
        self,
        *,
        organization_id: int,
        staff_id: int,
        work_date: date,
        clock_in: datetime,
        status: AttendanceStatus,
        location_id: Optional[int] = None,
        shift_id: Optional[int] = None,
    ) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        organization_id, staff_id, work_date, location_id, shift_id,
                        clock_in, breaks, status, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        int(organization_id),
                        int(staff_id),
                        work_date,
                        location_id,
                        shift_id,
                        to_db_datetime(clock_in),
                        "[]",
                        status.value,
                    ),
                )
                record_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            # uq_attendance_staff_day: a concurrent clock-in won the insert.
            raise AlreadyClockedIn() from e

        return AttendanceRecord(
            record_id=record_id,
            organization_id=int(organization_id),
            staff_id=int(staff_id),
            work_date=work_date,
            location_id=location_id,
            shift_id=shift_id,
            clock_in=clock_in,
            status=status,
            version=1,
        )

    def update_record(
        self,
        organization_id: int,
        record_id: int,
        patch: dict,
        *,
        expected_version: int,
    ) -> AttendanceRecord:
        unknown = set(patch) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        assignments = [f"{name}=%s" for name in patch]
        params: list[object] = [_db_value(name, value) for name, value in patch.items()]
        assignments.append("version=version+1")
        params.extend([int(organization_id), int(record_id), int(expected_version)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {", ".join(assignments)}
                WHERE organization_id=%s AND record_id=%s AND version=%s
                """,
                tuple(params),
            )
            updated = cur.rowcount > 0

        saved = self.get_by_id(organization_id, record_id)
        if saved is None:
            raise RecordNotFound()
        if not updated:
            raise ConcurrentUpdateError("Attendance record was changed by another request. Please refresh.")
        return saved

    def query_records_by_date_range(
        self,
        organization_id: int,
        start: date,
        end: date,
        *,
        staff_id: Optional[int] = None,
        location_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["organization_id=%s", "work_date BETWEEN %s AND %s"]
        params: list[object] = [int(organization_id), start, end]

        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))
        if location_id is not None:
            clauses.append("location_id=%s")
            params.append(int(location_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(AttendanceStatus(status).value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, staff_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
