from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ScheduledShift
from .repository import ScheduleRepository

_COLUMNS = "schedule_id, organization_id, staff_id, work_date, start_time, end_time, location_id, note"


def _to_shift(r: dict) -> ScheduledShift:
    return ScheduledShift(
        schedule_id=int(r["schedule_id"]),
        organization_id=int(r["organization_id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        location_id=r.get("location_id"),
        note=r.get("note"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_staff_and_date(self, *, organization_id: int, staff_id: int, work_date: date) -> Optional[ScheduledShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM schedules
                WHERE organization_id=%s AND staff_id=%s AND work_date=%s
                """,
                (int(organization_id), int(staff_id), work_date),
            )
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def upsert(
        self,
        *,
        organization_id: int,
        staff_id: int,
        work_date: date,
        start_time: time,
        end_time: time,
        location_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedules(organization_id, staff_id, work_date, start_time, end_time, location_id, note)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    start_time=VALUES(start_time), end_time=VALUES(end_time),
                    location_id=VALUES(location_id), note=VALUES(note)
                """,
                (int(organization_id), int(staff_id), work_date, start_time, end_time, location_id, note),
            )

            # lastrowid is 0 when the row already existed.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT schedule_id FROM schedules WHERE organization_id=%s AND staff_id=%s AND work_date=%s",
                (int(organization_id), int(staff_id), work_date),
            )
            r = fetchone(cur)
            return int(r["schedule_id"]) if r else 0

    def delete(self, *, organization_id: int, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM schedules WHERE organization_id=%s AND schedule_id=%s",
                (int(organization_id), int(schedule_id)),
            )
            return cur.rowcount > 0

    def list_range(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
    ) -> Sequence[ScheduledShift]:
        clauses = ["organization_id=%s", "work_date BETWEEN %s AND %s"]
        params: list[object] = [int(organization_id), start, end]
        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM schedules
                WHERE {" AND ".join(clauses)}
                ORDER BY work_date ASC, staff_id ASC
                """,
                tuple(params),
            )
            return [_to_shift(r) for r in fetchall(cur)]
