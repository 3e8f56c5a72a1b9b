from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime
from .model import LeaveRequest, LeaveType
from .repository import LeaveRepository

_COLUMNS = """
    request_id, organization_id, staff_id, leave_type, start_date, end_date, reason,
    status, created_at, decided_by, decided_at, decision_note, leave_type_id, is_paid
"""

_TYPE_COLUMNS = """
    type_id, organization_id, name, days_allowed, is_paid, requires_approval,
    carry_forward_allowed, max_carry_forward_days
"""


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        organization_id=int(r["organization_id"]),
        staff_id=int(r["staff_id"]),
        leave_type=r["leave_type"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        created_at=from_db_datetime(r["created_at"]),
        decided_by=r.get("decided_by"),
        decided_at=from_db_datetime(r.get("decided_at")),
        decision_note=r.get("decision_note"),
        leave_type_id=r.get("leave_type_id"),
        is_paid=bool(r.get("is_paid", 1)),
    )


def _to_type(r: dict) -> LeaveType:
    return LeaveType(
        type_id=int(r["type_id"]),
        organization_id=int(r["organization_id"]),
        name=r["name"],
        days_allowed=int(r["days_allowed"]),
        is_paid=bool(r["is_paid"]),
        requires_approval=bool(r["requires_approval"]),
        carry_forward_allowed=bool(r["carry_forward_allowed"]),
        max_carry_forward_days=int(r["max_carry_forward_days"] or 0),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        organization_id: int,
        staff_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        leave_type_id: Optional[int] = None,
        is_paid: bool = True,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    organization_id, staff_id, leave_type_id, leave_type, is_paid, start_date, end_date, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(organization_id),
                    int(staff_id),
                    leave_type_id,
                    leave_type,
                    1 if is_paid else 0,
                    start_date,
                    end_date,
                    reason,
                    LeaveStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, organization_id: int, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE organization_id=%s AND request_id=%s",
                (int(organization_id), int(request_id)),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_requests(
        self,
        organization_id: int,
        *,
        status: Optional[LeaveStatus] = None,
        staff_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        clauses = ["organization_id=%s"]
        params: list[object] = [int(organization_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(LeaveStatus(status).value)
        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_approved_in_range(self, organization_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE organization_id=%s AND status=%s AND start_date<=%s AND end_date>=%s
                ORDER BY start_date ASC
                """,
                (int(organization_id), LeaveStatus.APPROVED.value, end, start),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def is_on_approved_leave(self, staff_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS hit
                FROM leave_requests
                WHERE staff_id=%s AND status=%s AND start_date<=%s AND end_date>=%s
                LIMIT 1
                """,
                (int(staff_id), LeaveStatus.APPROVED.value, work_date, work_date),
            )
            return fetchone(cur) is not None

    def decide(
        self,
        *,
        organization_id: int,
        request_id: int,
        status: LeaveStatus,
        decided_by: int,
        decision_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=UTC_TIMESTAMP(), decision_note=%s
                WHERE organization_id=%s AND request_id=%s AND status=%s
                """,
                (
                    LeaveStatus(status).value,
                    int(decided_by),
                    decision_note,
                    int(organization_id),
                    int(request_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_leave_types(self, organization_id: int) -> Sequence[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TYPE_COLUMNS} FROM leave_types WHERE organization_id=%s ORDER BY name ASC",
                (int(organization_id),),
            )
            return [_to_type(r) for r in fetchall(cur)]

    def get_leave_type(self, organization_id: int, type_id: int) -> Optional[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TYPE_COLUMNS} FROM leave_types WHERE organization_id=%s AND type_id=%s",
                (int(organization_id), int(type_id)),
            )
            r = fetchone(cur)
            return _to_type(r) if r else None

    def create_leave_type(
        self,
        *,
        organization_id: int,
        name: str,
        days_allowed: int,
        is_paid: bool,
        requires_approval: bool,
        carry_forward_allowed: bool,
        max_carry_forward_days: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_types(
                    organization_id, name, days_allowed, is_paid, requires_approval,
                    carry_forward_allowed, max_carry_forward_days
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(organization_id),
                    name,
                    int(days_allowed),
                    1 if is_paid else 0,
                    1 if requires_approval else 0,
                    1 if carry_forward_allowed else 0,
                    int(max_carry_forward_days),
                ),
            )
            return int(cur.lastrowid)

    def leave_days_by_type(self, organization_id: int, staff_id: int, year: int, status: LeaveStatus) -> dict[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_type_id, SUM(DATEDIFF(end_date, start_date) + 1) AS days
                FROM leave_requests
                WHERE organization_id=%s AND staff_id=%s AND status=%s
                  AND leave_type_id IS NOT NULL AND YEAR(start_date)=%s
                GROUP BY leave_type_id
                """,
                (int(organization_id), int(staff_id), LeaveStatus(status).value, int(year)),
            )
            return {int(r["leave_type_id"]): int(r["days"] or 0) for r in fetchall(cur)}
