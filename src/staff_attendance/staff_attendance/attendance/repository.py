from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, organization_id: int, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_staff_and_date(self, organization_id: int, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_open_record_for_today(self, organization_id: int, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        """Today's record if it is clocked in and not yet clocked out."""

        raise NotImplementedError

    def get_recent_for_staff(self, organization_id: int, staff_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

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
        """Insert the day's record.

        Raises ``AlreadyClockedIn`` if a record for (organization, staff, date) exists.
        """

        raise NotImplementedError

    def update_record(
        self,
        organization_id: int,
        record_id: int,
        patch: dict,
        *,
        expected_version: int,
    ) -> AttendanceRecord:
        """Apply ``patch`` only if the stored version still equals ``expected_version``.

        Raises ``ConcurrentUpdateError`` otherwise.
        """

        raise NotImplementedError

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
        raise NotImplementedError
