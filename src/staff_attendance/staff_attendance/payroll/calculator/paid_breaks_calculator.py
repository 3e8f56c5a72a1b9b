from __future__ import annotations

from ...attendance.engine import AttendanceEngine
from ...attendance.model import AttendanceRecord
from ...settings.model import OrganizationSettings
from .standard_calculator import StandardPayrollCalculator


class PaidBreaksCalculator(StandardPayrollCalculator):
    """Adds closed lunch/break time back to payable minutes when the organization pays for it."""

    def __init__(self, *, lunch_is_paid: bool, breaks_are_paid: bool, engine: AttendanceEngine | None = None):
        super().__init__(engine)
        self._lunch_is_paid = bool(lunch_is_paid)
        self._breaks_are_paid = bool(breaks_are_paid)

    @classmethod
    def for_settings(cls, settings: OrganizationSettings) -> "PaidBreaksCalculator":
        return cls(lunch_is_paid=settings.lunch.is_paid, breaks_are_paid=settings.breaks.is_paid)

    def payable_minutes(self, record: AttendanceRecord) -> int:
        if not record.is_closed:
            return 0

        paid = self._engine.closed_interval_duration(
            record,
            include_lunch=self._lunch_is_paid,
            include_breaks=self._breaks_are_paid,
        )
        return int((self._engine.worked_duration(record) + paid).total_seconds() // 60)
