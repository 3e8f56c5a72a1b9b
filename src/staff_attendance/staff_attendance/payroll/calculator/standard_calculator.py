from __future__ import annotations

from ...attendance.engine import AttendanceEngine
from ...attendance.model import AttendanceRecord
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: (out - in) - lunch - breaks, not below 0; nothing is paid back."""

    def __init__(self, engine: AttendanceEngine | None = None):
        self._engine = engine or AttendanceEngine()

    def worked_minutes(self, record: AttendanceRecord) -> int:
        return int(self._engine.worked_duration(record).total_seconds() // 60)

    def payable_minutes(self, record: AttendanceRecord) -> int:
        return self.worked_minutes(record)
