from __future__ import annotations

from .base import WorkedMinutesRule
from ...attendance.model import AttendanceRecord
from ...core.enums import AttendanceMark


class StandardWorkedMinutesRule(WorkedMinutesRule):
    """Standard rule: PRESENT days with both punches count (out - in), negative spans count 0."""

    def worked_minutes(self, record: AttendanceRecord) -> int:
        if record.mark != AttendanceMark.PRESENT:
            return 0
        minutes = record.worked_minutes
        if minutes is None or minutes <= 0:
            return 0
        return minutes
