from __future__ import annotations

from typing import Optional

from ...attendance.repository import AttendanceRepository
from ...common.datetime_utils import expected_hours_in_month
from ...common.money import round_half_up
from ...logging_config import get_logger
from .base import WorkedMinutesRule
from .standard_calculator import StandardWorkedMinutesRule

logger = get_logger(__name__)


class HourVarianceCalculator:
    """Actual worked hours minus expected (Mon-Fri x 8) hours for one month."""

    def __init__(self, attendance: AttendanceRepository, *, rule: Optional[WorkedMinutesRule] = None):
        self._attendance = attendance
        self._rule = rule or StandardWorkedMinutesRule()

    def calculate(self, employee_id: int, month: int, year: int) -> int:
        try:
            records = self._attendance.list_for_employee_month(employee_id, year=year, month=month)
            actual_minutes = sum(self._rule.worked_minutes(r) for r in records)
            expected_hours = expected_hours_in_month(year, month)
            variance = round_half_up(actual_minutes / 60 - expected_hours)
        except Exception:
            logger.exception("Hour variance failed for employee %s (%s-%s)", employee_id, year, month)
            return 0

        logger.debug(
            "Hour variance employee=%s %s-%02d: actual=%.2fh expected=%sh variance=%s",
            employee_id,
            year,
            month,
            actual_minutes / 60,
            expected_hours,
            variance,
        )
        return variance
