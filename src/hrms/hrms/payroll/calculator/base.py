from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.model import AttendanceRecord


class WorkedMinutesRule(ABC):
    """Strategy deciding how many minutes one attendance day contributes."""

    @abstractmethod
    def worked_minutes(self, record: AttendanceRecord) -> int:
        raise NotImplementedError
