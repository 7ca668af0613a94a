from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceMark
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def transaction(self) -> AbstractContextManager["AttendanceRepository"]:
        """Unit of work: every call on the yielded repository commits together."""

        raise NotImplementedError

    def list_records(
        self,
        *,
        attendance_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee_month(self, employee_id: int, *, year: int, month: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def resolve_employee_id(self, identifier: str) -> Optional[int]:
        """Numeric employee id or employee_code -> employee_id."""

        raise NotImplementedError

    def insert_record(
        self,
        *,
        employee_id: int,
        attendance_date: date,
        check_in: Optional[time],
        check_out: Optional[time],
        mark: AttendanceMark,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def upsert_record(
        self,
        *,
        employee_id: int,
        attendance_date: date,
        check_in: Optional[time],
        check_out: Optional[time],
        mark: AttendanceMark,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_record(
        self,
        *,
        attendance_id: int,
        check_in: Optional[time],
        check_out: Optional[time],
        mark: AttendanceMark,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_record(self, attendance_id: int) -> bool:
        raise NotImplementedError
