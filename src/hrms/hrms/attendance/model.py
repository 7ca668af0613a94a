from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import format_hhmm, format_iso
from ..core.enums import AttendanceMark


@dataclass(frozen=True)
class AttendanceRecord:
    """One employee-day of attendance (unique per employee and date)."""

    attendance_id: int
    employee_id: int
    attendance_date: date
    check_in: Optional[time]
    check_out: Optional[time]
    mark: AttendanceMark
    notes: Optional[str] = None
    employee_name: Optional[str] = None

    @property
    def worked_minutes(self) -> Optional[int]:
        if self.check_in is None or self.check_out is None:
            return None
        return (self.check_out.hour * 60 + self.check_out.minute) - (self.check_in.hour * 60 + self.check_in.minute)

    def to_dict(self) -> dict:
        minutes = self.worked_minutes
        working_hours = round(minutes / 60, 2) if minutes is not None else 0
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "attendance_date": format_iso(self.attendance_date),
            "check_in": format_hhmm(self.check_in),
            "check_out": format_hhmm(self.check_out),
            "mark": self.mark.value,
            "notes": self.notes,
            "working_hours": working_hours,
        }


@dataclass
class ImportSummary:
    """Counters returned by a spreadsheet import."""

    total_rows_read: int = 0
    valid_rows: int = 0
    inserted_records: int = 0
    updated_records: int = 0
    skipped_invalid_employee: int = 0
    skipped_empty_rows: int = 0

    def to_dict(self) -> dict:
        return {
            "total_rows_read": self.total_rows_read,
            "valid_rows": self.valid_rows,
            "inserted_records": self.inserted_records,
            "updated_records": self.updated_records,
            "skipped_invalid_employee": self.skipped_invalid_employee,
            "skipped_empty_rows": self.skipped_empty_rows,
        }
