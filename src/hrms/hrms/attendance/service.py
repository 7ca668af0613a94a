from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.money import round_half_up
from ..common.validators import optional_int, require_fields, require_int, require_month, require_year
from ..core.constants import (
    IMPORT_COL_DATE,
    IMPORT_COL_EMPLOYEE,
    IMPORT_COL_TIME_IN,
    IMPORT_COL_TIME_OUT,
    STANDARD_HOURS_PER_DAY,
)
from ..core.enums import AttendanceMark
from ..core.exceptions import NotFoundError, ValidationError
from ..logging_config import get_logger
from .model import AttendanceRecord, ImportSummary
from .normalizer import OFF, MarkDecision, derive_mark, identifier_text, is_blank_cell, normalize_date, normalize_time
from .repository import AttendanceRepository

logger = get_logger(__name__)


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def _parse_date_field(value: Any, field_name: str) -> date:
    iso = normalize_date(value)
    if not iso:
        raise ValidationError(f"{field_name} must be a valid date (YYYY-MM-DD)")
    return parse_iso_date(iso)


def _parse_mark(value: Any) -> AttendanceMark:
    try:
        return AttendanceMark(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in AttendanceMark)
        raise ValidationError(f"Invalid mark. Allowed values: {allowed}")


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def list_attendance(
        self,
        *,
        attendance_date: Optional[str] = None,
        employee_id: Any = None,
        month: Any = None,
        year: Any = None,
    ) -> list[dict]:
        if month not in (None, "") and year not in (None, ""):
            records = self._attendance.list_records(
                month=require_month(month),
                year=require_year(year),
                employee_id=optional_int(employee_id, "employee_id"),
            )
        else:
            records = self._attendance.list_records(
                attendance_date=_parse_date_field(attendance_date, "date") if attendance_date else None,
                employee_id=optional_int(employee_id, "employee_id"),
            )
        return [self._row_view(r) for r in records]

    def get_attendance(self, attendance_id: int) -> dict:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return self._row_view(record)

    def create_attendance(self, data: Mapping[str, Any]) -> int:
        require_fields(data, "employee_id", "attendance_date")
        employee_id = require_int(data.get("employee_id"), "employee_id")
        attendance_date = _parse_date_field(data.get("attendance_date"), "attendance_date")
        decision = self._decide(data)

        return self._attendance.upsert_record(
            employee_id=employee_id,
            attendance_date=attendance_date,
            check_in=parse_hhmm(decision.check_in),
            check_out=parse_hhmm(decision.check_out),
            mark=decision.mark,
            notes=data.get("notes"),
        )

    def update_attendance(self, attendance_id: int, data: Mapping[str, Any]) -> None:
        if not self._attendance.get_by_id(attendance_id):
            raise NotFoundError("Attendance record not found")
        decision = self._decide(data)
        self._attendance.update_record(
            attendance_id=attendance_id,
            check_in=parse_hhmm(decision.check_in),
            check_out=parse_hhmm(decision.check_out),
            mark=decision.mark,
            notes=data.get("notes"),
        )

    def delete_attendance(self, attendance_id: int) -> None:
        if not self._attendance.delete_record(attendance_id):
            raise NotFoundError("Attendance record not found")

    def import_rows(self, rows: Sequence[Sequence[Any]]) -> ImportSummary:
        """Import spreadsheet rows (row 0 is the header) in one transaction.

        Bad rows are counted, never raised.
        """
        summary = ImportSummary()

        with self._attendance.transaction() as repo:
            for line_no, row in enumerate(rows[1:], start=2):
                summary.total_rows_read += 1

                if not row or all(is_blank_cell(c) for c in row):
                    summary.skipped_empty_rows += 1
                    continue

                identifier = identifier_text(_cell(row, IMPORT_COL_EMPLOYEE))
                if not identifier:
                    summary.skipped_empty_rows += 1
                    continue

                employee_id = repo.resolve_employee_id(identifier)
                if employee_id is None:
                    logger.debug("Import row %d: unknown employee %r", line_no, identifier)
                    summary.skipped_invalid_employee += 1
                    continue

                summary.valid_rows += 1

                iso_date = normalize_date(_cell(row, IMPORT_COL_DATE))
                if not iso_date:
                    logger.debug("Import row %d: unparseable date %r", line_no, _cell(row, IMPORT_COL_DATE))
                    summary.skipped_empty_rows += 1
                    continue

                decision = derive_mark(
                    normalize_time(_cell(row, IMPORT_COL_TIME_IN)),
                    normalize_time(_cell(row, IMPORT_COL_TIME_OUT)),
                )
                if decision is None:
                    logger.debug("Import row %d: time-out without time-in", line_no)
                    summary.skipped_empty_rows += 1
                    continue

                attendance_date = parse_iso_date(iso_date)
                existing = repo.get_for_employee_and_date(employee_id, attendance_date)
                if existing:
                    repo.update_record(
                        attendance_id=existing.attendance_id,
                        check_in=parse_hhmm(decision.check_in),
                        check_out=parse_hhmm(decision.check_out),
                        mark=decision.mark,
                        notes=existing.notes,
                    )
                    summary.updated_records += 1
                else:
                    repo.insert_record(
                        employee_id=employee_id,
                        attendance_date=attendance_date,
                        check_in=parse_hhmm(decision.check_in),
                        check_out=parse_hhmm(decision.check_out),
                        mark=decision.mark,
                    )
                    summary.inserted_records += 1

        logger.info(
            "Attendance import: read=%d valid=%d inserted=%d updated=%d invalid_employee=%d empty=%d",
            summary.total_rows_read,
            summary.valid_rows,
            summary.inserted_records,
            summary.updated_records,
            summary.skipped_invalid_employee,
            summary.skipped_empty_rows,
        )
        return summary

    def _decide(self, data: Mapping[str, Any]) -> MarkDecision:
        check_in = normalize_time(data.get("check_in"))
        check_out = normalize_time(data.get("check_out"))

        if data.get("mark") not in (None, ""):
            mark = _parse_mark(data.get("mark"))
            if mark in (AttendanceMark.OFF, AttendanceMark.ABSENT):
                return MarkDecision(mark)
            return MarkDecision(
                mark,
                check_in=check_in if check_in != OFF else None,
                check_out=check_out if check_out != OFF else None,
            )

        decision = derive_mark(check_in, check_out)
        if decision is None:
            raise ValidationError("check_out requires a check_in")
        return decision

    def _row_view(self, record: AttendanceRecord) -> dict:
        view = record.to_dict()
        minutes = record.worked_minutes
        view["hour_variance"] = (
            round_half_up(minutes / 60 - STANDARD_HOURS_PER_DAY) if minutes is not None else 0
        )
        return view
