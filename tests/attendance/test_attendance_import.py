from __future__ import annotations

from datetime import date, time

import pytest

from src.hrms.hrms.attendance.service import AttendanceService
from src.hrms.hrms.core.enums import AttendanceMark
from src.hrms.hrms.core.exceptions import NotFoundError, ValidationError

HEADER = ["Employee", "Name", "Date", "Time In", "Time Out"]


def test_import_present_row(attendance_repo):
    svc = AttendanceService(attendance_repo)

    summary = svc.import_rows([HEADER, ["E001", "Ann", "11/1/2025", "8:12", "18:48"]])

    record = attendance_repo.get_for_employee_and_date(1, date(2025, 11, 1))
    assert record.check_in == time(8, 12)
    assert record.check_out == time(18, 48)
    assert record.mark == AttendanceMark.PRESENT
    assert summary.inserted_records == 1
    assert summary.valid_rows == 1


def test_import_off_row_is_valid(attendance_repo):
    svc = AttendanceService(attendance_repo)

    summary = svc.import_rows([HEADER, ["E002", "Bob", "11/2/2025", "OFF", "OFF"]])

    record = attendance_repo.get_for_employee_and_date(2, date(2025, 11, 2))
    assert record.mark == AttendanceMark.OFF
    assert record.check_in is None and record.check_out is None
    assert summary.valid_rows == 1
    assert summary.skipped_empty_rows == 0


def test_import_counters(attendance_repo):
    attendance_repo.add(1, date(2025, 11, 3), "09:00", None, mark=AttendanceMark.NO_SIGN_OUT)
    svc = AttendanceService(attendance_repo)

    summary = svc.import_rows(
        [
            HEADER,
            ["E001", "Ann", "11/3/2025", "9:00", "17:30"],  # update
            ["E999", "Nobody", "11/3/2025", "9:00", "17:00"],  # unknown employee
            [None, None, None, None, None],  # blank
            ["", "Ann", "11/4/2025", "9:00", "17:00"],  # no identifier
            ["E001", "Ann", "13/45/2025", "9:00", "17:00"],  # bad date
            ["E002", "Bob", "11/4/2025", None, "17:00"],  # out without in
            [2.0, "Bob", 45965, 0.375, None],  # numeric id, serial date, no sign out
        ]
    )

    assert summary.to_dict() == {
        "total_rows_read": 7,
        "valid_rows": 4,
        "inserted_records": 1,
        "updated_records": 1,
        "skipped_invalid_employee": 1,
        "skipped_empty_rows": 4,
    }
    updated = attendance_repo.get_for_employee_and_date(1, date(2025, 11, 3))
    assert updated.mark == AttendanceMark.PRESENT
    assert updated.check_out == time(17, 30)
    inserted = attendance_repo.get_for_employee_and_date(2, date(2025, 11, 4))
    assert inserted.mark == AttendanceMark.NO_SIGN_OUT
    assert inserted.check_in == time(9, 0)


def test_create_derives_mark_and_rejects_orphan_checkout(attendance_repo):
    svc = AttendanceService(attendance_repo)

    attendance_id = svc.create_attendance(
        {"employee_id": 1, "attendance_date": "2025-11-05", "check_in": "08:00", "check_out": "16:30"}
    )
    row = svc.get_attendance(attendance_id)
    assert row["mark"] == "PRESENT"
    assert row["working_hours"] == 8.5
    assert row["hour_variance"] == 1

    with pytest.raises(ValidationError):
        svc.create_attendance({"employee_id": 1, "attendance_date": "2025-11-06", "check_out": "16:30"})


def test_explicit_mark_wins(attendance_repo):
    svc = AttendanceService(attendance_repo)

    attendance_id = svc.create_attendance(
        {"employee_id": 1, "attendance_date": "2025-11-05", "check_in": "08:00", "mark": "off"}
    )

    row = svc.get_attendance(attendance_id)
    assert row["mark"] == "OFF"
    assert row["check_in"] is None


def test_missing_record_is_404(attendance_repo):
    svc = AttendanceService(attendance_repo)

    with pytest.raises(NotFoundError):
        svc.update_attendance(99, {"check_in": "08:00"})
    with pytest.raises(NotFoundError):
        svc.delete_attendance(99)
