from __future__ import annotations

import io
from dataclasses import fields
from datetime import date, time

import pytest
from werkzeug.security import generate_password_hash

from src.hrms.hrms.attendance.service import AttendanceService
from src.hrms.hrms.attendance.spreadsheet import read_rows
from src.hrms.hrms.container import Container
from src.hrms.hrms.core.enums import AccountStatus, AttendanceMark
from src.hrms.hrms.main import create_app
from src.hrms.hrms.payroll.composer import PayrollEntryComposer
from src.hrms.hrms.payroll.service import PayrollService
from src.hrms.hrms.users.model import UserAccount
from src.hrms.hrms.users.service import AuthService


class FakeUsers:
    def __init__(self):
        self.account = UserAccount(
            user_id=1,
            username="admin",
            email="admin@example.com",
            password_hash=generate_password_hash("secret"),
            status=AccountStatus.ACTIVE,
            roles=["ADMIN"],
        )
        self.touched = []

    def find_active_by_login(self, login):
        return self.account if login in (self.account.username, self.account.email) else None

    def touch_last_login(self, user_id):
        self.touched.append(user_id)


class ExplodingReports:
    def dashboard_stats(self):
        raise RuntimeError("boom")


@pytest.fixture
def users():
    return FakeUsers()


@pytest.fixture
def client(monkeypatch, attendance_repo, payroll_repo, calculator, users):
    monkeypatch.setenv("APP_ENV", "testing")
    payroll_repo.add_employee(1, 11, "3000")
    services = {f.name: None for f in fields(Container)}
    services.update(
        attendance_service=AttendanceService(attendance_repo),
        payroll_service=PayrollService(payroll_repo, PayrollEntryComposer(calculator)),
        auth_service=AuthService(users),
        report_service=ExplodingReports(),
    )
    app = create_app(container=Container(**services))
    return app.test_client()


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}


def test_login_ok(client, users):
    resp = client.post("/api/auth/login", json={"usernameOrEmail": "admin@example.com", "password": "secret"})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["role"] == "ADMIN"
    assert "password_hash" not in body
    assert users.touched == [1]


@pytest.mark.parametrize("password", ["wrong", ""])
def test_login_rejects_bad_password(client, users, password):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": password})

    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid credentials"}
    assert users.touched == []


def test_pay_individual_missing_fields(client):
    resp = client.post("/api/payroll/pay-individual", json={"month": 11, "year": 2025})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Month, year, assignment_id, and employee_id are required"


def test_bulk_save_then_view(client):
    resp = client.post(
        "/api/payroll/entries",
        json={"month": 11, "year": 2025, "entries": [{"assignment_id": 11, "gross_salary": 3000, "hour_variance": -8}]},
    )
    assert resp.status_code == 200
    assert resp.get_json()["updated_count"] == 1

    rows = client.get("/api/payroll/employees?month=11&year=2025").get_json()
    assert rows[0]["hour_variance"] == -8
    assert rows[0]["hour_variance_override"] is True
    assert rows[0]["net_salary"] == 2850.0


def test_approve_unknown_run_is_404(client):
    resp = client.put("/api/payroll/runs/999/approve", json={})

    assert resp.status_code == 404


def test_import_without_file(client):
    resp = client.post("/api/attendance/import", data={}, content_type="multipart/form-data")

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "No file uploaded"}


def test_import_csv(client, attendance_repo):
    sheet = b"Employee,Name,Date,Time In,Time Out\nE001,Ann,11/3/2025,8:00,17:00\nE999,Ghost,11/3/2025,8:00,17:00\n"
    resp = client.post(
        "/api/attendance/import",
        data={"file": (io.BytesIO(sheet), "november.csv")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["inserted_records"] == 1
    assert body["skipped_invalid_employee"] == 1
    assert len(attendance_repo.records) == 1


def test_csv_serial_cells_are_read_as_numbers():
    sheet = b"Employee,Name,Date,Time In,Time Out\nE001,Ann,45962,0.375,0.75\n007,Bob,11/3/2025,8:00,\n"

    header, serials, text = read_rows(io.BytesIO(sheet), "november.csv")

    assert header == ["Employee", "Name", "Date", "Time In", "Time Out"]
    assert serials[0] == "E001"
    assert serials[2:] == [45962, 0.375, 0.75]
    assert text == ["007", "Bob", "11/3/2025", "8:00", None]


def test_import_csv_with_serial_date_and_times(client, attendance_repo):
    sheet = b"Employee,Name,Date,Time In,Time Out\nE001,Ann,45962,0.375,0.75\n"
    resp = client.post(
        "/api/attendance/import",
        data={"file": (io.BytesIO(sheet), "serials.csv")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert (body["valid_rows"], body["inserted_records"], body["skipped_empty_rows"]) == (1, 1, 0)
    record = attendance_repo.get_for_employee_and_date(1, date(2025, 11, 1))
    assert (record.check_in, record.check_out) == (time(9, 0), time(18, 0))
    assert record.mark == AttendanceMark.PRESENT


def test_malformed_payroll_entries_are_400(client):
    resp = client.post(
        "/api/payroll/entries",
        json={"month": 11, "year": 2025, "entries": [{"assignment_id": 11, "deductions": [5]}]},
    )

    assert resp.status_code == 400


def test_import_rejects_unknown_extension(client):
    resp = client.post(
        "/api/attendance/import",
        data={"file": (io.BytesIO(b"x"), "notes.txt")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400


def test_unhandled_error_is_500(client):
    resp = client.get("/api/dashboard/stats")

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "boom"}
