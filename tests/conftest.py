from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, time
from decimal import Decimal
from typing import Optional

import pytest

from src.hrms.hrms.attendance.model import AttendanceRecord
from src.hrms.hrms.core.enums import AttendanceMark, RunKind, RunStatus
from src.hrms.hrms.employees.model import EmploymentAssignment
from src.hrms.hrms.payroll.model import EligibleEmployee, PayrollEntry, PayrollRun


class InMemoryAttendance:
    """AttendanceRepository over a dict keyed by (employee_id, date)."""

    def __init__(self, employee_codes: Optional[dict[str, int]] = None):
        self.codes = dict(employee_codes or {})
        self.records: dict[tuple[int, date], AttendanceRecord] = {}
        self._next_id = 1

    @contextmanager
    def transaction(self):
        snapshot = (copy.deepcopy(self.records), self._next_id)
        try:
            yield self
        except Exception:
            self.records, self._next_id = snapshot
            raise

    def add(self, employee_id: int, day: date, check_in: Optional[str], check_out: Optional[str], mark=AttendanceMark.PRESENT):
        def _t(value):
            if value is None:
                return None
            hours, minutes = value.split(":")
            return time(int(hours), int(minutes))

        return self.insert_record(
            employee_id=employee_id,
            attendance_date=day,
            check_in=_t(check_in),
            check_out=_t(check_out),
            mark=mark,
        )

    def list_records(self, *, attendance_date=None, employee_id=None, month=None, year=None):
        out = list(self.records.values())
        if month is not None and year is not None:
            out = [r for r in out if r.attendance_date.month == month and r.attendance_date.year == year]
        elif attendance_date is not None:
            out = [r for r in out if r.attendance_date == attendance_date]
        if employee_id is not None:
            out = [r for r in out if r.employee_id == employee_id]
        return sorted(out, key=lambda r: r.attendance_date, reverse=True)

    def list_for_employee_month(self, employee_id, *, year, month):
        return sorted(
            (
                r
                for r in self.records.values()
                if r.employee_id == employee_id and r.attendance_date.year == year and r.attendance_date.month == month
            ),
            key=lambda r: r.attendance_date,
        )

    def get_by_id(self, attendance_id):
        return next((r for r in self.records.values() if r.attendance_id == attendance_id), None)

    def get_for_employee_and_date(self, employee_id, attendance_date):
        return self.records.get((employee_id, attendance_date))

    def resolve_employee_id(self, identifier):
        if identifier.isdigit() and int(identifier) in self.codes.values():
            return int(identifier)
        return self.codes.get(identifier)

    def insert_record(self, *, employee_id, attendance_date, check_in, check_out, mark, notes=None):
        record = AttendanceRecord(
            attendance_id=self._next_id,
            employee_id=employee_id,
            attendance_date=attendance_date,
            check_in=check_in,
            check_out=check_out,
            mark=mark,
            notes=notes,
            employee_name=f"Employee {employee_id}",
        )
        self._next_id += 1
        self.records[(employee_id, attendance_date)] = record
        return record.attendance_id

    def upsert_record(self, *, employee_id, attendance_date, check_in, check_out, mark, notes=None):
        existing = self.records.get((employee_id, attendance_date))
        if existing is None:
            return self.insert_record(
                employee_id=employee_id,
                attendance_date=attendance_date,
                check_in=check_in,
                check_out=check_out,
                mark=mark,
                notes=notes,
            )
        self.records[(employee_id, attendance_date)] = replace(
            existing, check_in=check_in, check_out=check_out, mark=mark, notes=notes
        )
        return existing.attendance_id

    def update_record(self, *, attendance_id, check_in, check_out, mark, notes=None):
        for key, record in self.records.items():
            if record.attendance_id == attendance_id:
                self.records[key] = replace(record, check_in=check_in, check_out=check_out, mark=mark, notes=notes)
                return True
        return False

    def delete_record(self, attendance_id):
        for key, record in list(self.records.items()):
            if record.attendance_id == attendance_id:
                del self.records[key]
                return True
        return False


class FixedCalculator:
    """Stands in for HourVarianceCalculator; returns a configurable variance."""

    def __init__(self, variance: int = 0):
        self.variance = variance
        self.calls: list[tuple[int, int, int]] = []

    def calculate(self, employee_id, month, year):
        self.calls.append((employee_id, month, year))
        return self.variance


class InMemoryPayroll:
    """PayrollRepository with snapshot/rollback transactions."""

    def __init__(self):
        self.runs: dict[int, PayrollRun] = {}
        self.entries: dict[int, PayrollEntry] = {}
        self.deductions: dict[int, list] = {}
        self.bonuses: dict[int, list] = {}
        self.assignments: dict[int, EmploymentAssignment] = {}
        self.employees: list[EligibleEmployee] = []
        self._ids = {"run": 1, "entry": 1}

    def _state(self):
        return (self.runs, self.entries, self.deductions, self.bonuses, self._ids)

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self._state())
        try:
            yield self
        except Exception:
            self.runs, self.entries, self.deductions, self.bonuses, self._ids = snapshot
            raise

    def _next(self, kind: str) -> int:
        value = self._ids[kind]
        self._ids[kind] += 1
        return value

    # test setup

    def add_employee(
        self,
        employee_id: int,
        assignment_id: int,
        salary: str = "3000",
        *,
        hire_date: Optional[date] = date(2024, 1, 15),
        name: Optional[str] = None,
    ) -> EligibleEmployee:
        self.assignments[assignment_id] = EmploymentAssignment(
            assignment_id=assignment_id,
            employee_id=employee_id,
            department_id=1,
            position_id=1,
            start_date=hire_date,
            start_salary=Decimal(salary),
            reference_salary=Decimal(salary),
        )
        emp = EligibleEmployee(
            employee_id=employee_id,
            employee_name=name or f"Employee {employee_id}",
            assignment_id=assignment_id,
            start_salary=Decimal(salary),
            department_name="Finance",
            position_title="Accountant",
            hire_date=hire_date,
            assignment_start_date=hire_date,
        )
        self.employees.append(emp)
        return emp

    def runs_of(self, kind: RunKind) -> list[PayrollRun]:
        return [r for r in self.runs.values() if r.run_kind == kind]

    # runs

    def _period_runs(self, year, month, kind):
        return [
            r
            for r in self.runs.values()
            if r.period_start.year == year
            and r.period_start.month == month
            and r.status != RunStatus.CANCELLED
            and r.run_kind == kind
        ]

    def find_main_run(self, year, month):
        runs = self._period_runs(year, month, RunKind.MAIN)
        return max(runs, key=lambda r: r.payroll_run_id) if runs else None

    def list_individual_runs(self, year, month, *, employee_id=None):
        runs = self._period_runs(year, month, RunKind.INDIVIDUAL)
        if employee_id is not None:
            runs = [r for r in runs if r.employee_id == employee_id]
        return sorted(runs, key=lambda r: r.payroll_run_id, reverse=True)

    def get_run(self, payroll_run_id):
        return self.runs.get(payroll_run_id)

    def list_runs(self):
        return sorted(self.runs.values(), key=lambda r: r.period_start, reverse=True)

    def create_run(
        self,
        *,
        period_start,
        period_end,
        pay_date,
        status,
        run_kind,
        employee_id=None,
        notes=None,
        created_by_user_id=None,
    ):
        run_id = self._next("run")
        self.runs[run_id] = PayrollRun(
            payroll_run_id=run_id,
            period_start=period_start,
            period_end=period_end,
            pay_date=pay_date,
            status=status,
            run_kind=run_kind,
            employee_id=employee_id,
            notes=notes,
            created_by_user_id=created_by_user_id,
        )
        return run_id

    def update_run_status(self, payroll_run_id, status, *, pay_date=None):
        run = self.runs.get(payroll_run_id)
        if run is None:
            return False
        self.runs[payroll_run_id] = replace(run, status=status, pay_date=pay_date or run.pay_date)
        return True

    # employees

    def list_eligible_employees(self, *, period_end=None):
        out = []
        for emp in self.employees:
            start = emp.hire_date or emp.assignment_start_date
            if period_end is None or start is None or start <= period_end:
                out.append(emp)
        return out

    def get_assignment(self, assignment_id):
        return self.assignments.get(assignment_id)

    # entries

    def get_entry(self, payroll_entry_id):
        return self.entries.get(payroll_entry_id)

    def find_entry(self, payroll_run_id, assignment_id):
        matches = [
            e for e in self.entries.values() if e.payroll_run_id == payroll_run_id and e.assignment_id == assignment_id
        ]
        return max(matches, key=lambda e: e.payroll_entry_id) if matches else None

    def find_latest_entry(self, assignment_id):
        matches = [e for e in self.entries.values() if e.assignment_id == assignment_id]
        return max(matches, key=lambda e: e.payroll_entry_id) if matches else None

    def list_entries_for_run(self, payroll_run_id):
        return [e for e in self.entries.values() if e.payroll_run_id == payroll_run_id]

    def create_entry(self, *, payroll_run_id, assignment_id, **values):
        entry_id = self._next("entry")
        self.entries[entry_id] = PayrollEntry(
            payroll_entry_id=entry_id, payroll_run_id=payroll_run_id, assignment_id=assignment_id, **values
        )
        return entry_id

    def update_entry(self, payroll_entry_id, **values):
        entry = self.entries.get(payroll_entry_id)
        if entry is None:
            return False
        self.entries[payroll_entry_id] = replace(entry, **values)
        return True

    def reparent_entry(self, payroll_entry_id, payroll_run_id):
        return self.update_entry(payroll_entry_id, payroll_run_id=payroll_run_id)

    def list_deductions(self, payroll_entry_id):
        return list(self.deductions.get(payroll_entry_id, []))

    def replace_deductions(self, payroll_entry_id, deductions):
        self.deductions[payroll_entry_id] = list(deductions)

    def list_bonuses(self, payroll_entry_id):
        return list(self.bonuses.get(payroll_entry_id, []))

    def replace_bonuses(self, payroll_entry_id, bonuses):
        self.bonuses[payroll_entry_id] = list(bonuses)

    def list_deduction_types(self):
        return [{"deduction_type_id": 1, "name": "Income Tax", "description": None}]

    def list_bonus_types(self):
        return [{"bonus_type_id": 1, "name": "Performance", "description": None}]


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance({"E001": 1, "E002": 2})


@pytest.fixture
def payroll_repo():
    return InMemoryPayroll()


@pytest.fixture
def calculator():
    return FixedCalculator(0)
