from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import RunKind, RunStatus
from ..employees.model import EmploymentAssignment
from .model import EligibleEmployee, PayrollBonus, PayrollDeduction, PayrollEntry, PayrollRun


class PayrollRepository(Protocol):
    def transaction(self) -> AbstractContextManager["PayrollRepository"]:
        raise NotImplementedError

    # runs
    def find_main_run(self, year: int, month: int) -> Optional[PayrollRun]:
        """Newest non-cancelled MAIN run whose period starts in the month."""

        raise NotImplementedError

    def list_individual_runs(
        self, year: int, month: int, *, employee_id: Optional[int] = None
    ) -> Sequence[PayrollRun]:
        """Non-cancelled INDIVIDUAL runs of the month, newest first."""

        raise NotImplementedError

    def get_run(self, payroll_run_id: int) -> Optional[PayrollRun]:
        raise NotImplementedError

    def list_runs(self) -> Sequence[PayrollRun]:
        raise NotImplementedError

    def create_run(
        self,
        *,
        period_start: date,
        period_end: date,
        pay_date: Optional[date],
        status: RunStatus,
        run_kind: RunKind,
        employee_id: Optional[int] = None,
        notes: Optional[str] = None,
        created_by_user_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def update_run_status(self, payroll_run_id: int, status: RunStatus, *, pay_date: Optional[date] = None) -> bool:
        """Set the status; a None pay_date keeps the stored one."""

        raise NotImplementedError

    # employees
    def list_eligible_employees(self, *, period_end: Optional[date] = None) -> Sequence[EligibleEmployee]:
        raise NotImplementedError

    def get_assignment(self, assignment_id: int) -> Optional[EmploymentAssignment]:
        raise NotImplementedError

    # entries
    def get_entry(self, payroll_entry_id: int) -> Optional[PayrollEntry]:
        raise NotImplementedError

    def find_entry(self, payroll_run_id: int, assignment_id: int) -> Optional[PayrollEntry]:
        raise NotImplementedError

    def find_latest_entry(self, assignment_id: int) -> Optional[PayrollEntry]:
        raise NotImplementedError

    def list_entries_for_run(self, payroll_run_id: int) -> Sequence[PayrollEntry]:
        raise NotImplementedError

    def create_entry(
        self,
        *,
        payroll_run_id: int,
        assignment_id: int,
        gross_salary: Decimal,
        bonus_amount: Decimal,
        net_salary: Decimal,
        hour_variance: Optional[int],
        hour_variance_override: bool,
        remarks: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_entry(
        self,
        payroll_entry_id: int,
        *,
        payroll_run_id: int,
        gross_salary: Decimal,
        bonus_amount: Decimal,
        net_salary: Decimal,
        hour_variance: Optional[int],
        hour_variance_override: bool,
        remarks: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def reparent_entry(self, payroll_entry_id: int, payroll_run_id: int) -> bool:
        raise NotImplementedError

    # entry children (full replacement)
    def list_deductions(self, payroll_entry_id: int) -> Sequence[PayrollDeduction]:
        raise NotImplementedError

    def replace_deductions(self, payroll_entry_id: int, deductions: Sequence[PayrollDeduction]) -> None:
        raise NotImplementedError

    def list_bonuses(self, payroll_entry_id: int) -> Sequence[PayrollBonus]:
        raise NotImplementedError

    def replace_bonuses(self, payroll_entry_id: int, bonuses: Sequence[PayrollBonus]) -> None:
        raise NotImplementedError

    # lookups
    def list_deduction_types(self) -> Sequence[dict]:
        raise NotImplementedError

    def list_bonus_types(self) -> Sequence[dict]:
        raise NotImplementedError
