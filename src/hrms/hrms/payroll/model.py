from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import format_iso
from ..common.money import ZERO
from ..common.serialization import to_number
from ..core.enums import RunKind, RunStatus


@dataclass(frozen=True)
class PayrollRun:
    payroll_run_id: int
    period_start: date
    period_end: date
    pay_date: Optional[date]
    status: RunStatus
    run_kind: RunKind = RunKind.MAIN
    employee_id: Optional[int] = None
    notes: Optional[str] = None
    created_by_user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_individual(self) -> bool:
        return self.run_kind == RunKind.INDIVIDUAL

    def to_dict(self) -> dict:
        return {
            "payroll_run_id": self.payroll_run_id,
            "period_start": format_iso(self.period_start),
            "period_end": format_iso(self.period_end),
            "pay_date": format_iso(self.pay_date),
            "status": self.status.value,
            "run_kind": self.run_kind.value,
            "employee_id": self.employee_id,
            "notes": self.notes,
            "created_by_user_id": self.created_by_user_id,
            "created_at": self.created_at.isoformat(sep=" ") if self.created_at else None,
        }


@dataclass(frozen=True)
class PayrollEntry:
    payroll_entry_id: int
    payroll_run_id: int
    assignment_id: int
    gross_salary: Decimal = ZERO
    bonus_amount: Decimal = ZERO
    net_salary: Decimal = ZERO
    hour_variance: Optional[int] = None
    hour_variance_override: bool = False
    remarks: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "payroll_entry_id": self.payroll_entry_id,
            "payroll_run_id": self.payroll_run_id,
            "assignment_id": self.assignment_id,
            "gross_salary": to_number(self.gross_salary),
            "bonus_amount": to_number(self.bonus_amount),
            "net_salary": to_number(self.net_salary),
            "hour_variance": self.hour_variance,
            "hour_variance_override": self.hour_variance_override,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class PayrollDeduction:
    deduction_type_id: int
    amount: Decimal
    effective_date: Optional[date] = None
    reason: Optional[str] = None
    payroll_deduction_id: Optional[int] = None
    type_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "payroll_deduction_id": self.payroll_deduction_id,
            "deduction_type_id": self.deduction_type_id,
            "deduction_type_name": self.type_name,
            "amount": to_number(self.amount),
            "effective_date": format_iso(self.effective_date),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class PayrollBonus:
    bonus_type_id: int
    amount: Decimal
    reason: Optional[str] = None
    payroll_bonus_id: Optional[int] = None
    type_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "payroll_bonus_id": self.payroll_bonus_id,
            "bonus_type_id": self.bonus_type_id,
            "bonus_type_name": self.type_name,
            "amount": to_number(self.amount),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class EligibleEmployee:
    """An ACTIVE employee with an ACTIVE assignment, as listed on the payroll screen."""

    employee_id: int
    employee_name: str
    assignment_id: int
    start_salary: Decimal
    department_name: Optional[str] = None
    position_title: Optional[str] = None
    hire_date: Optional[date] = None
    assignment_start_date: Optional[date] = None


@dataclass
class EntryInput:
    """One row of a bulk payroll save, already parsed."""

    assignment_id: int
    payroll_entry_id: Optional[int] = None
    gross_salary: Optional[Decimal] = None
    bonus_amount: Decimal = ZERO
    net_salary: Optional[Decimal] = None
    hour_variance: Optional[int] = None
    remarks: Optional[str] = None
    deductions: list[PayrollDeduction] = field(default_factory=list)
    bonuses: Optional[list[PayrollBonus]] = None
