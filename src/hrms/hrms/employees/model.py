from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import AssignmentStatus


@dataclass(frozen=True)
class EmploymentAssignment:
    """An employee's placement (department, position, salary snapshot)."""

    assignment_id: int
    employee_id: int
    department_id: Optional[int]
    position_id: Optional[int]
    start_date: Optional[date]
    start_salary: Decimal
    reference_salary: Decimal
    status: AssignmentStatus = AssignmentStatus.ACTIVE


@dataclass(frozen=True)
class EmployeeInput:
    """Validated create/update payload."""

    first_name: str
    last_name: str
    phone: Optional[str]
    email: Optional[str]
    hire_date: Optional[date]
    status: str
    address: Optional[str] = None
    nationality: Optional[str] = None
    blood_type: Optional[str] = None
    nssf_number: Optional[str] = None
    employee_code: Optional[str] = None
