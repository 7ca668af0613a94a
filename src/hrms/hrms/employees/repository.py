from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import EmployeeInput, EmploymentAssignment


class EmployeeRepository(Protocol):
    def transaction(self) -> AbstractContextManager["EmployeeRepository"]:
        raise NotImplementedError

    def list_view(self) -> Sequence[dict]:
        """Employees joined with their active assignment, department and position."""

        raise NotImplementedError

    def get_view(self, employee_id: int) -> Optional[dict]:
        raise NotImplementedError

    def create_employee(self, data: EmployeeInput) -> int:
        raise NotImplementedError

    def update_employee(self, employee_id: int, data: EmployeeInput) -> bool:
        raise NotImplementedError

    def set_status(self, employee_id: int, status: str) -> bool:
        raise NotImplementedError

    def get_active_assignment(self, employee_id: int) -> Optional[EmploymentAssignment]:
        raise NotImplementedError

    def create_assignment(
        self,
        *,
        employee_id: int,
        department_id: int,
        position_id: int,
        start_date: Optional[date],
        salary: Decimal,
    ) -> int:
        raise NotImplementedError

    def update_assignment(self, assignment_id: int, *, department_id: int, position_id: int, salary: Decimal) -> bool:
        raise NotImplementedError
