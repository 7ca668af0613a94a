from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import DepartmentInput, PositionInput


class DepartmentRepository(Protocol):
    def list_with_stats(self) -> Sequence[dict]:
        """Departments with active staff count and manager name."""

        raise NotImplementedError

    def get_with_stats(self, department_id: int) -> Optional[dict]:
        raise NotImplementedError

    def create(self, data: DepartmentInput) -> int:
        raise NotImplementedError

    def update(self, department_id: int, data: DepartmentInput) -> bool:
        raise NotImplementedError

    def list_employees(self, department_id: int) -> Sequence[dict]:
        raise NotImplementedError


class PositionRepository(Protocol):
    def list_all(self) -> Sequence[dict]:
        raise NotImplementedError

    def create(self, data: PositionInput) -> int:
        raise NotImplementedError
