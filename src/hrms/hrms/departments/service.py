from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.serialization import to_json_row
from ..common.validators import optional_int, to_decimal
from ..core.exceptions import NotFoundError, ValidationError
from .model import DepartmentInput, PositionInput
from .repository import DepartmentRepository, PositionRepository


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


class DepartmentService:
    def __init__(self, departments: DepartmentRepository):
        self._departments = departments

    def list_departments(self) -> list[dict]:
        return [to_json_row(r) for r in self._departments.list_with_stats()]

    def get_department(self, department_id: int) -> dict:
        row = self._departments.get_with_stats(department_id)
        if not row:
            raise NotFoundError("Department not found")
        return to_json_row(row)

    def create_department(self, data: Mapping[str, Any]) -> int:
        return self._departments.create(self._input(data))

    def update_department(self, department_id: int, data: Mapping[str, Any]) -> None:
        if not self._departments.get_with_stats(department_id):
            raise NotFoundError("Department not found")
        self._departments.update(department_id, self._input(data))

    def list_department_employees(self, department_id: int) -> list[dict]:
        return [to_json_row(r) for r in self._departments.list_employees(department_id)]

    @staticmethod
    def _input(data: Mapping[str, Any]) -> DepartmentInput:
        name = _text(data.get("name"))
        if not name:
            raise ValidationError("Department name is required")
        return DepartmentInput(
            name=name,
            description=_text(data.get("description")),
            budget=to_decimal(data.get("budget")),
            manager_assignment_id=optional_int(data.get("manager_assignment_id"), "manager_assignment_id") or None,
        )


class PositionService:
    def __init__(self, positions: PositionRepository):
        self._positions = positions

    def list_positions(self) -> list[dict]:
        return [to_json_row(r) for r in self._positions.list_all()]

    def create_position(self, data: Mapping[str, Any]) -> int:
        title = _text(data.get("title"))
        if not title:
            raise ValidationError("Position title is required")
        return self._positions.create(PositionInput(title=title, description=_text(data.get("description"))))
