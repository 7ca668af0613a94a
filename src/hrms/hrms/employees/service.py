from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_iso_date
from ..common.serialization import to_json_row
from ..common.validators import optional_int, require_fields, require_non_empty, to_decimal
from ..core.enums import EmployeeStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..logging_config import get_logger
from .model import EmployeeInput
from .repository import EmployeeRepository

logger = get_logger(__name__)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _employee_input(data: Mapping[str, Any]) -> EmployeeInput:
    hire_date = data.get("hire_date")
    try:
        parsed_hire = parse_iso_date(str(hire_date)[:10]) if hire_date else None
    except ValueError:
        raise ValidationError("hire_date must be a valid date (YYYY-MM-DD)")

    status = str(data.get("status") or EmployeeStatus.ACTIVE.value).strip().upper()
    if status not in {s.value for s in EmployeeStatus}:
        raise ValidationError(f"Invalid employee status: {status}")

    return EmployeeInput(
        first_name=require_non_empty(data.get("first_name"), "first_name"),
        last_name=require_non_empty(data.get("last_name"), "last_name"),
        phone=_optional_text(data.get("phone")),
        email=_optional_text(data.get("email")),
        hire_date=parsed_hire,
        status=status,
        address=_optional_text(data.get("address")),
        nationality=_optional_text(data.get("nationality")),
        blood_type=_optional_text(data.get("blood_type")),
        nssf_number=_optional_text(data.get("nssf_number")),
        employee_code=_optional_text(data.get("employee_code")),
    )


class EmployeeService:
    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def list_employees(self) -> list[dict]:
        return [to_json_row(r) for r in self._employees.list_view()]

    def get_employee(self, employee_id: int) -> dict:
        row = self._employees.get_view(employee_id)
        if not row:
            raise NotFoundError("Employee not found")
        return to_json_row(row)

    def create_employee(self, data: Mapping[str, Any]) -> int:
        payload = _employee_input(data)
        department_id = optional_int(data.get("department_id"), "department_id")
        position_id = optional_int(data.get("position_id"), "position_id")

        with self._employees.transaction() as repo:
            employee_id = repo.create_employee(payload)
            if department_id and position_id:
                repo.create_assignment(
                    employee_id=employee_id,
                    department_id=department_id,
                    position_id=position_id,
                    start_date=payload.hire_date,
                    salary=to_decimal(data.get("start_salary")),
                )

        logger.info("Created employee %s", employee_id)
        return employee_id

    def update_employee(self, employee_id: int, data: Mapping[str, Any]) -> None:
        require_fields(data, "first_name", "last_name", "phone", "email", "hire_date", message="Missing required fields")
        payload = _employee_input(data)
        department_id = optional_int(data.get("department_id"), "department_id")
        position_id = optional_int(data.get("position_id"), "position_id")

        with self._employees.transaction() as repo:
            if not repo.get_view(employee_id):
                raise NotFoundError("Employee not found")
            repo.update_employee(employee_id, payload)

            if department_id and position_id:
                salary = to_decimal(data.get("start_salary"))
                current = repo.get_active_assignment(employee_id)
                if current:
                    repo.update_assignment(
                        current.assignment_id,
                        department_id=department_id,
                        position_id=position_id,
                        salary=salary,
                    )
                else:
                    repo.create_assignment(
                        employee_id=employee_id,
                        department_id=department_id,
                        position_id=position_id,
                        start_date=payload.hire_date,
                        salary=salary,
                    )

    def terminate_employee(self, employee_id: int) -> None:
        if not self._employees.get_view(employee_id):
            raise NotFoundError("Employee not found")
        self._employees.set_status(employee_id, EmployeeStatus.TERMINATED.value)
        logger.info("Terminated employee %s", employee_id)
