from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_iso_date, today_local
from ..common.serialization import to_json_row
from ..common.validators import optional_int, require_fields, require_int
from ..core.enums import LeaveStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import NewLeaveRequest
from .repository import LeaveRepository


def _parse_status(value: Any) -> LeaveStatus:
    try:
        return LeaveStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid leave status: {value}")


class LeaveService:
    def __init__(self, leave: LeaveRepository):
        self._leave = leave

    def list_types(self) -> list[dict]:
        return [to_json_row(r) for r in self._leave.list_types()]

    def list_requests(self, *, status: Optional[str] = None, employee_id: Any = None) -> list[dict]:
        rows = self._leave.list_requests(
            status=_parse_status(status) if status else None,
            employee_id=optional_int(employee_id, "employee_id"),
        )
        return [to_json_row(r) for r in rows]

    def get_request(self, leave_request_id: int) -> dict:
        row = self._leave.get_request(leave_request_id)
        if not row:
            raise NotFoundError("Leave request not found")
        return to_json_row(row)

    def create_request(self, data: Mapping[str, Any]) -> int:
        require_fields(data, "employee_id", "leave_type_id", "start_date", "end_date")
        try:
            start = parse_iso_date(str(data["start_date"])[:10])
            end = parse_iso_date(str(data["end_date"])[:10])
        except ValueError:
            raise ValidationError("start_date and end_date must be dates (YYYY-MM-DD)")
        if end < start:
            raise ValidationError("end_date must not be before start_date")

        request = NewLeaveRequest(
            employee_id=require_int(data["employee_id"], "employee_id"),
            leave_type_id=require_int(data["leave_type_id"], "leave_type_id"),
            start_date=start,
            end_date=end,
            reason=(str(data.get("reason")).strip() or None) if data.get("reason") is not None else None,
        )
        return self._leave.create_request(request, submitted_on=today_local())

    def update_request(self, leave_request_id: int, data: Mapping[str, Any]) -> None:
        require_fields(data, "status")
        if not self._leave.get_request(leave_request_id):
            raise NotFoundError("Leave request not found")
        self._leave.update_request(
            leave_request_id,
            status=_parse_status(data["status"]),
            approved_by_user_id=optional_int(data.get("approved_by_user_id"), "approved_by_user_id"),
            reason=data.get("reason"),
        )
