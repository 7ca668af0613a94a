from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import NewLeaveRequest


class LeaveRepository(Protocol):
    def list_types(self) -> Sequence[dict]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[dict]:
        """Rows joined with employee name and leave type name."""

        raise NotImplementedError

    def get_request(self, leave_request_id: int) -> Optional[dict]:
        raise NotImplementedError

    def create_request(self, data: NewLeaveRequest, *, submitted_on: date) -> int:
        raise NotImplementedError

    def update_request(
        self,
        leave_request_id: int,
        *,
        status: LeaveStatus,
        approved_by_user_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError
