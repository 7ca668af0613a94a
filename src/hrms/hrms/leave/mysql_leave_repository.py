from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.mysql_base import MySQLRepository, fetchall, fetchone
from .model import NewLeaveRequest
from .repository import LeaveRepository

_SELECT = """
    SELECT lr.leave_request_id, lr.employee_id, lr.leave_type_id, lr.start_date, lr.end_date, lr.reason,
           lr.submitted_on, lr.status, lr.approved_by_user_id,
           CONCAT(e.first_name, ' ', e.last_name) AS employee_name,
           lt.name AS leave_type_name
    FROM leave_request lr
    INNER JOIN employee e ON lr.employee_id = e.employee_id
    INNER JOIN leave_type lt ON lr.leave_type_id = lt.leave_type_id
"""


class MySQLLeaveRepository(MySQLRepository, LeaveRepository):
    def list_types(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute("SELECT leave_type_id, name, description FROM leave_type ORDER BY name")
            return fetchall(cur)

    def list_requests(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[dict]:
        clauses = ["1=1"]
        params: list[object] = []
        if status is not None:
            clauses.append("lr.status=%s")
            params.append(status.value)
        if employee_id is not None:
            clauses.append("lr.employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)
        with self._cursor() as cur:
            cur.execute(f"{_SELECT} WHERE {where} ORDER BY lr.submitted_on DESC, lr.status", tuple(params))
            return fetchall(cur)

    def get_request(self, leave_request_id: int) -> Optional[dict]:
        with self._cursor() as cur:
            cur.execute(f"{_SELECT} WHERE lr.leave_request_id=%s", (int(leave_request_id),))
            return fetchone(cur)

    def create_request(self, data: NewLeaveRequest, *, submitted_on: date) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO leave_request(employee_id, leave_type_id, start_date, end_date, reason, submitted_on, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.employee_id,
                    data.leave_type_id,
                    data.start_date,
                    data.end_date,
                    data.reason,
                    submitted_on,
                    LeaveStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def update_request(
        self,
        leave_request_id: int,
        *,
        status: LeaveStatus,
        approved_by_user_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> bool:
        sets = ["status=%s"]
        params: list[object] = [status.value]
        if approved_by_user_id is not None:
            sets.append("approved_by_user_id=%s")
            params.append(int(approved_by_user_id))
        if reason is not None:
            sets.append("reason=%s")
            params.append(reason)
        params.append(int(leave_request_id))

        with self._cursor() as cur:
            cur.execute(f"UPDATE leave_request SET {', '.join(sets)} WHERE leave_request_id=%s", tuple(params))
            return cur.rowcount > 0
