from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AssignmentStatus
from ..database.mysql_base import MySQLRepository, fetchall, fetchone
from .model import EmployeeInput, EmploymentAssignment
from .repository import EmployeeRepository

_VIEW_SELECT = """
    SELECT e.*,
           ea.assignment_id, ea.department_id, ea.position_id, ea.start_salary, ea.reference_salary,
           d.name AS department_name,
           p.title AS position_title
    FROM employee e
    LEFT JOIN employment_assignment ea ON e.employee_id = ea.employee_id AND ea.status = 'ACTIVE'
    LEFT JOIN department d ON ea.department_id = d.department_id
    LEFT JOIN `position` p ON ea.position_id = p.position_id
"""


def assignment_from_row(r: dict) -> EmploymentAssignment:
    return EmploymentAssignment(
        assignment_id=int(r["assignment_id"]),
        employee_id=int(r["employee_id"]),
        department_id=int(r["department_id"]) if r.get("department_id") is not None else None,
        position_id=int(r["position_id"]) if r.get("position_id") is not None else None,
        start_date=r.get("start_date"),
        start_salary=Decimal(str(r.get("start_salary") or 0)),
        reference_salary=Decimal(str(r.get("reference_salary") or 0)),
        status=AssignmentStatus(str(r.get("status") or "ACTIVE").upper()),
    )


class MySQLEmployeeRepository(MySQLRepository, EmployeeRepository):
    def list_view(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute(f"{_VIEW_SELECT} ORDER BY e.last_name, e.first_name")
            return fetchall(cur)

    def get_view(self, employee_id: int) -> Optional[dict]:
        with self._cursor() as cur:
            cur.execute(f"{_VIEW_SELECT} WHERE e.employee_id=%s", (int(employee_id),))
            return fetchone(cur)

    def create_employee(self, data: EmployeeInput) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO employee(employee_code, first_name, last_name, phone, email, hire_date, status,
                                     address, nationality, blood_type, nssf_number)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.employee_code,
                    data.first_name,
                    data.last_name,
                    data.phone,
                    data.email,
                    data.hire_date,
                    data.status,
                    data.address,
                    data.nationality,
                    data.blood_type,
                    data.nssf_number,
                ),
            )
            return int(cur.lastrowid)

    def update_employee(self, employee_id: int, data: EmployeeInput) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE employee
                SET first_name=%s, last_name=%s, phone=%s, email=%s, hire_date=%s, status=%s,
                    address=%s, nationality=%s, blood_type=%s, nssf_number=%s,
                    employee_code=COALESCE(%s, employee_code)
                WHERE employee_id=%s
                """,
                (
                    data.first_name,
                    data.last_name,
                    data.phone,
                    data.email,
                    data.hire_date,
                    data.status,
                    data.address,
                    data.nationality,
                    data.blood_type,
                    data.nssf_number,
                    data.employee_code,
                    int(employee_id),
                ),
            )
            return cur.rowcount > 0

    def set_status(self, employee_id: int, status: str) -> bool:
        with self._cursor() as cur:
            cur.execute("UPDATE employee SET status=%s WHERE employee_id=%s", (status, int(employee_id)))
            return cur.rowcount > 0

    def get_active_assignment(self, employee_id: int) -> Optional[EmploymentAssignment]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT assignment_id, employee_id, department_id, position_id, start_date,
                       start_salary, reference_salary, status
                FROM employment_assignment
                WHERE employee_id=%s AND status='ACTIVE'
                ORDER BY assignment_id DESC
                LIMIT 1
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            return assignment_from_row(r) if r else None

    def create_assignment(
        self,
        *,
        employee_id: int,
        department_id: int,
        position_id: int,
        start_date: Optional[date],
        salary: Decimal,
    ) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO employment_assignment(employee_id, department_id, position_id, start_date,
                                                  start_salary, reference_salary, status)
                VALUES(%s,%s,%s,%s,%s,%s,'ACTIVE')
                """,
                (int(employee_id), int(department_id), int(position_id), start_date, salary, salary),
            )
            return int(cur.lastrowid)

    def update_assignment(self, assignment_id: int, *, department_id: int, position_id: int, salary: Decimal) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE employment_assignment
                SET department_id=%s, position_id=%s, start_salary=%s, reference_salary=%s
                WHERE assignment_id=%s
                """,
                (int(department_id), int(position_id), salary, salary, int(assignment_id)),
            )
            return cur.rowcount > 0
