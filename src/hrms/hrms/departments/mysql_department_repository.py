from __future__ import annotations

from typing import Optional, Sequence

from ..database.mysql_base import MySQLRepository, fetchall, fetchone
from .model import DepartmentInput, PositionInput
from .repository import DepartmentRepository, PositionRepository

_STATS_SELECT = """
    SELECT d.department_id, d.name, d.description, d.budget, d.manager_assignment_id,
           COUNT(DISTINCT e.employee_id) AS staff_count,
           CONCAT(mgr_e.first_name, ' ', mgr_e.last_name) AS manager_name
    FROM department d
    LEFT JOIN employment_assignment ea ON d.department_id = ea.department_id AND ea.status = 'ACTIVE'
    LEFT JOIN employee e ON ea.employee_id = e.employee_id AND e.status = 'ACTIVE'
    LEFT JOIN employment_assignment mgr_ea ON d.manager_assignment_id = mgr_ea.assignment_id
    LEFT JOIN employee mgr_e ON mgr_ea.employee_id = mgr_e.employee_id
"""

_STATS_GROUP = """
    GROUP BY d.department_id, d.name, d.description, d.budget, d.manager_assignment_id,
             mgr_e.first_name, mgr_e.last_name
"""


class MySQLDepartmentRepository(MySQLRepository, DepartmentRepository):
    def list_with_stats(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute(f"{_STATS_SELECT} {_STATS_GROUP} ORDER BY d.name")
            return fetchall(cur)

    def get_with_stats(self, department_id: int) -> Optional[dict]:
        with self._cursor() as cur:
            cur.execute(f"{_STATS_SELECT} WHERE d.department_id=%s {_STATS_GROUP}", (int(department_id),))
            return fetchone(cur)

    def create(self, data: DepartmentInput) -> int:
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO department(name, description, budget, manager_assignment_id) VALUES(%s,%s,%s,%s)",
                (data.name, data.description, data.budget, data.manager_assignment_id),
            )
            return int(cur.lastrowid)

    def update(self, department_id: int, data: DepartmentInput) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE department
                SET name=%s, description=%s, budget=%s, manager_assignment_id=%s
                WHERE department_id=%s
                """,
                (data.name, data.description, data.budget, data.manager_assignment_id, int(department_id)),
            )
            return cur.rowcount > 0

    def list_employees(self, department_id: int) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT e.employee_id, e.first_name, e.last_name, e.email, e.hire_date,
                       p.title AS position_title,
                       d.name AS department_name
                FROM employee e
                INNER JOIN employment_assignment ea ON e.employee_id = ea.employee_id
                LEFT JOIN `position` p ON ea.position_id = p.position_id
                LEFT JOIN department d ON ea.department_id = d.department_id
                WHERE ea.department_id=%s AND ea.status='ACTIVE' AND e.status='ACTIVE'
                ORDER BY e.last_name, e.first_name
                """,
                (int(department_id),),
            )
            return fetchall(cur)


class MySQLPositionRepository(MySQLRepository, PositionRepository):
    def list_all(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute("SELECT position_id, title, description FROM `position` ORDER BY title")
            return fetchall(cur)

    def create(self, data: PositionInput) -> int:
        with self._cursor() as cur:
            cur.execute("INSERT INTO `position`(title, description) VALUES(%s,%s)", (data.title, data.description))
            return int(cur.lastrowid)
