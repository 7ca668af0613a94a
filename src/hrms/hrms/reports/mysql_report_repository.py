from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence

from ..core.enums import RunStatus
from ..database.mysql_base import MySQLRepository, fetchall, fetchone, in_clause
from .repository import ReportRepository

_FINALIZED = tuple(s.value for s in RunStatus if s.is_finalized)

_STAFF_JOINS = """
    LEFT JOIN employment_assignment ea ON d.department_id = ea.department_id AND ea.status = 'ACTIVE'
    LEFT JOIN employee e ON ea.employee_id = e.employee_id AND e.status = 'ACTIVE'
"""


class MySQLReportRepository(MySQLRepository, ReportRepository):
    def _count(self, sql: str) -> int:
        with self._cursor() as cur:
            cur.execute(sql)
            r = fetchone(cur)
            return int(r["count"]) if r else 0

    def count_active_employees(self) -> int:
        return self._count("SELECT COUNT(*) AS count FROM employee WHERE status='ACTIVE'")

    def count_departments(self) -> int:
        return self._count("SELECT COUNT(*) AS count FROM department")

    def count_pending_leave(self) -> int:
        return self._count("SELECT COUNT(*) AS count FROM leave_request WHERE status='PENDING'")

    def finalized_payroll_total(self, year: int, month: int) -> Decimal:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT SUM(pe.net_salary) AS total
                FROM payroll_entry pe
                INNER JOIN payroll_run pr ON pe.payroll_run_id = pr.payroll_run_id
                WHERE pr.status IN ({in_clause(_FINALIZED)})
                  AND YEAR(pr.period_start)=%s AND MONTH(pr.period_start)=%s
                """,
                (*_FINALIZED, int(year), int(month)),
            )
            r = fetchone(cur)
            return Decimal(str(r["total"])) if r and r.get("total") is not None else Decimal("0")

    def finalized_payroll_trend(self, since: date) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT YEAR(pr.period_start) AS year, MONTH(pr.period_start) AS month, SUM(pe.net_salary) AS total
                FROM payroll_entry pe
                INNER JOIN payroll_run pr ON pe.payroll_run_id = pr.payroll_run_id
                WHERE pr.status IN ({in_clause(_FINALIZED)}) AND pr.period_start >= %s
                GROUP BY YEAR(pr.period_start), MONTH(pr.period_start)
                ORDER BY YEAR(pr.period_start), MONTH(pr.period_start)
                """,
                (*_FINALIZED, since),
            )
            return fetchall(cur)

    def department_staff(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT d.department_id, d.name, d.budget, COUNT(DISTINCT e.employee_id) AS staff_count
                FROM department d
                {_STAFF_JOINS}
                GROUP BY d.department_id, d.name, d.budget
                ORDER BY d.name
                """
            )
            return fetchall(cur)

    def finalized_payroll_rows(self, *, limit: int) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT CONCAT(e.first_name, ' ', e.last_name) AS name, pr.pay_date AS payment_date,
                       pe.net_salary AS net_paid, pr.payroll_run_id, pr.run_kind
                FROM payroll_entry pe
                INNER JOIN payroll_run pr ON pe.payroll_run_id = pr.payroll_run_id
                INNER JOIN employment_assignment ea ON pe.assignment_id = ea.assignment_id
                INNER JOIN employee e ON ea.employee_id = e.employee_id
                WHERE pr.status IN ({in_clause(_FINALIZED)})
                ORDER BY pr.pay_date DESC, e.last_name, e.first_name
                LIMIT %s
                """,
                (*_FINALIZED, int(limit)),
            )
            return fetchall(cur)
