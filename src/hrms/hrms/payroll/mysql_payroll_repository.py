from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import RunKind, RunStatus
from ..database.mysql_base import MySQLRepository, fetchall, fetchone
from ..employees.model import EmploymentAssignment
from ..employees.mysql_employee_repository import assignment_from_row
from .model import EligibleEmployee, PayrollBonus, PayrollDeduction, PayrollEntry, PayrollRun
from .repository import PayrollRepository

_RUN_COLUMNS = """
    payroll_run_id, period_start, period_end, pay_date, status, run_kind, employee_id, notes,
    created_by_user_id, created_at
"""

_ENTRY_COLUMNS = """
    pe.payroll_entry_id, pe.payroll_run_id, pe.assignment_id, pe.gross_salary, pe.bonus_amount, pe.net_salary,
    pe.hour_variance, pe.hour_variance_override, pe.remarks
"""


def _money(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _to_run(r: dict) -> PayrollRun:
    return PayrollRun(
        payroll_run_id=int(r["payroll_run_id"]),
        period_start=r["period_start"],
        period_end=r["period_end"],
        pay_date=r.get("pay_date"),
        status=RunStatus.parse(r.get("status"), default=RunStatus.DRAFT),
        run_kind=RunKind(str(r.get("run_kind") or "MAIN").upper()),
        employee_id=int(r["employee_id"]) if r.get("employee_id") is not None else None,
        notes=r.get("notes"),
        created_by_user_id=r.get("created_by_user_id"),
        created_at=r.get("created_at"),
    )


def _to_entry(r: dict) -> PayrollEntry:
    return PayrollEntry(
        payroll_entry_id=int(r["payroll_entry_id"]),
        payroll_run_id=int(r["payroll_run_id"]),
        assignment_id=int(r["assignment_id"]),
        gross_salary=_money(r.get("gross_salary")),
        bonus_amount=_money(r.get("bonus_amount")),
        net_salary=_money(r.get("net_salary")),
        hour_variance=int(r["hour_variance"]) if r.get("hour_variance") is not None else None,
        hour_variance_override=bool(r.get("hour_variance_override")),
        remarks=r.get("remarks"),
    )


class MySQLPayrollRepository(MySQLRepository, PayrollRepository):
    # runs

    def find_main_run(self, year: int, month: int) -> Optional[PayrollRun]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_RUN_COLUMNS}
                FROM payroll_run
                WHERE YEAR(period_start)=%s AND MONTH(period_start)=%s
                  AND status<>'CANCELLED' AND run_kind='MAIN'
                ORDER BY payroll_run_id DESC
                LIMIT 1
                """,
                (int(year), int(month)),
            )
            r = fetchone(cur)
            return _to_run(r) if r else None

    def list_individual_runs(
        self, year: int, month: int, *, employee_id: Optional[int] = None
    ) -> Sequence[PayrollRun]:
        clauses = [
            "YEAR(period_start)=%s",
            "MONTH(period_start)=%s",
            "status<>'CANCELLED'",
            "run_kind='INDIVIDUAL'",
        ]
        params: list[object] = [int(year), int(month)]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_RUN_COLUMNS} FROM payroll_run WHERE {' AND '.join(clauses)} ORDER BY payroll_run_id DESC",
                tuple(params),
            )
            return [_to_run(r) for r in fetchall(cur)]

    def get_run(self, payroll_run_id: int) -> Optional[PayrollRun]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {_RUN_COLUMNS} FROM payroll_run WHERE payroll_run_id=%s", (int(payroll_run_id),))
            r = fetchone(cur)
            return _to_run(r) if r else None

    def list_runs(self) -> Sequence[PayrollRun]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {_RUN_COLUMNS} FROM payroll_run ORDER BY period_start DESC, payroll_run_id DESC")
            return [_to_run(r) for r in fetchall(cur)]

    def create_run(
        self,
        *,
        period_start: date,
        period_end: date,
        pay_date: Optional[date],
        status: RunStatus,
        run_kind: RunKind,
        employee_id: Optional[int] = None,
        notes: Optional[str] = None,
        created_by_user_id: Optional[int] = None,
    ) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO payroll_run(period_start, period_end, pay_date, status, run_kind, employee_id, notes,
                                        created_by_user_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    period_start,
                    period_end,
                    pay_date,
                    status.value,
                    run_kind.value,
                    employee_id,
                    notes,
                    created_by_user_id,
                ),
            )
            return int(cur.lastrowid)

    def update_run_status(self, payroll_run_id: int, status: RunStatus, *, pay_date: Optional[date] = None) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE payroll_run SET status=%s, pay_date=COALESCE(%s, pay_date) WHERE payroll_run_id=%s",
                (status.value, pay_date, int(payroll_run_id)),
            )
            return cur.rowcount > 0

    # employees

    def list_eligible_employees(self, *, period_end: Optional[date] = None) -> Sequence[EligibleEmployee]:
        where = "e.status='ACTIVE'"
        params: tuple = ()
        if period_end is not None:
            where += " AND (COALESCE(e.hire_date, ea.start_date) IS NULL OR COALESCE(e.hire_date, ea.start_date) <= %s)"
            params = (period_end,)

        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT e.employee_id, CONCAT(e.first_name, ' ', e.last_name) AS employee_name,
                       ea.assignment_id, ea.start_salary, d.name AS department_name, p.title AS position_title,
                       e.hire_date, ea.start_date AS assignment_start_date
                FROM employee e
                INNER JOIN employment_assignment ea ON e.employee_id = ea.employee_id AND ea.status = 'ACTIVE'
                LEFT JOIN department d ON ea.department_id = d.department_id
                LEFT JOIN `position` p ON ea.position_id = p.position_id
                WHERE {where}
                ORDER BY e.last_name, e.first_name
                """,
                params,
            )
            return [
                EligibleEmployee(
                    employee_id=int(r["employee_id"]),
                    employee_name=r["employee_name"],
                    assignment_id=int(r["assignment_id"]),
                    start_salary=_money(r.get("start_salary")),
                    department_name=r.get("department_name"),
                    position_title=r.get("position_title"),
                    hire_date=r.get("hire_date"),
                    assignment_start_date=r.get("assignment_start_date"),
                )
                for r in fetchall(cur)
            ]

    def get_assignment(self, assignment_id: int) -> Optional[EmploymentAssignment]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT assignment_id, employee_id, department_id, position_id, start_date,
                       start_salary, reference_salary, status
                FROM employment_assignment
                WHERE assignment_id=%s
                """,
                (int(assignment_id),),
            )
            r = fetchone(cur)
            return assignment_from_row(r) if r else None

    # entries

    def get_entry(self, payroll_entry_id: int) -> Optional[PayrollEntry]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {_ENTRY_COLUMNS} FROM payroll_entry pe WHERE pe.payroll_entry_id=%s", (int(payroll_entry_id),))
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def find_entry(self, payroll_run_id: int, assignment_id: int) -> Optional[PayrollEntry]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM payroll_entry pe
                WHERE pe.payroll_run_id=%s AND pe.assignment_id=%s
                ORDER BY pe.payroll_entry_id DESC
                LIMIT 1
                """,
                (int(payroll_run_id), int(assignment_id)),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def find_latest_entry(self, assignment_id: int) -> Optional[PayrollEntry]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM payroll_entry pe
                INNER JOIN payroll_run pr ON pe.payroll_run_id = pr.payroll_run_id
                WHERE pe.assignment_id=%s AND pr.status<>'CANCELLED'
                ORDER BY pr.period_start DESC, pe.payroll_entry_id DESC
                LIMIT 1
                """,
                (int(assignment_id),),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def list_entries_for_run(self, payroll_run_id: int) -> Sequence[PayrollEntry]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_ENTRY_COLUMNS} FROM payroll_entry pe WHERE pe.payroll_run_id=%s ORDER BY pe.payroll_entry_id",
                (int(payroll_run_id),),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def create_entry(
        self,
        *,
        payroll_run_id: int,
        assignment_id: int,
        gross_salary: Decimal,
        bonus_amount: Decimal,
        net_salary: Decimal,
        hour_variance: Optional[int],
        hour_variance_override: bool,
        remarks: Optional[str] = None,
    ) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO payroll_entry(payroll_run_id, assignment_id, gross_salary, bonus_amount, net_salary,
                                          hour_variance, hour_variance_override, remarks)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(payroll_run_id),
                    int(assignment_id),
                    gross_salary,
                    bonus_amount,
                    net_salary,
                    hour_variance,
                    1 if hour_variance_override else 0,
                    remarks,
                ),
            )
            return int(cur.lastrowid)

    def update_entry(
        self,
        payroll_entry_id: int,
        *,
        payroll_run_id: int,
        gross_salary: Decimal,
        bonus_amount: Decimal,
        net_salary: Decimal,
        hour_variance: Optional[int],
        hour_variance_override: bool,
        remarks: Optional[str] = None,
    ) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE payroll_entry
                SET payroll_run_id=%s, gross_salary=%s, bonus_amount=%s, net_salary=%s,
                    hour_variance=%s, hour_variance_override=%s, remarks=%s
                WHERE payroll_entry_id=%s
                """,
                (
                    int(payroll_run_id),
                    gross_salary,
                    bonus_amount,
                    net_salary,
                    hour_variance,
                    1 if hour_variance_override else 0,
                    remarks,
                    int(payroll_entry_id),
                ),
            )
            return cur.rowcount > 0

    def reparent_entry(self, payroll_entry_id: int, payroll_run_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE payroll_entry SET payroll_run_id=%s WHERE payroll_entry_id=%s",
                (int(payroll_run_id), int(payroll_entry_id)),
            )
            return cur.rowcount > 0

    # entry children

    def list_deductions(self, payroll_entry_id: int) -> Sequence[PayrollDeduction]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT pd.payroll_deduction_id, pd.deduction_type_id, pd.amount, pd.effective_date, pd.reason,
                       dt.name AS type_name
                FROM payroll_deduction pd
                LEFT JOIN deduction_type dt ON pd.deduction_type_id = dt.deduction_type_id
                WHERE pd.payroll_entry_id=%s
                ORDER BY pd.payroll_deduction_id
                """,
                (int(payroll_entry_id),),
            )
            return [
                PayrollDeduction(
                    payroll_deduction_id=int(r["payroll_deduction_id"]),
                    deduction_type_id=int(r["deduction_type_id"]),
                    amount=_money(r.get("amount")),
                    effective_date=r.get("effective_date"),
                    reason=r.get("reason"),
                    type_name=r.get("type_name"),
                )
                for r in fetchall(cur)
            ]

    def replace_deductions(self, payroll_entry_id: int, deductions: Sequence[PayrollDeduction]) -> None:
        with self._cursor() as cur:
            cur.execute("DELETE FROM payroll_deduction WHERE payroll_entry_id=%s", (int(payroll_entry_id),))
            for d in deductions:
                cur.execute(
                    """
                    INSERT INTO payroll_deduction(payroll_entry_id, deduction_type_id, amount, effective_date, reason)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(payroll_entry_id), int(d.deduction_type_id), d.amount, d.effective_date, d.reason),
                )

    def list_bonuses(self, payroll_entry_id: int) -> Sequence[PayrollBonus]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT pb.payroll_bonus_id, pb.bonus_type_id, pb.amount, pb.reason, bt.name AS type_name
                FROM payroll_bonus pb
                LEFT JOIN bonus_type bt ON pb.bonus_type_id = bt.bonus_type_id
                WHERE pb.payroll_entry_id=%s
                ORDER BY pb.payroll_bonus_id
                """,
                (int(payroll_entry_id),),
            )
            return [
                PayrollBonus(
                    payroll_bonus_id=int(r["payroll_bonus_id"]),
                    bonus_type_id=int(r["bonus_type_id"]),
                    amount=_money(r.get("amount")),
                    reason=r.get("reason"),
                    type_name=r.get("type_name"),
                )
                for r in fetchall(cur)
            ]

    def replace_bonuses(self, payroll_entry_id: int, bonuses: Sequence[PayrollBonus]) -> None:
        with self._cursor() as cur:
            cur.execute("DELETE FROM payroll_bonus WHERE payroll_entry_id=%s", (int(payroll_entry_id),))
            for b in bonuses:
                cur.execute(
                    "INSERT INTO payroll_bonus(payroll_entry_id, bonus_type_id, amount, reason) VALUES(%s,%s,%s,%s)",
                    (int(payroll_entry_id), int(b.bonus_type_id), b.amount, b.reason),
                )

    # lookups

    def list_deduction_types(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute("SELECT deduction_type_id, name, description FROM deduction_type ORDER BY name")
            return fetchall(cur)

    def list_bonus_types(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute("SELECT bonus_type_id, name, description FROM bonus_type ORDER BY name")
            return fetchall(cur)
