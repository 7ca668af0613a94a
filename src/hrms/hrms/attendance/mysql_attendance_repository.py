from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..core.enums import AttendanceMark
from ..database.mysql_base import MySQLRepository, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT ar.attendance_id, ar.employee_id, ar.attendance_date, ar.check_in, ar.check_out, ar.mark, ar.notes,
           CONCAT(e.first_name, ' ', e.last_name) AS employee_name
    FROM attendance_record ar
    INNER JOIN employee e ON ar.employee_id = e.employee_id
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        attendance_date=r["attendance_date"],
        check_in=normalize_mysql_time(r.get("check_in")),
        check_out=normalize_mysql_time(r.get("check_out")),
        mark=AttendanceMark(str(r["mark"]).upper()),
        notes=r.get("notes"),
        employee_name=r.get("employee_name"),
    )


class MySQLAttendanceRepository(MySQLRepository, AttendanceRepository):
    def list_records(
        self,
        *,
        attendance_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if month is not None and year is not None:
            clauses.append("MONTH(ar.attendance_date)=%s AND YEAR(ar.attendance_date)=%s")
            params.extend([int(month), int(year)])
        elif attendance_date is not None:
            clauses.append("ar.attendance_date=%s")
            params.append(attendance_date)
        if employee_id is not None:
            clauses.append("ar.employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)
        with self._cursor() as cur:
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY ar.attendance_date DESC, e.last_name, e.first_name",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_employee_month(self, employee_id: int, *, year: int, month: int) -> Sequence[AttendanceRecord]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                {_SELECT}
                WHERE ar.employee_id=%s AND YEAR(ar.attendance_date)=%s AND MONTH(ar.attendance_date)=%s
                ORDER BY ar.attendance_date
                """,
                (int(employee_id), int(year), int(month)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with self._cursor() as cur:
            cur.execute(f"{_SELECT} WHERE ar.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with self._cursor() as cur:
            cur.execute(
                f"{_SELECT} WHERE ar.employee_id=%s AND ar.attendance_date=%s",
                (int(employee_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def resolve_employee_id(self, identifier: str) -> Optional[int]:
        text = str(identifier).strip()
        if not text:
            return None
        with self._cursor() as cur:
            if text.isdigit():
                cur.execute("SELECT employee_id FROM employee WHERE employee_id=%s", (int(text),))
                r = fetchone(cur)
                if r:
                    return int(r["employee_id"])
            cur.execute("SELECT employee_id FROM employee WHERE employee_code=%s", (text,))
            r = fetchone(cur)
            return int(r["employee_id"]) if r else None

    def insert_record(
        self,
        *,
        employee_id: int,
        attendance_date: date,
        check_in: Optional[time],
        check_out: Optional[time],
        mark: AttendanceMark,
        notes: Optional[str] = None,
    ) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO attendance_record(employee_id, attendance_date, check_in, check_out, mark, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), attendance_date, check_in, check_out, mark.value, notes),
            )
            return int(cur.lastrowid)

    def upsert_record(
        self,
        *,
        employee_id: int,
        attendance_date: date,
        check_in: Optional[time],
        check_out: Optional[time],
        mark: AttendanceMark,
        notes: Optional[str] = None,
    ) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO attendance_record(employee_id, attendance_date, check_in, check_out, mark, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_id=LAST_INSERT_ID(attendance_id),
                    check_in=VALUES(check_in), check_out=VALUES(check_out),
                    mark=VALUES(mark), notes=VALUES(notes)
                """,
                (int(employee_id), attendance_date, check_in, check_out, mark.value, notes),
            )
            return int(cur.lastrowid)

    def update_record(
        self,
        *,
        attendance_id: int,
        check_in: Optional[time],
        check_out: Optional[time],
        mark: AttendanceMark,
        notes: Optional[str] = None,
    ) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE attendance_record
                SET check_in=%s, check_out=%s, mark=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (check_in, check_out, mark.value, notes, int(attendance_id)),
            )
            return cur.rowcount > 0

    def delete_record(self, attendance_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM attendance_record WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0
