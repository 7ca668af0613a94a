from __future__ import annotations

from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_iso, today_local
from ..common.serialization import to_json_row, to_number
from ..core.constants import DEFAULT_PAYROLL_REPORT_LIMIT, PAYROLL_TREND_MONTHS
from ..payroll.calculator.base import WorkedMinutesRule
from ..payroll.calculator.standard_calculator import StandardWorkedMinutesRule
from .repository import ReportRepository


def months_back(today: date, months: int) -> date:
    """First day of the month `months` before today's month."""
    index = today.year * 12 + (today.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


class ReportService:
    def __init__(
        self,
        reports: ReportRepository,
        attendance: AttendanceRepository,
        *,
        rule: Optional[WorkedMinutesRule] = None,
    ):
        self._reports = reports
        self._attendance = attendance
        self._rule = rule or StandardWorkedMinutesRule()

    # dashboard

    def dashboard_stats(self) -> dict:
        today = today_local()
        trend = self._reports.finalized_payroll_trend(months_back(today, PAYROLL_TREND_MONTHS))
        return {
            "activeEmployees": self._reports.count_active_employees(),
            "totalDepts": self._reports.count_departments(),
            "activeLeaveCount": self._reports.count_pending_leave(),
            "totalPayroll": to_number(self._reports.finalized_payroll_total(today.year, today.month)),
            "payrollTrends": [to_json_row(r) for r in trend],
        }

    def dashboard_departments(self) -> list[dict]:
        return [{"name": r["name"], "staff": int(r["staff_count"] or 0)} for r in self._reports.department_staff()]

    # reports

    def attendance_report(self) -> dict:
        rows = []
        for r in self._attendance.list_records():
            minutes = self._rule.worked_minutes(r)
            rows.append(
                {
                    "employee_id": r.employee_id,
                    "name": r.employee_name,
                    "date": format_iso(r.attendance_date),
                    "status": r.mark.value,
                    "hours": minutes // 60,
                    "year": r.attendance_date.year,
                    "month": r.attendance_date.month,
                    "day": r.attendance_date.day,
                }
            )
        return {"attendanceData": rows, "totalEmployees": self._reports.count_active_employees()}

    def payroll_report(self, limit: int = DEFAULT_PAYROLL_REPORT_LIMIT) -> list[dict]:
        return [to_json_row(r) for r in self._reports.finalized_payroll_rows(limit=limit)]

    def department_report(self) -> list[dict]:
        return [
            {"name": r["name"], "staff_count": int(r["staff_count"] or 0), "budget": to_number(r.get("budget"))}
            for r in self._reports.department_staff()
        ]
