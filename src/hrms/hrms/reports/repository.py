from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol, Sequence


class ReportRepository(Protocol):
    """Read-only aggregates for the dashboard and the reports screen."""

    def count_active_employees(self) -> int:
        raise NotImplementedError

    def count_departments(self) -> int:
        raise NotImplementedError

    def count_pending_leave(self) -> int:
        raise NotImplementedError

    def finalized_payroll_total(self, year: int, month: int) -> Decimal:
        raise NotImplementedError

    def finalized_payroll_trend(self, since: date) -> Sequence[dict]:
        """{year, month, total} per month with period_start >= since, oldest first."""

        raise NotImplementedError

    def department_staff(self) -> Sequence[dict]:
        raise NotImplementedError

    def finalized_payroll_rows(self, *, limit: int) -> Sequence[dict]:
        raise NotImplementedError
