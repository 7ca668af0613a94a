from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ..common.datetime_utils import expected_hours_in_month
from ..common.money import ZERO, quantize_money
from ..common.serialization import to_number
from ..core.enums import RunStatus
from ..logging_config import get_logger
from .calculator.hour_variance import HourVarianceCalculator

logger = get_logger(__name__)


@dataclass(frozen=True)
class ComposedEntry:
    gross_salary: Decimal
    bonus_amount: Decimal
    deductions_total: Decimal
    hour_variance: int
    hour_variance_override: bool
    hour_variance_deduction: Decimal
    net_salary: Decimal

    def to_dict(self) -> dict:
        return {
            "gross_salary": to_number(self.gross_salary),
            "bonus_amount": to_number(self.bonus_amount),
            "deductions_total": to_number(self.deductions_total),
            "hour_variance": self.hour_variance,
            "hour_variance_override": self.hour_variance_override,
            "hour_variance_deduction": to_number(self.hour_variance_deduction),
            "net_salary": to_number(self.net_salary),
        }


def hour_variance_deduction(hour_variance: int, gross_salary: Decimal, *, year: int, month: int) -> Decimal:
    """Pay for the missing hours: |variance| x gross / expected hours (unrounded)."""
    if hour_variance >= 0 or gross_salary <= 0:
        return ZERO
    expected = expected_hours_in_month(year, month)
    if expected <= 0:
        return ZERO
    return Decimal(abs(hour_variance)) * gross_salary / Decimal(expected)


class PayrollEntryComposer:
    """Builds the figures shown for one employee in one period.

    Finalized (PAID/APPROVED/PROCESSED) entries keep their stored net so later
    attendance edits never change what was paid.
    """

    def __init__(self, calculator: HourVarianceCalculator):
        self._calculator = calculator

    def resolve_hour_variance(
        self,
        employee_id: int,
        *,
        year: int,
        month: int,
        stored: Optional[int] = None,
        override: bool = False,
    ) -> int:
        if override and stored is not None:
            return int(stored)
        return self._calculator.calculate(employee_id, month, year)

    def compose(
        self,
        *,
        employee_id: int,
        year: int,
        month: int,
        gross_salary: Decimal,
        bonus_amount: Decimal = ZERO,
        deductions: Iterable[Decimal] = (),
        hour_variance: Optional[int] = None,
        hour_variance_override: bool = False,
        run_status: Optional[RunStatus] = None,
        stored_net: Optional[Decimal] = None,
    ) -> ComposedEntry:
        if hour_variance is None:
            hour_variance = self._calculator.calculate(employee_id, month, year)

        gross = gross_salary if gross_salary is not None else ZERO
        bonus = bonus_amount if bonus_amount is not None else ZERO
        itemized = sum((d for d in deductions if d is not None), ZERO)
        variance_deduction = hour_variance_deduction(hour_variance, gross, year=year, month=month)
        total = itemized + variance_deduction

        net = max(ZERO, gross + bonus - total)
        if run_status is not None and run_status.is_finalized and stored_net is not None:
            net = stored_net

        composed = ComposedEntry(
            gross_salary=quantize_money(gross),
            bonus_amount=quantize_money(bonus),
            deductions_total=quantize_money(total),
            hour_variance=int(hour_variance),
            hour_variance_override=bool(hour_variance_override),
            hour_variance_deduction=quantize_money(variance_deduction),
            net_salary=quantize_money(net),
        )
        logger.debug("Composed entry employee=%s %s-%02d: %s", employee_id, year, month, composed)
        return composed
