from __future__ import annotations

from decimal import Decimal

import pytest

from src.hrms.hrms.core.enums import RunStatus
from src.hrms.hrms.payroll.composer import PayrollEntryComposer


def test_hour_variance_deduction_example(calculator):
    composer = PayrollEntryComposer(calculator)

    composed = composer.compose(
        employee_id=1,
        year=2025,
        month=9,
        gross_salary=Decimal("3000"),
        deductions=[Decimal("200")],
        hour_variance=-16,
        hour_variance_override=True,
    )

    assert composed.hour_variance_deduction == Decimal("272.73")
    assert composed.deductions_total == Decimal("472.73")
    assert composed.net_salary == Decimal("2527.27")
    assert calculator.calls == []


@pytest.mark.parametrize(
    "gross,bonus,deductions,variance",
    [("100", "0", ["500"], 0), ("0", "0", [], -40), ("1000", "50", ["400", "400"], -100), ("0", "0", ["1"], 5)],
)
def test_net_is_never_negative(calculator, gross, bonus, deductions, variance):
    composed = PayrollEntryComposer(calculator).compose(
        employee_id=1,
        year=2025,
        month=11,
        gross_salary=Decimal(gross),
        bonus_amount=Decimal(bonus),
        deductions=[Decimal(d) for d in deductions],
        hour_variance=variance,
    )

    assert composed.net_salary >= 0


def test_positive_variance_has_no_deduction(calculator):
    composed = PayrollEntryComposer(calculator).compose(
        employee_id=1, year=2025, month=11, gross_salary=Decimal("3000"), bonus_amount=Decimal("100"), hour_variance=12
    )

    assert composed.hour_variance_deduction == 0
    assert composed.net_salary == Decimal("3100.00")


def test_variance_is_recomputed_when_not_given(calculator):
    calculator.variance = -8
    composed = PayrollEntryComposer(calculator).compose(
        employee_id=7, year=2025, month=11, gross_salary=Decimal("1600")
    )

    assert calculator.calls == [(7, 11, 2025)]
    assert composed.hour_variance == -8
    # 1600 / 160h = 10 per hour
    assert composed.hour_variance_deduction == Decimal("80.00")
    assert composed.net_salary == Decimal("1520.00")


def test_finalized_run_keeps_stored_net(calculator):
    calculator.variance = -100
    composed = PayrollEntryComposer(calculator).compose(
        employee_id=1,
        year=2025,
        month=11,
        gross_salary=Decimal("3000"),
        run_status=RunStatus.PAID,
        stored_net=Decimal("2999.99"),
    )

    assert composed.net_salary == Decimal("2999.99")
    assert composed.hour_variance == -100


def test_override_suppresses_recalculation(calculator):
    composer = PayrollEntryComposer(calculator)

    assert composer.resolve_hour_variance(1, year=2025, month=11, stored=-3, override=True) == -3
    assert calculator.calls == []
    assert composer.resolve_hour_variance(1, year=2025, month=11, stored=-3, override=False) == 0
