from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hrms.hrms.core.enums import RunKind, RunStatus
from src.hrms.hrms.core.exceptions import NotFoundError, ValidationError
from src.hrms.hrms.payroll import service as payroll_service_module
from src.hrms.hrms.payroll.composer import PayrollEntryComposer
from src.hrms.hrms.payroll.model import PayrollRun
from src.hrms.hrms.payroll.service import PayrollService, pick_individual_run

TODAY = date(2025, 12, 1)


@pytest.fixture
def svc(payroll_repo, calculator, monkeypatch):
    monkeypatch.setattr(payroll_service_module, "today_local", lambda: TODAY)
    payroll_repo.add_employee(1, 11, "3000")
    payroll_repo.add_employee(2, 12, "1600")
    return PayrollService(payroll_repo, PayrollEntryComposer(calculator))


def _rows_by_employee(rows):
    return {r["employee_id"]: r for r in rows}


def test_bulk_save_creates_draft_main_run(svc, payroll_repo):
    result = svc.bulk_update_entries(
        11, 2025, [{"assignment_id": 11, "gross_salary": 3000, "deductions": [{"deduction_type_id": 1, "amount": 200}]}]
    )

    run = payroll_repo.get_run(result["payroll_run_id"])
    assert run.run_kind == RunKind.MAIN
    assert run.status == RunStatus.DRAFT
    assert run.pay_date == date(2025, 11, 30)
    entry = payroll_repo.find_entry(run.payroll_run_id, 11)
    assert entry.net_salary == Decimal("2800.00")
    assert entry.hour_variance == 0 and not entry.hour_variance_override
    deductions = payroll_repo.list_deductions(entry.payroll_entry_id)
    assert [d.amount for d in deductions] == [Decimal("200")]
    assert deductions[0].effective_date == TODAY


def test_manual_variance_is_kept_on_later_saves(svc, payroll_repo, calculator):
    payload = {
        "assignment_id": 11,
        "gross_salary": 3000,
        "net_salary": 9999,
        "hour_variance": "-16",
        "deductions": [{"deduction_type_id": 1, "amount": 200}],
    }
    run_id = svc.bulk_update_entries(9, 2025, [payload])["payroll_run_id"]
    entry = payroll_repo.find_entry(run_id, 11)
    assert entry.hour_variance == -16 and entry.hour_variance_override
    assert entry.net_salary == Decimal("2527.27")

    calculator.variance = -40
    svc.bulk_update_entries(
        9, 2025, [{"assignment_id": 11, "gross_salary": 3000, "deductions": [{"deduction_type_id": 1, "amount": 200}]}]
    )

    entry = payroll_repo.find_entry(run_id, 11)
    assert entry.hour_variance == -16 and entry.hour_variance_override
    assert entry.net_salary == Decimal("2527.27")
    row = _rows_by_employee(svc.get_employees_for_payroll(9, 2025))[1]
    assert row["hour_variance"] == -16
    assert row["net_salary"] == 2527.27
    assert row["hour_variance_deduction"] == 272.73


def test_client_net_is_honoured_and_clamped(svc, payroll_repo):
    run_id = svc.bulk_update_entries(
        11,
        2025,
        [
            {"assignment_id": 11, "gross_salary": 3000, "net_salary": 2900},
            {"assignment_id": 12, "gross_salary": 1600, "net_salary": -5},
        ],
    )["payroll_run_id"]

    assert payroll_repo.find_entry(run_id, 11).net_salary == Decimal("2900.00")
    assert payroll_repo.find_entry(run_id, 12).net_salary == Decimal("0.00")


def test_unknown_assignment_rolls_back_everything(svc, payroll_repo):
    with pytest.raises(ValidationError):
        svc.bulk_update_entries(11, 2025, [{"assignment_id": 11, "gross_salary": 3000}, {"assignment_id": 999}])

    assert payroll_repo.runs == {}
    assert payroll_repo.entries == {}


@pytest.mark.parametrize("month", [0, 13, "x"])
def test_bulk_save_rejects_bad_month(svc, month):
    with pytest.raises(ValidationError):
        svc.bulk_update_entries(month, 2025, [])


def test_bonuses_replaced_only_when_sent(svc, payroll_repo):
    base = {"assignment_id": 11, "gross_salary": 3000}
    run_id = svc.bulk_update_entries(11, 2025, [{**base, "bonuses": [{"bonus_type_id": 1, "amount": 50}]}])[
        "payroll_run_id"
    ]
    entry_id = payroll_repo.find_entry(run_id, 11).payroll_entry_id

    svc.bulk_update_entries(11, 2025, [base])
    assert len(payroll_repo.list_bonuses(entry_id)) == 1

    svc.bulk_update_entries(11, 2025, [{**base, "bonuses": []}])
    assert payroll_repo.list_bonuses(entry_id) == []


def test_individual_status_wins_regardless_of_order(svc):
    svc.pay_individual(11, 2025, 11, 1)
    svc.bulk_update_entries(11, 2025, [{"assignment_id": 11, "gross_salary": 3000}, {"assignment_id": 12}])

    rows = _rows_by_employee(svc.get_employees_for_payroll(11, 2025))

    assert rows[1]["run_status"] == "PAID"
    assert rows[1]["pay_date"] == TODAY.isoformat()
    assert rows[2]["run_status"] == "DRAFT"
    assert rows[2]["gross_salary"] == 1600.0


def test_pay_individual_clones_main_entry(svc, payroll_repo):
    main_run_id = svc.bulk_update_entries(
        11, 2025, [{"assignment_id": 11, "gross_salary": 3000, "deductions": [{"deduction_type_id": 1, "amount": 200}]}]
    )["payroll_run_id"]

    result = svc.pay_individual("11", "2025", "11", "1")

    assert result["status"] == "PAID"
    assert result["pay_date"] == TODAY.isoformat()
    individual = payroll_repo.get_run(result["payroll_run_id"])
    assert individual.run_kind == RunKind.INDIVIDUAL
    assert individual.employee_id == 1
    assert individual.notes == "individual_employee:1"
    clone = payroll_repo.find_entry(individual.payroll_run_id, 11)
    assert clone.net_salary == Decimal("2800.00")
    assert len(payroll_repo.list_deductions(clone.payroll_entry_id)) == 1
    assert payroll_repo.find_entry(main_run_id, 11) is not None


def test_pay_individual_takes_over_main_entry_for_existing_run(svc, payroll_repo):
    main_run_id = svc.bulk_update_entries(11, 2025, [{"assignment_id": 11, "gross_salary": 3000}])["payroll_run_id"]
    run_id = svc.create_run(
        {"period_start": "2025-11-01", "period_end": "2025-11-30", "run_kind": "individual", "employee_id": 1}
    )

    assert svc.pay_individual(11, 2025, 11, 1)["payroll_run_id"] == run_id

    assert payroll_repo.get_run(run_id).status == RunStatus.PAID
    assert payroll_repo.find_entry(main_run_id, 11) is None
    assert payroll_repo.find_entry(run_id, 11) is not None


def test_pay_individual_requires_all_fields(svc):
    with pytest.raises(ValidationError, match="Month, year, assignment_id, and employee_id are required"):
        svc.pay_individual(11, 2025, None, 1)


def test_pay_individual_rejects_foreign_assignment(svc):
    with pytest.raises(ValidationError):
        svc.pay_individual(11, 2025, 12, 1)


def test_pay_all_is_idempotent(svc, payroll_repo):
    first = svc.pay_all_unpaid(11, 2025)
    second = svc.pay_all_unpaid(11, 2025)

    assert (first["paid_count"], first["skipped_count"], first["verified_paid_count"]) == (2, 0, 2)
    assert (second["paid_count"], second["skipped_count"], second["verified_paid_count"]) == (0, 2, 2)
    assert len(payroll_repo.runs_of(RunKind.INDIVIDUAL)) == 2


def test_paid_net_survives_attendance_changes(svc, calculator):
    svc.pay_all_unpaid(11, 2025)
    before = _rows_by_employee(svc.get_employees_for_payroll(11, 2025))[1]

    calculator.variance = -80
    after = _rows_by_employee(svc.get_employees_for_payroll(11, 2025))[1]

    assert before["net_salary"] == after["net_salary"] == 3000.0
    assert after["hour_variance"] == 0
    assert after["hour_variance_deduction"] == 0
    assert after["gross_salary"] + after["bonus_amount"] - after["deductions_total"] == after["net_salary"]


def test_paid_row_shows_the_variance_it_was_paid_with(svc, payroll_repo, calculator):
    calculator.variance = -16
    svc.bulk_update_entries(9, 2025, [{"assignment_id": 11, "gross_salary": 3000}])
    svc.pay_individual(9, 2025, 11, 1)

    calculator.variance = 40
    row = _rows_by_employee(svc.get_employees_for_payroll(9, 2025))[1]

    assert row["run_status"] == "PAID"
    assert row["hour_variance"] == -16
    assert row["hour_variance_deduction"] == 272.73
    assert row["net_salary"] == 2727.27


def test_resubmitting_a_paid_entry_leaves_it_untouched(svc, payroll_repo):
    main_run_id = svc.bulk_update_entries(11, 2025, [{"assignment_id": 11, "gross_salary": 3000}])["payroll_run_id"]
    paid_run_id = svc.pay_individual(11, 2025, 11, 1)["payroll_run_id"]
    row = _rows_by_employee(svc.get_employees_for_payroll(11, 2025))[1]
    paid_entry_id = row["payroll_entry_id"]

    svc.bulk_update_entries(
        11,
        2025,
        [
            {
                "assignment_id": 11,
                "payroll_entry_id": paid_entry_id,
                "gross_salary": 3000,
                "deductions": [{"deduction_type_id": 1, "amount": 1000}],
            }
        ],
    )

    paid_entry = payroll_repo.get_entry(paid_entry_id)
    assert paid_entry.payroll_run_id == paid_run_id
    assert paid_entry.net_salary == Decimal("3000.00")
    assert payroll_repo.list_deductions(paid_entry_id) == []
    assert payroll_repo.find_entry(main_run_id, 11).net_salary == Decimal("2000.00")
    row = _rows_by_employee(svc.get_employees_for_payroll(11, 2025))[1]
    assert (row["run_status"], row["net_salary"]) == ("PAID", 3000.0)


def test_entry_id_of_another_assignment_is_ignored(svc, payroll_repo):
    run_id = svc.bulk_update_entries(
        11, 2025, [{"assignment_id": 11, "gross_salary": 3000}, {"assignment_id": 12, "gross_salary": 1600}]
    )["payroll_run_id"]
    other_id = payroll_repo.find_entry(run_id, 11).payroll_entry_id

    svc.bulk_update_entries(11, 2025, [{"assignment_id": 12, "payroll_entry_id": other_id, "gross_salary": 500}])

    assert payroll_repo.get_entry(other_id).gross_salary == Decimal("3000.00")
    assert payroll_repo.find_entry(run_id, 12).gross_salary == Decimal("500.00")


@pytest.mark.parametrize(
    "entries",
    [
        [5],
        [{"assignment_id": 11, "deductions": [5]}],
        [{"assignment_id": 11, "deductions": {"amount": 5}}],
        [{"assignment_id": 11, "bonuses": ["x"]}],
    ],
)
def test_malformed_entries_are_validation_errors(svc, payroll_repo, entries):
    with pytest.raises(ValidationError):
        svc.bulk_update_entries(11, 2025, entries)

    assert payroll_repo.runs == {}


def test_late_hires_are_not_eligible(svc, payroll_repo):
    payroll_repo.add_employee(3, 13, "2000", hire_date=date(2025, 12, 5))

    assert 3 not in _rows_by_employee(svc.get_employees_for_payroll(11, 2025))
    assert 3 in _rows_by_employee(svc.get_employees_for_payroll(12, 2025))


def test_list_without_period_uses_base_salary(svc):
    rows = _rows_by_employee(svc.get_employees_for_payroll())

    assert rows[2]["gross_salary"] == 1600.0
    assert rows[2]["payroll_entry_id"] is None
    assert rows[2]["run_status"] == "DRAFT"


def test_run_status_transitions(svc, payroll_repo):
    run_id = svc.bulk_update_entries(11, 2025, [{"assignment_id": 11}])["payroll_run_id"]

    approved = svc.update_run_status(run_id)
    assert approved["status"] == "PAID"
    assert payroll_repo.get_run(run_id).pay_date == TODAY

    svc.update_run_status(run_id, "cancelled")
    with pytest.raises(ValidationError):
        svc.update_run_status(run_id, "PAID")
    with pytest.raises(ValidationError):
        svc.update_run_status(run_id, "BOGUS")
    with pytest.raises(NotFoundError):
        svc.update_run_status(404, "PAID")


def test_cancelled_main_run_is_ignored(svc, payroll_repo):
    run_id = svc.bulk_update_entries(11, 2025, [{"assignment_id": 11}])["payroll_run_id"]
    svc.update_run_status(run_id, "CANCELLED")

    new_run_id = svc.bulk_update_entries(11, 2025, [{"assignment_id": 11}])["payroll_run_id"]

    assert new_run_id != run_id


def test_get_entry_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.get_entry(123)


def test_pick_individual_run_prefers_paid():
    def run(run_id, status):
        return PayrollRun(run_id, date(2025, 11, 1), date(2025, 11, 30), None, status, RunKind.INDIVIDUAL, 1)

    assert pick_individual_run([run(5, RunStatus.DRAFT), run(3, RunStatus.PAID)]).payroll_run_id == 3
    assert pick_individual_run([run(5, RunStatus.DRAFT), run(7, RunStatus.DRAFT)]).payroll_run_id == 7
    assert pick_individual_run([]) is None
