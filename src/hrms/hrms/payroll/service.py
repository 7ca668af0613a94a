from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import format_iso, month_bounds, parse_iso_date, today_local
from ..common.money import ZERO, quantize_money, round_half_up
from ..common.serialization import to_json_row
from ..common.validators import optional_int, require_fields, require_int, require_month, require_year, to_decimal
from ..core.constants import DEFAULT_CREATED_BY_USER_ID, INDIVIDUAL_RUN_TAG
from ..core.enums import RunKind, RunStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import EmploymentAssignment
from ..logging_config import get_logger
from .composer import PayrollEntryComposer
from .model import EligibleEmployee, EntryInput, PayrollBonus, PayrollDeduction, PayrollEntry, PayrollRun
from .repository import PayrollRepository

logger = get_logger(__name__)


def pick_individual_run(runs: Iterable[PayrollRun]) -> Optional[PayrollRun]:
    """A PAID individual run wins, otherwise the newest one."""
    newest: Optional[PayrollRun] = None
    for run in runs:
        if run.status == RunStatus.PAID:
            return run
        if newest is None or run.payroll_run_id > newest.payroll_run_id:
            newest = run
    return newest


def _runs_by_employee(runs: Iterable[PayrollRun]) -> dict[int, list[PayrollRun]]:
    grouped: dict[int, list[PayrollRun]] = defaultdict(list)
    for run in runs:
        if run.employee_id is not None:
            grouped[run.employee_id].append(run)
    return grouped


def _parse_optional_date(value: Any, field_name: str) -> Optional[date]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def _objects(items: Any, field_name: str) -> list[Mapping[str, Any]]:
    if not isinstance(items, list):
        raise ValidationError(f"{field_name} must be a list")
    for item in items:
        if not isinstance(item, Mapping):
            raise ValidationError(f"Each item of {field_name} must be an object")
    return items


def _parse_deductions(items: Any) -> list[PayrollDeduction]:
    if items in (None, ""):
        return []
    today = today_local()
    return [
        PayrollDeduction(
            deduction_type_id=require_int(d.get("deduction_type_id"), "deduction_type_id"),
            amount=to_decimal(d.get("amount")),
            effective_date=_parse_optional_date(d.get("effective_date"), "effective_date") or today,
            reason=d.get("reason"),
        )
        for d in _objects(items, "deductions")
    ]


def _parse_bonuses(items: Any) -> list[PayrollBonus]:
    return [
        PayrollBonus(
            bonus_type_id=require_int(b.get("bonus_type_id"), "bonus_type_id"),
            amount=to_decimal(b.get("amount")),
            reason=b.get("reason"),
        )
        for b in _objects(items, "bonuses")
    ]


def parse_entry_input(data: Mapping[str, Any]) -> EntryInput:
    if not isinstance(data, Mapping):
        raise ValidationError("Each payroll entry must be an object")
    hour_variance = data.get("hour_variance")
    if hour_variance in (None, ""):
        hour_variance = None
    else:
        try:
            hour_variance = round_half_up(float(hour_variance))
        except (TypeError, ValueError):
            raise ValidationError("hour_variance must be a number")

    gross = data.get("gross_salary")
    net = data.get("net_salary")
    return EntryInput(
        assignment_id=require_int(data.get("assignment_id"), "assignment_id"),
        payroll_entry_id=optional_int(data.get("payroll_entry_id"), "payroll_entry_id"),
        gross_salary=to_decimal(gross) if gross not in (None, "") else None,
        bonus_amount=to_decimal(data.get("bonus_amount")),
        net_salary=to_decimal(net) if net not in (None, "") else None,
        hour_variance=hour_variance,
        remarks=data.get("remarks") or None,
        deductions=_parse_deductions(data.get("deductions")),
        bonuses=_parse_bonuses(data["bonuses"]) if "bonuses" in data and data["bonuses"] is not None else None,
    )


class PayrollService:
    """Payroll runs, entries and the per-period reconciliation view."""

    def __init__(self, payroll: PayrollRepository, composer: PayrollEntryComposer):
        self._payroll = payroll
        self._composer = composer

    # ------------------------------------------------------------------
    # period view
    # ------------------------------------------------------------------

    def get_employees_for_payroll(self, month: Any = None, year: Any = None) -> list[dict]:
        if month in (None, "") or year in (None, ""):
            return self._list_without_period()

        month = require_month(month)
        year = require_year(year)
        _, period_end = month_bounds(year, month)

        repo = self._payroll
        employees = repo.list_eligible_employees(period_end=period_end)
        main_run = repo.find_main_run(year, month)
        main_entries = (
            {e.assignment_id: e for e in repo.list_entries_for_run(main_run.payroll_run_id)} if main_run else {}
        )
        individual_runs = _runs_by_employee(repo.list_individual_runs(year, month))

        rows = [
            self._period_row(
                repo,
                emp,
                year=year,
                month=month,
                main_run=main_run,
                main_entry=main_entries.get(emp.assignment_id),
                individual_run=pick_individual_run(individual_runs.get(emp.employee_id, [])),
            )
            for emp in employees
        ]
        logger.info(
            "Payroll view %s-%02d: %s employees, main run %s",
            year,
            month,
            len(rows),
            main_run.payroll_run_id if main_run else None,
        )
        return rows

    def _period_row(
        self,
        repo: PayrollRepository,
        emp: EligibleEmployee,
        *,
        year: int,
        month: int,
        main_run: Optional[PayrollRun],
        main_entry: Optional[PayrollEntry],
        individual_run: Optional[PayrollRun],
    ) -> dict:
        run, entry = main_run, main_entry
        if individual_run is not None:
            run = individual_run
            individual_entry = repo.find_entry(individual_run.payroll_run_id, emp.assignment_id)
            if individual_entry is not None:
                entry = individual_entry

        status = run.status if run else RunStatus.DRAFT
        deductions = repo.list_deductions(entry.payroll_entry_id) if entry else []
        bonuses = repo.list_bonuses(entry.payroll_entry_id) if entry else []
        if entry is not None and status.is_finalized and entry.hour_variance is not None:
            # paid figures are shown as they were paid
            hour_variance = entry.hour_variance
        else:
            hour_variance = self._composer.resolve_hour_variance(
                emp.employee_id,
                year=year,
                month=month,
                stored=entry.hour_variance if entry else None,
                override=entry.hour_variance_override if entry else False,
            )
        composed = self._composer.compose(
            employee_id=emp.employee_id,
            year=year,
            month=month,
            gross_salary=entry.gross_salary if entry else emp.start_salary,
            bonus_amount=entry.bonus_amount if entry else ZERO,
            deductions=[d.amount for d in deductions],
            hour_variance=hour_variance,
            hour_variance_override=entry.hour_variance_override if entry else False,
            run_status=status,
            stored_net=entry.net_salary if entry else None,
        )
        return self._row(
            emp,
            composed=composed.to_dict(),
            entry=entry,
            run=run,
            status=status,
            deductions=deductions,
            bonuses=bonuses,
        )

    def _list_without_period(self) -> list[dict]:
        today = today_local()
        rows = []
        for emp in self._payroll.list_eligible_employees():
            latest = self._payroll.find_latest_entry(emp.assignment_id)
            composed = self._composer.compose(
                employee_id=emp.employee_id,
                year=today.year,
                month=today.month,
                gross_salary=emp.start_salary,
                hour_variance=latest.hour_variance if latest and latest.hour_variance is not None else 0,
                hour_variance_override=bool(latest and latest.hour_variance_override),
            )
            rows.append(
                self._row(emp, composed=composed.to_dict(), entry=None, run=None, status=RunStatus.DRAFT)
            )
        return rows

    @staticmethod
    def _row(
        emp: EligibleEmployee,
        *,
        composed: dict,
        entry: Optional[PayrollEntry],
        run: Optional[PayrollRun],
        status: RunStatus,
        deductions: Sequence[PayrollDeduction] = (),
        bonuses: Sequence[PayrollBonus] = (),
    ) -> dict:
        return {
            "employee_id": emp.employee_id,
            "employee_name": emp.employee_name,
            "assignment_id": emp.assignment_id,
            "department_name": emp.department_name,
            "position_title": emp.position_title,
            "hire_date": format_iso(emp.hire_date),
            "assignment_start_date": format_iso(emp.assignment_start_date),
            "payroll_entry_id": entry.payroll_entry_id if entry else None,
            "payroll_run_id": run.payroll_run_id if run else None,
            **composed,
            "remarks": entry.remarks if entry else None,
            "deductions": [d.to_dict() for d in deductions],
            "bonuses": [b.to_dict() for b in bonuses],
            "run_status": status.value,
            "pay_date": format_iso(run.pay_date) if run else None,
        }

    # ------------------------------------------------------------------
    # bulk save
    # ------------------------------------------------------------------

    def bulk_update_entries(
        self,
        month: Any,
        year: Any,
        entries: Any,
        created_by_user_id: Any = None,
    ) -> dict:
        month = require_month(month)
        year = require_year(year)
        if not isinstance(entries, list):
            raise ValidationError("entries must be a list")
        parsed = [parse_entry_input(e) for e in entries]
        created_by = optional_int(created_by_user_id, "created_by_user_id") or DEFAULT_CREATED_BY_USER_ID

        with self._payroll.transaction() as repo:
            run_id = self._ensure_main_run(repo, year=year, month=month, created_by_user_id=created_by)
            for item in parsed:
                self._save_entry(repo, run_id, item, year=year, month=month)

        logger.info("Saved %s payroll entries into run %s (%s-%02d)", len(parsed), run_id, year, month)
        return {
            "message": "Payroll entries updated successfully",
            "payroll_run_id": run_id,
            "updated_count": len(parsed),
        }

    def _ensure_main_run(self, repo: PayrollRepository, *, year: int, month: int, created_by_user_id: int) -> int:
        run = repo.find_main_run(year, month)
        if run is not None:
            return run.payroll_run_id

        period_start, period_end = month_bounds(year, month)
        run_id = repo.create_run(
            period_start=period_start,
            period_end=period_end,
            pay_date=period_end,
            status=RunStatus.DRAFT,
            run_kind=RunKind.MAIN,
            created_by_user_id=created_by_user_id,
        )
        logger.info("Created main payroll run %s for %s-%02d", run_id, year, month)
        return run_id

    @staticmethod
    def _editable_entry(repo: PayrollRepository, item: EntryInput) -> Optional[PayrollEntry]:
        """The entry named by the payload, unless it is another assignment's or already paid out."""
        entry = repo.get_entry(item.payroll_entry_id)
        if entry is None or entry.assignment_id != item.assignment_id:
            return None
        run = repo.get_run(entry.payroll_run_id)
        if run is not None and run.status.is_finalized:
            logger.info(
                "Entry %s belongs to %s run %s; saving into the main run instead",
                entry.payroll_entry_id,
                run.status.value,
                run.payroll_run_id,
            )
            return None
        return entry

    def _save_entry(self, repo: PayrollRepository, run_id: int, item: EntryInput, *, year: int, month: int) -> int:
        assignment = repo.get_assignment(item.assignment_id)
        if assignment is None:
            raise ValidationError(f"Assignment {item.assignment_id} not found")

        existing = self._editable_entry(repo, item) if item.payroll_entry_id else None
        if existing is None:
            existing = repo.find_entry(run_id, item.assignment_id)

        manual = item.hour_variance is not None
        if manual:
            hour_variance, override = item.hour_variance, True
        elif existing is not None and existing.hour_variance_override and existing.hour_variance is not None:
            hour_variance, override = existing.hour_variance, True
        else:
            hour_variance = self._composer.resolve_hour_variance(assignment.employee_id, year=year, month=month)
            override = False

        gross = item.gross_salary
        if gross is None:
            gross = existing.gross_salary if existing is not None else assignment.start_salary

        composed = self._composer.compose(
            employee_id=assignment.employee_id,
            year=year,
            month=month,
            gross_salary=gross,
            bonus_amount=item.bonus_amount,
            deductions=[d.amount for d in item.deductions],
            hour_variance=hour_variance,
            hour_variance_override=override,
        )
        if manual or item.net_salary is None:
            net = composed.net_salary
        else:
            net = quantize_money(max(ZERO, item.net_salary))

        values = dict(
            payroll_run_id=run_id,
            gross_salary=composed.gross_salary,
            bonus_amount=composed.bonus_amount,
            net_salary=net,
            hour_variance=hour_variance,
            hour_variance_override=override,
            remarks=item.remarks,
        )
        if existing is not None:
            entry_id = existing.payroll_entry_id
            repo.update_entry(entry_id, **values)
        else:
            entry_id = repo.create_entry(assignment_id=item.assignment_id, **values)

        repo.replace_deductions(entry_id, item.deductions)
        if item.bonuses is not None:
            repo.replace_bonuses(entry_id, item.bonuses)

        logger.debug(
            "Entry %s assignment=%s variance=%s override=%s net=%s",
            entry_id,
            item.assignment_id,
            hour_variance,
            override,
            net,
        )
        return entry_id

    # ------------------------------------------------------------------
    # paying
    # ------------------------------------------------------------------

    def pay_individual(self, month: Any, year: Any, assignment_id: Any, employee_id: Any) -> dict:
        require_fields(
            {"month": month, "year": year, "assignment_id": assignment_id, "employee_id": employee_id},
            "month",
            "year",
            "assignment_id",
            "employee_id",
            message="Month, year, assignment_id, and employee_id are required",
        )
        month = require_month(month)
        year = require_year(year)
        assignment_id = require_int(assignment_id, "assignment_id")
        employee_id = require_int(employee_id, "employee_id")
        pay_date = today_local()

        with self._payroll.transaction() as repo:
            run_id = self._pay_employee(
                repo,
                year=year,
                month=month,
                employee_id=employee_id,
                assignment_id=assignment_id,
                pay_date=pay_date,
            )

        logger.info("Paid employee %s for %s-%02d in run %s", employee_id, year, month, run_id)
        return {
            "message": "Employee marked as paid and saved successfully",
            "status": RunStatus.PAID.value,
            "pay_date": format_iso(pay_date),
            "payroll_run_id": run_id,
        }

    def pay_all_unpaid(self, month: Any, year: Any) -> dict:
        require_fields({"month": month, "year": year}, "month", "year", message="Month and year are required")
        month = require_month(month)
        year = require_year(year)
        _, period_end = month_bounds(year, month)
        pay_date = today_local()
        paid = skipped = 0

        with self._payroll.transaction() as repo:
            employees = repo.list_eligible_employees(period_end=period_end)
            runs = _runs_by_employee(repo.list_individual_runs(year, month))
            for emp in employees:
                current = pick_individual_run(runs.get(emp.employee_id, []))
                if current is not None and current.status == RunStatus.PAID:
                    skipped += 1
                    continue
                self._pay_employee(
                    repo,
                    year=year,
                    month=month,
                    employee_id=emp.employee_id,
                    assignment_id=emp.assignment_id,
                    pay_date=pay_date,
                )
                paid += 1

            runs = _runs_by_employee(repo.list_individual_runs(year, month))
            verified = 0
            for emp in employees:
                current = pick_individual_run(runs.get(emp.employee_id, []))
                if current is not None and current.status == RunStatus.PAID:
                    verified += 1

        logger.info(
            "Pay all %s-%02d: paid=%s skipped=%s verified=%s", year, month, paid, skipped, verified
        )
        return {
            "message": "All unpaid employees marked as paid successfully",
            "status": RunStatus.PAID.value,
            "pay_date": format_iso(pay_date),
            "paid_count": paid,
            "skipped_count": skipped,
            "verified_paid_count": verified,
        }

    def _pay_employee(
        self,
        repo: PayrollRepository,
        *,
        year: int,
        month: int,
        employee_id: int,
        assignment_id: int,
        pay_date: date,
    ) -> int:
        assignment = repo.get_assignment(assignment_id)
        if assignment is None:
            raise ValidationError(f"Assignment {assignment_id} not found")
        if assignment.employee_id != employee_id:
            raise ValidationError(f"Assignment {assignment_id} does not belong to employee {employee_id}")

        main_run = repo.find_main_run(year, month)
        main_entry = repo.find_entry(main_run.payroll_run_id, assignment_id) if main_run else None
        run = pick_individual_run(repo.list_individual_runs(year, month, employee_id=employee_id))

        if run is None:
            period_start, period_end = month_bounds(year, month)
            run_id = repo.create_run(
                period_start=period_start,
                period_end=period_end,
                pay_date=pay_date,
                status=RunStatus.PAID,
                run_kind=RunKind.INDIVIDUAL,
                employee_id=employee_id,
                notes=f"{INDIVIDUAL_RUN_TAG}{employee_id}",
                created_by_user_id=DEFAULT_CREATED_BY_USER_ID,
            )
            if main_entry is not None:
                self._clone_entry(repo, main_entry, run_id)
            else:
                self._synthesize_entry(repo, assignment, run_id, year=year, month=month)
            return run_id

        run_id = run.payroll_run_id
        repo.update_run_status(run_id, RunStatus.PAID, pay_date=pay_date)
        if repo.find_entry(run_id, assignment_id) is None:
            if main_entry is not None:
                repo.reparent_entry(main_entry.payroll_entry_id, run_id)
                logger.debug("Moved entry %s into individual run %s", main_entry.payroll_entry_id, run_id)
            else:
                self._synthesize_entry(repo, assignment, run_id, year=year, month=month)
        return run_id

    def _clone_entry(self, repo: PayrollRepository, entry: PayrollEntry, run_id: int) -> int:
        entry_id = repo.create_entry(
            payroll_run_id=run_id,
            assignment_id=entry.assignment_id,
            gross_salary=entry.gross_salary,
            bonus_amount=entry.bonus_amount,
            net_salary=entry.net_salary,
            hour_variance=entry.hour_variance,
            hour_variance_override=entry.hour_variance_override,
            remarks=entry.remarks,
        )
        repo.replace_deductions(entry_id, repo.list_deductions(entry.payroll_entry_id))
        repo.replace_bonuses(entry_id, repo.list_bonuses(entry.payroll_entry_id))
        logger.debug("Cloned entry %s into run %s as %s", entry.payroll_entry_id, run_id, entry_id)
        return entry_id

    def _synthesize_entry(
        self,
        repo: PayrollRepository,
        assignment: EmploymentAssignment,
        run_id: int,
        *,
        year: int,
        month: int,
    ) -> int:
        composed = self._composer.compose(
            employee_id=assignment.employee_id,
            year=year,
            month=month,
            gross_salary=assignment.start_salary,
        )
        entry_id = repo.create_entry(
            payroll_run_id=run_id,
            assignment_id=assignment.assignment_id,
            gross_salary=composed.gross_salary,
            bonus_amount=composed.bonus_amount,
            net_salary=composed.net_salary,
            hour_variance=composed.hour_variance,
            hour_variance_override=False,
        )
        logger.debug("Synthesized entry %s in run %s (net=%s)", entry_id, run_id, composed.net_salary)
        return entry_id

    # ------------------------------------------------------------------
    # runs
    # ------------------------------------------------------------------

    def update_run_status(self, payroll_run_id: int, status: Any = None) -> dict:
        try:
            target = RunStatus.parse(status, default=RunStatus.PAID)
        except ValueError:
            raise ValidationError(f"Invalid payroll run status: {status}")

        pay_date = today_local() if target == RunStatus.PAID else None
        with self._payroll.transaction() as repo:
            run = repo.get_run(payroll_run_id)
            if run is None:
                raise NotFoundError("Payroll run not found")
            if not run.status.can_transition_to(target):
                raise ValidationError(f"Cannot change payroll run from {run.status.value} to {target.value}")
            repo.update_run_status(payroll_run_id, target, pay_date=pay_date)

        logger.info("Payroll run %s: %s -> %s", payroll_run_id, run.status.value, target.value)
        return {
            "message": f"Payroll run marked as {target.value}",
            "status": target.value,
            "pay_date": format_iso(pay_date or run.pay_date),
            "payroll_run_id": payroll_run_id,
        }

    def create_run(self, data: Mapping[str, Any]) -> int:
        require_fields(data, "period_start", "period_end")
        period_start = _parse_optional_date(data.get("period_start"), "period_start")
        period_end = _parse_optional_date(data.get("period_end"), "period_end")
        if period_end < period_start:
            raise ValidationError("period_end must not be before period_start")

        try:
            run_kind = RunKind(str(data.get("run_kind") or RunKind.MAIN.value).strip().upper())
        except ValueError:
            raise ValidationError(f"Invalid run kind: {data.get('run_kind')}")
        employee_id = optional_int(data.get("employee_id"), "employee_id")
        if run_kind == RunKind.INDIVIDUAL and employee_id is None:
            raise ValidationError("employee_id is required for individual runs")

        notes = data.get("notes")
        if run_kind == RunKind.INDIVIDUAL and not notes:
            notes = f"{INDIVIDUAL_RUN_TAG}{employee_id}"

        run_id = self._payroll.create_run(
            period_start=period_start,
            period_end=period_end,
            pay_date=_parse_optional_date(data.get("pay_date"), "pay_date"),
            status=RunStatus.DRAFT,
            run_kind=run_kind,
            employee_id=employee_id if run_kind == RunKind.INDIVIDUAL else None,
            notes=notes,
            created_by_user_id=optional_int(data.get("created_by_user_id"), "created_by_user_id"),
        )
        logger.info("Created %s payroll run %s (%s..%s)", run_kind.value, run_id, period_start, period_end)
        return run_id

    def list_runs(self) -> list[dict]:
        return [r.to_dict() for r in self._payroll.list_runs()]

    def get_entry(self, payroll_entry_id: int) -> dict:
        entry = self._payroll.get_entry(payroll_entry_id)
        if entry is None:
            raise NotFoundError("Payroll entry not found")
        return {
            **entry.to_dict(),
            "deductions": [d.to_dict() for d in self._payroll.list_deductions(payroll_entry_id)],
            "bonuses": [b.to_dict() for b in self._payroll.list_bonuses(payroll_entry_id)],
        }

    def list_deduction_types(self) -> list[dict]:
        return [to_json_row(r) for r in self._payroll.list_deduction_types()]

    def list_bonus_types(self) -> list[dict]:
        return [to_json_row(r) for r in self._payroll.list_bonus_types()]
