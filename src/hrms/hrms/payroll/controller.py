from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_view, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.route("/api/payroll/employees", methods=["GET"], endpoint="payroll_employees")
    @api_view
    def payroll_employees():
        return jsonify(service.get_employees_for_payroll(request.args.get("month"), request.args.get("year")))

    @app.route("/api/payroll/entries", methods=["POST"], endpoint="payroll_entries_bulk")
    @api_view
    def payroll_entries_bulk():
        data = json_body()
        return jsonify(
            service.bulk_update_entries(
                data.get("month"),
                data.get("year"),
                data.get("entries"),
                data.get("created_by_user_id"),
            )
        )

    @app.route("/api/payroll/entries/<int:entry_id>", methods=["GET"], endpoint="payroll_entry_get")
    @api_view
    def payroll_entry_get(entry_id: int):
        return jsonify(service.get_entry(entry_id))

    @app.route("/api/payroll/runs", methods=["GET"], endpoint="payroll_runs_list")
    @api_view
    def payroll_runs_list():
        return jsonify(service.list_runs())

    @app.route("/api/payroll/runs", methods=["POST"], endpoint="payroll_runs_create")
    @api_view
    def payroll_runs_create():
        run_id = service.create_run(json_body())
        return jsonify({"payroll_run_id": run_id, "message": "Payroll run created successfully"}), 201

    @app.route("/api/payroll/runs/<int:run_id>/approve", methods=["PUT"], endpoint="payroll_run_approve")
    @api_view
    def payroll_run_approve(run_id: int):
        return jsonify(service.update_run_status(run_id, json_body().get("status")))

    @app.route("/api/payroll/pay-individual", methods=["POST"], endpoint="payroll_pay_individual")
    @api_view
    def payroll_pay_individual():
        data = json_body()
        return jsonify(
            service.pay_individual(
                data.get("month"),
                data.get("year"),
                data.get("assignment_id"),
                data.get("employee_id"),
            )
        )

    @app.route("/api/payroll/pay-all", methods=["POST"], endpoint="payroll_pay_all")
    @api_view
    def payroll_pay_all():
        data = json_body()
        return jsonify(service.pay_all_unpaid(data.get("month"), data.get("year")))

    @app.route("/api/payroll/deduction-types", methods=["GET"], endpoint="payroll_deduction_types")
    @api_view
    def payroll_deduction_types():
        return jsonify(service.list_deduction_types())

    @app.route("/api/payroll/bonus-types", methods=["GET"], endpoint="payroll_bonus_types")
    @api_view
    def payroll_bonus_types():
        return jsonify(service.list_bonus_types())
