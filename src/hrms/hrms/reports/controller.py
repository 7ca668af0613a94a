from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import api_view
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.report_service

    @app.route("/api/dashboard/stats", methods=["GET"], endpoint="dashboard_stats")
    @api_view
    def dashboard_stats():
        return jsonify(service.dashboard_stats())

    @app.route("/api/dashboard/departments", methods=["GET"], endpoint="dashboard_departments")
    @api_view
    def dashboard_departments():
        return jsonify(service.dashboard_departments())

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="reports_attendance")
    @api_view
    def reports_attendance():
        return jsonify(service.attendance_report())

    @app.route("/api/reports/payroll", methods=["GET"], endpoint="reports_payroll")
    @api_view
    def reports_payroll():
        return jsonify(service.payroll_report())

    @app.route("/api/reports/departments", methods=["GET"], endpoint="reports_departments")
    @api_view
    def reports_departments():
        return jsonify(service.department_report())
