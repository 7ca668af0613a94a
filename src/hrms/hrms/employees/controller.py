from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import api_view, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @api_view
    def employees_list():
        return jsonify(service.list_employees())

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @api_view
    def employees_create():
        employee_id = service.create_employee(json_body())
        return jsonify({"employee_id": employee_id, "message": "Employee created successfully"}), 201

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @api_view
    def employees_get(employee_id: int):
        return jsonify(service.get_employee(employee_id))

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="employees_update")
    @api_view
    def employees_update(employee_id: int):
        service.update_employee(employee_id, json_body())
        return jsonify({"message": "Employee updated successfully"})

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="employees_delete")
    @api_view
    def employees_delete(employee_id: int):
        service.terminate_employee(employee_id)
        return jsonify({"message": "Employee terminated successfully"})
