from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import api_view, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    departments = container.department_service
    positions = container.position_service

    @app.route("/api/departments", methods=["GET"], endpoint="departments_list")
    @api_view
    def departments_list():
        return jsonify(departments.list_departments())

    @app.route("/api/departments", methods=["POST"], endpoint="departments_create")
    @api_view
    def departments_create():
        department_id = departments.create_department(json_body())
        return jsonify({"department_id": department_id, "message": "Department created successfully"}), 201

    @app.route("/api/departments/<int:department_id>", methods=["GET"], endpoint="departments_get")
    @api_view
    def departments_get(department_id: int):
        return jsonify(departments.get_department(department_id))

    @app.route("/api/departments/<int:department_id>", methods=["PUT"], endpoint="departments_update")
    @api_view
    def departments_update(department_id: int):
        departments.update_department(department_id, json_body())
        return jsonify({"message": "Department updated successfully"})

    @app.route("/api/departments/<int:department_id>/employees", methods=["GET"], endpoint="departments_employees")
    @api_view
    def departments_employees(department_id: int):
        return jsonify(departments.list_department_employees(department_id))

    @app.route("/api/positions", methods=["GET"], endpoint="positions_list")
    @api_view
    def positions_list():
        return jsonify(positions.list_positions())

    @app.route("/api/positions", methods=["POST"], endpoint="positions_create")
    @api_view
    def positions_create():
        position_id = positions.create_position(json_body())
        return jsonify({"position_id": position_id, "message": "Position created successfully"}), 201
