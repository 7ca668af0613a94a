from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_view, json_body
from ..core.exceptions import ValidationError
from ..container import Container
from .spreadsheet import read_rows


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @api_view
    def attendance_list():
        return jsonify(
            service.list_attendance(
                attendance_date=request.args.get("date"),
                employee_id=request.args.get("employee_id"),
                month=request.args.get("month"),
                year=request.args.get("year"),
            )
        )

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_create")
    @api_view
    def attendance_create():
        attendance_id = service.create_attendance(json_body())
        return jsonify({"attendance_id": attendance_id, "message": "Attendance record created successfully"}), 201

    @app.route("/api/attendance/import", methods=["POST"], endpoint="attendance_import")
    @api_view
    def attendance_import():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("No file uploaded")

        rows = read_rows(upload.stream, upload.filename)
        summary = service.import_rows(rows)
        return jsonify({"message": "Attendance imported successfully", **summary.to_dict()})

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    @api_view
    def attendance_get(attendance_id: int):
        return jsonify(service.get_attendance(attendance_id))

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @api_view
    def attendance_update(attendance_id: int):
        service.update_attendance(attendance_id, json_body())
        return jsonify({"message": "Attendance record updated successfully"})

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @api_view
    def attendance_delete(attendance_id: int):
        service.delete_attendance(attendance_id)
        return jsonify({"message": "Attendance record deleted successfully"})
