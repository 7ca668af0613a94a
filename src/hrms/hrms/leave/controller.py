from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_view, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    @app.route("/api/leave/types", methods=["GET"], endpoint="leave_types")
    @api_view
    def leave_types():
        return jsonify(service.list_types())

    @app.route("/api/leave/requests", methods=["GET"], endpoint="leave_requests_list")
    @api_view
    def leave_requests_list():
        return jsonify(
            service.list_requests(
                status=request.args.get("status"),
                employee_id=request.args.get("employee_id"),
            )
        )

    @app.route("/api/leave/requests", methods=["POST"], endpoint="leave_requests_create")
    @api_view
    def leave_requests_create():
        leave_request_id = service.create_request(json_body())
        return jsonify({"leave_request_id": leave_request_id, "message": "Leave request created successfully"}), 201

    @app.route("/api/leave/requests/<int:leave_request_id>", methods=["GET"], endpoint="leave_requests_get")
    @api_view
    def leave_requests_get(leave_request_id: int):
        return jsonify(service.get_request(leave_request_id))

    @app.route("/api/leave/requests/<int:leave_request_id>", methods=["PUT"], endpoint="leave_requests_update")
    @api_view
    def leave_requests_update(leave_request_id: int):
        service.update_request(leave_request_id, json_body())
        return jsonify({"message": "Leave request updated successfully"})
