from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import api_view, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    users = container.user_service

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    @api_view
    def auth_login():
        data = json_body()
        login = data.get("usernameOrEmail") or data.get("username") or data.get("email")
        result = auth.login(login, data.get("password"))
        return jsonify(result.to_dict())

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @api_view
    def users_list():
        return jsonify(users.list_users())

    @app.route("/api/users", methods=["POST"], endpoint="users_create")
    @api_view
    def users_create():
        user_id = users.create_user(json_body())
        return jsonify({"user_id": user_id, "message": "User created successfully"}), 201

    @app.route("/api/users/roles", methods=["GET"], endpoint="users_roles")
    @api_view
    def users_roles():
        return jsonify(users.list_roles())

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="users_get")
    @api_view
    def users_get(user_id: int):
        return jsonify(users.get_user(user_id))

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="users_update")
    @api_view
    def users_update(user_id: int):
        users.update_user(user_id, json_body())
        return jsonify({"message": "User updated successfully"})

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="users_delete")
    @api_view
    def users_delete(user_id: int):
        users.deactivate_user(user_id)
        return jsonify({"message": "User deactivated successfully"})
