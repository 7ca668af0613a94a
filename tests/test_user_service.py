from __future__ import annotations

from contextlib import contextmanager

import pytest
from werkzeug.security import check_password_hash

from src.hrms.hrms.core.exceptions import NotFoundError, ValidationError
from src.hrms.hrms.users.service import UserService


class FakeUserRepo:
    def __init__(self):
        self.users: dict[int, dict] = {}
        self.roles: dict[int, list[int]] = {}

    @contextmanager
    def transaction(self):
        yield self

    def get_by_username(self, username):
        return next((u for u in self.users.values() if u["username"] == username), None)

    def get_view(self, user_id):
        return self.users.get(user_id)

    def create_user(self, *, username, email, password_hash, employee_id=None):
        user_id = len(self.users) + 1
        self.users[user_id] = {
            "user_id": user_id,
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "status": "ACTIVE",
        }
        return user_id

    def update_user(self, user_id, *, username, email, status):
        self.users[user_id].update(username=username, email=email, status=status)
        return True

    def set_status(self, user_id, status):
        self.users[user_id]["status"] = status
        return True

    def assign_role(self, user_id, role_id):
        self.roles.setdefault(user_id, []).append(role_id)

    def revoke_roles(self, user_id):
        self.roles[user_id] = []


@pytest.fixture
def repo():
    return FakeUserRepo()


def test_create_user_hashes_password_and_assigns_role(repo):
    user_id = UserService(repo).create_user({"username": "hr", "password": "secret1", "role_id": "2"})

    assert check_password_hash(repo.users[user_id]["password_hash"], "secret1")
    assert repo.roles[user_id] == [2]


@pytest.mark.parametrize("password", [None, "", "12345"])
def test_create_user_rejects_weak_password(repo, password):
    with pytest.raises(ValidationError):
        UserService(repo).create_user({"username": "hr", "password": password})


def test_duplicate_username(repo):
    svc = UserService(repo)
    svc.create_user({"username": "hr", "password": "secret1"})

    with pytest.raises(ValidationError, match="Username already exists"):
        svc.create_user({"username": "hr", "password": "secret2"})


def test_role_change_replaces_active_roles(repo):
    svc = UserService(repo)
    user_id = svc.create_user({"username": "hr", "password": "secret1", "role_id": 1})

    svc.update_user(user_id, {"username": "hr", "status": "active", "role_id": 3})

    assert repo.roles[user_id] == [3]
    assert repo.users[user_id]["status"] == "ACTIVE"


def test_update_validates_status_and_existence(repo):
    svc = UserService(repo)

    with pytest.raises(ValidationError):
        svc.update_user(1, {"username": "x", "status": "sleeping"})
    with pytest.raises(NotFoundError):
        svc.update_user(1, {"username": "x"})


def test_deactivate(repo):
    svc = UserService(repo)
    user_id = svc.create_user({"username": "hr", "password": "secret1"})

    svc.deactivate_user(user_id)

    assert repo.users[user_id]["status"] == "INACTIVE"
    with pytest.raises(NotFoundError):
        svc.deactivate_user(99)
