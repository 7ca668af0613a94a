from __future__ import annotations

from typing import Any, Mapping

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.serialization import to_json_row
from ..common.validators import optional_int, require_min_length, require_non_empty
from ..core.enums import AccountStatus
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..logging_config import get_logger
from .model import LoginResult
from .repository import UserRepository

logger = get_logger(__name__)

DEFAULT_ROLE = "HR_MANAGER"


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def login(self, username_or_email: str, password: str) -> LoginResult:
        login = require_non_empty(username_or_email, "usernameOrEmail")
        user = self._users.find_active_by_login(login)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except (ValueError, TypeError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed login for %s", login)
            raise AuthenticationError("Invalid credentials")

        self._users.touch_last_login(user.user_id)

        return LoginResult(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            role=user.roles[0] if user.roles else DEFAULT_ROLE,
            roles=list(user.roles),
            status=user.status.value,
            department_id=user.department_id,
        )


class UserService:
    """Use case: manage user accounts (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_users(self) -> list[dict]:
        return [to_json_row(r) for r in self._users.list_view()]

    def get_user(self, user_id: int) -> dict:
        row = self._users.get_view(user_id)
        if not row:
            raise NotFoundError("User not found")
        return to_json_row(row)

    def list_roles(self) -> list[dict]:
        return [to_json_row(r) for r in self._users.list_roles()]

    def create_user(self, data: Mapping[str, Any]) -> int:
        username = require_non_empty(data.get("username"), "username")
        password = data.get("password") or ""
        require_non_empty(password, "password")
        require_min_length(password, "password", 6)
        employee_id = optional_int(data.get("employee_id"), "employee_id")
        role_id = optional_int(data.get("role_id"), "role_id")

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        with self._users.transaction() as repo:
            user_id = repo.create_user(
                username=username,
                email=(data.get("email") or None),
                password_hash=generate_password_hash(password),
                employee_id=employee_id,
            )
            if role_id:
                repo.assign_role(user_id, role_id)

        logger.info("Created user %s (%s)", user_id, username)
        return user_id

    def update_user(self, user_id: int, data: Mapping[str, Any]) -> None:
        username = require_non_empty(data.get("username"), "username")
        status = str(data.get("status") or AccountStatus.ACTIVE.value).strip().upper()
        if status not in {s.value for s in AccountStatus}:
            raise ValidationError(f"Invalid account status: {status}")
        role_id = optional_int(data.get("role_id"), "role_id")

        with self._users.transaction() as repo:
            if not repo.get_view(user_id):
                raise NotFoundError("User not found")
            repo.update_user(user_id, username=username, email=(data.get("email") or None), status=status)
            if role_id:
                repo.revoke_roles(user_id)
                repo.assign_role(user_id, role_id)

    def deactivate_user(self, user_id: int) -> None:
        if not self._users.get_view(user_id):
            raise NotFoundError("User not found")
        self._users.set_status(user_id, AccountStatus.INACTIVE.value)
