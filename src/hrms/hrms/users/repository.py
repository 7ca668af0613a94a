from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Optional, Protocol, Sequence

from .model import UserAccount


class UserRepository(Protocol):
    """Service layer depends on this interface, not on a concrete database."""

    def transaction(self) -> AbstractContextManager["UserRepository"]:
        raise NotImplementedError

    def find_active_by_login(self, username_or_email: str) -> Optional[UserAccount]:
        raise NotImplementedError

    def touch_last_login(self, user_id: int) -> None:
        raise NotImplementedError

    def list_view(self) -> Sequence[dict]:
        raise NotImplementedError

    def get_view(self, user_id: int) -> Optional[dict]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[UserAccount]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        username: str,
        email: Optional[str],
        password_hash: str,
        employee_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, *, username: str, email: Optional[str], status: str) -> bool:
        raise NotImplementedError

    def set_status(self, user_id: int, status: str) -> bool:
        raise NotImplementedError

    def assign_role(self, user_id: int, role_id: int) -> None:
        raise NotImplementedError

    def revoke_roles(self, user_id: int) -> None:
        raise NotImplementedError

    def list_roles(self) -> Sequence[dict]:
        raise NotImplementedError
