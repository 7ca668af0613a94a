from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import AccountStatus


@dataclass(frozen=True)
class UserAccount:
    """Login account; roles are the names of its non-revoked role rows."""

    user_id: int
    username: str
    email: Optional[str]
    password_hash: str
    status: AccountStatus
    employee_id: Optional[int] = None
    last_login: Optional[datetime] = None
    department_id: Optional[int] = None
    roles: list[str] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE


@dataclass(frozen=True)
class LoginResult:
    """What the login endpoint returns to the client."""

    user_id: int
    username: str
    email: Optional[str]
    role: str
    roles: list[str]
    status: str
    department_id: Optional[int]

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "roles": list(self.roles),
            "status": self.status,
            "department_id": self.department_id,
        }
