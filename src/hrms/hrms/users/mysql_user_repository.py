from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AccountStatus
from ..database.mysql_base import MySQLRepository, fetchall, fetchone
from .model import UserAccount
from .repository import UserRepository

_ROLES_JOIN = """
    LEFT JOIN user_role ur ON ua.user_id = ur.user_id AND ur.revoked_on IS NULL
    LEFT JOIN role r ON ur.role_id = r.role_id
"""


def _split_roles(value: Optional[str]) -> list[str]:
    return [r for r in (value or "").split(",") if r]


def _to_account(r: dict) -> UserAccount:
    return UserAccount(
        user_id=int(r["user_id"]),
        username=r["username"],
        email=r.get("email"),
        password_hash=r.get("password_hash") or "",
        status=AccountStatus(str(r.get("status") or "ACTIVE").upper()),
        employee_id=r.get("employee_id"),
        last_login=r.get("last_login"),
        department_id=r.get("department_id"),
        roles=_split_roles(r.get("roles")),
    )


class MySQLUserRepository(MySQLRepository, UserRepository):
    def find_active_by_login(self, username_or_email: str) -> Optional[UserAccount]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT ua.user_id, ua.username, ua.email, ua.password_hash, ua.status, ua.employee_id,
                       ua.last_login, MAX(ea.department_id) AS department_id,
                       GROUP_CONCAT(DISTINCT r.name ORDER BY r.name) AS roles
                FROM user_account ua
                {_ROLES_JOIN}
                LEFT JOIN employment_assignment ea ON ua.employee_id = ea.employee_id AND ea.status = 'ACTIVE'
                WHERE (ua.username=%s OR ua.email=%s) AND ua.status='ACTIVE'
                GROUP BY ua.user_id
                LIMIT 1
                """,
                (username_or_email, username_or_email),
            )
            r = fetchone(cur)
            return _to_account(r) if r else None

    def touch_last_login(self, user_id: int) -> None:
        with self._cursor() as cur:
            cur.execute("UPDATE user_account SET last_login=NOW() WHERE user_id=%s", (int(user_id),))

    def list_view(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT ua.user_id, ua.username, ua.email, ua.status, ua.last_login,
                       GROUP_CONCAT(r.name) AS roles
                FROM user_account ua
                {_ROLES_JOIN}
                GROUP BY ua.user_id
                ORDER BY ua.username
                """
            )
            return fetchall(cur)

    def get_view(self, user_id: int) -> Optional[dict]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT ua.user_id, ua.username, ua.email, ua.employee_id, ua.status, ua.last_login,
                       GROUP_CONCAT(r.name) AS roles
                FROM user_account ua
                {_ROLES_JOIN}
                WHERE ua.user_id=%s
                GROUP BY ua.user_id
                """,
                (int(user_id),),
            )
            return fetchone(cur)

    def get_by_username(self, username: str) -> Optional[UserAccount]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT user_id, username, email, password_hash, status, employee_id, last_login
                FROM user_account
                WHERE username=%s
                """,
                (username,),
            )
            r = fetchone(cur)
            return _to_account(r) if r else None

    def create_user(
        self,
        *,
        username: str,
        email: Optional[str],
        password_hash: str,
        employee_id: Optional[int],
    ) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO user_account(username, email, password_hash, employee_id, status)
                VALUES(%s,%s,%s,%s,'ACTIVE')
                """,
                (username, email, password_hash, employee_id),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, *, username: str, email: Optional[str], status: str) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE user_account SET username=%s, email=%s, status=%s WHERE user_id=%s",
                (username, email, status, int(user_id)),
            )
            return cur.rowcount > 0

    def set_status(self, user_id: int, status: str) -> bool:
        with self._cursor() as cur:
            cur.execute("UPDATE user_account SET status=%s WHERE user_id=%s", (status, int(user_id)))
            return cur.rowcount > 0

    def assign_role(self, user_id: int, role_id: int) -> None:
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO user_role(user_id, role_id, assigned_on) VALUES(%s,%s,CURDATE())",
                (int(user_id), int(role_id)),
            )

    def revoke_roles(self, user_id: int) -> None:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE user_role SET revoked_on=CURDATE() WHERE user_id=%s AND revoked_on IS NULL",
                (int(user_id),),
            )

    def list_roles(self) -> Sequence[dict]:
        with self._cursor() as cur:
            cur.execute("SELECT role_id, name, description FROM role ORDER BY name")
            return fetchall(cur)
