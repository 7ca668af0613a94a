from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values) -> str:
    """Placeholder list for an IN (...) filter; callers guard against empty input."""
    return ", ".join(["%s"] * len(values))


class MySQLRepository:
    """Base for repositories that can join a unit of work.

    A plain instance opens a short transaction per call. transaction() yields a
    copy bound to one cursor, so every call inside the block shares a
    connection and is committed (or rolled back) together.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, cursor=None):
        self._conn_factory = conn_factory
        self._bound_cursor = cursor

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        if self._bound_cursor is not None:
            yield self._bound_cursor
            return
        with db_cursor(self._conn_factory) as (_, cur):
            yield cur

    @contextmanager
    def transaction(self):
        if self._bound_cursor is not None:
            yield self
            return
        with db_cursor(self._conn_factory) as (_, cur):
            yield type(self)(self._conn_factory, cursor=cur)


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
