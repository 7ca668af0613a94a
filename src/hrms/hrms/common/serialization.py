from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from ..database.mysql_base import normalize_mysql_time


def to_number(value: Any) -> Any:
    """Decimal -> float for JSON bodies; everything else untouched."""
    if isinstance(value, Decimal):
        return float(value)
    return value


def to_json_value(value: Any) -> Any:
    """One DB value in the shape the API returns (ISO dates, HH:MM times, numbers)."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (time, timedelta)):
        t = normalize_mysql_time(value)
        return t.strftime("%H:%M") if t else None
    return value


def to_json_row(row: Optional[Mapping[str, Any]], *, exclude: Iterable[str] = ()) -> Optional[dict]:
    if row is None:
        return None
    skip = set(exclude)
    return {k: to_json_value(v) for k, v in row.items() if k not in skip}
