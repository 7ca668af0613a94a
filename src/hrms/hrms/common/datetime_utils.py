from __future__ import annotations

import calendar
from datetime import date, datetime, time
from typing import Optional

from ..core.constants import STANDARD_HOURS_PER_DAY


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: Optional[str]) -> Optional[time]:
    """Parse a canonical HH:MM string into time (None stays None)."""
    if not value:
        return None
    return datetime.strptime(value, "%H:%M").time()


def format_hhmm(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value is not None else None


def format_iso(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    return value.isoformat()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def business_days_in_month(year: int, month: int) -> int:
    """Count Monday-Friday calendar dates in the month."""
    start, end = month_bounds(year, month)
    return sum(1 for day in range(start.day, end.day + 1) if date(year, month, day).weekday() < 5)


def expected_hours_in_month(year: int, month: int) -> int:
    return business_days_in_month(year, month) * STANDARD_HOURS_PER_DAY
