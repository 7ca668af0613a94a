"""Canonical time/date/mark values for attendance data.

Spreadsheet cells arrive as strings, numbers (day fractions / serial dates),
datetimes or NaN. Everything is reduced to "HH:MM" times, ISO dates and one
AttendanceMark per day.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from numbers import Real
from typing import Any, Optional

import pandas as pd

from ..core.constants import MINUTES_PER_DAY, SPREADSHEET_EPOCH
from ..core.enums import AttendanceMark

OFF = "OFF"

_NULL_TOKENS = {"", "NULL", "N/A", "UNDEFINED"}

_ISO_TIME_RE = re.compile(r"T(\d{2}):(\d{2})", re.IGNORECASE)
_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_HHMMSS_RE = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})$")
_AMPM_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?\s*([AP]M)$", re.IGNORECASE)
_LOOSE_TIME_RE = re.compile(r"(\d{1,2})[:.](\d{2})")
_US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class MarkDecision:
    mark: AttendanceMark
    check_in: Optional[str] = None
    check_out: Optional[str] = None


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (Real, Decimal)) and not isinstance(value, bool)


def _fmt(hours: int, minutes: int) -> Optional[str]:
    if 0 <= hours <= 23 and 0 <= minutes <= 59:
        return f"{hours:02d}:{minutes:02d}"
    return None


def _from_day_fraction(fraction: float) -> str:
    total = int(math.floor(fraction * MINUTES_PER_DAY))
    return f"{total // 60:02d}:{total % 60:02d}"


def _time_from_number(value: Any) -> Optional[str]:
    number = float(value)
    if not math.isfinite(number) or number < 0:
        return None
    if number < 1:
        return _from_day_fraction(number)
    fraction = number % 1
    if fraction > 0:
        return _from_day_fraction(fraction)
    return None


def _time_from_string(text: str) -> Optional[str]:
    m = _ISO_TIME_RE.search(text)
    if m:
        result = _fmt(int(m.group(1)), int(m.group(2)))
        if result:
            return result

    last = text.split()[-1]

    m = _HHMM_RE.match(last)
    if m:
        result = _fmt(int(m.group(1)), int(m.group(2)))
        if result:
            return result

    m = _HHMMSS_RE.match(last)
    if m and int(m.group(3)) <= 59:
        result = _fmt(int(m.group(1)), int(m.group(2)))
        if result:
            return result

    m = _AMPM_RE.match(text)
    if m:
        hours, minutes, meridiem = int(m.group(1)), int(m.group(2)), m.group(3).upper()
        if 1 <= hours <= 12:
            if meridiem == "AM":
                hours = 0 if hours == 12 else hours
            else:
                hours = 12 if hours == 12 else hours + 12
            result = _fmt(hours, minutes)
            if result:
                return result

    for m in _LOOSE_TIME_RE.finditer(text):
        result = _fmt(int(m.group(1)), int(m.group(2)))
        if result:
            return result

    return None


def normalize_time(value: Any) -> Optional[str]:
    """Return "HH:MM", "OFF" or None for one time cell.

    The first matching rule wins; a match with an out-of-range hour or
    minute falls through to the next rule.
    """
    if _is_missing(value):
        return None

    if isinstance(value, str):
        text = value.strip()
        if text.upper() in _NULL_TOKENS:
            return None
        if text.upper() == OFF:
            return OFF
        return _time_from_string(text)

    if _is_number(value):
        return _time_from_number(value)

    if isinstance(value, (datetime, time)):
        return f"{value.hour:02d}:{value.minute:02d}"

    text = str(value).strip()
    if not text or text.upper() in _NULL_TOKENS:
        return None
    if text.upper() == OFF:
        return OFF
    return _time_from_string(text)


def _valid_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def normalize_date(value: Any) -> Optional[str]:
    """Return an ISO "YYYY-MM-DD" string or None for one date cell."""
    if _is_missing(value):
        return None

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    if _is_number(value):
        number = float(value)
        if not math.isfinite(number):
            return None
        try:
            return (SPREADSHEET_EPOCH + timedelta(days=math.floor(number))).isoformat()
        except OverflowError:
            return None

    text = str(value).strip()
    if not text:
        return None

    m = _US_DATE_RE.match(text)
    if m:
        month, day, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if not (1 <= month <= 12 and 1 <= day <= 31):
            return None
        parsed = _valid_date(year, month, day)
        return parsed.isoformat() if parsed else None

    try:
        stamp = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        stamp = pd.NaT
    if not pd.isna(stamp):
        return stamp.date().isoformat()

    if _ISO_DATE_RE.match(text):
        parsed = _valid_date(int(text[0:4]), int(text[5:7]), int(text[8:10]))
        return parsed.isoformat() if parsed else None

    return None


def derive_mark(time_in: Optional[str], time_out: Optional[str]) -> Optional[MarkDecision]:
    """Daily mark from normalized punches; None means the row is rejected."""
    if time_in == OFF or time_out == OFF:
        return MarkDecision(AttendanceMark.OFF)
    if time_in and not time_out:
        return MarkDecision(AttendanceMark.NO_SIGN_OUT, check_in=time_in)
    if not time_in and not time_out:
        return MarkDecision(AttendanceMark.ABSENT)
    if time_in and time_out:
        return MarkDecision(AttendanceMark.PRESENT, check_in=time_in, check_out=time_out)
    return None


def is_blank_cell(value: Any) -> bool:
    return _is_missing(value) or (isinstance(value, str) and not value.strip())


def identifier_text(value: Any) -> str:
    """Employee identifier cell as text ("7.0" from a numeric cell becomes "7")."""
    if is_blank_cell(value):
        return ""
    if _is_number(value) and float(value).is_integer():
        return str(int(value))
    return str(value).strip()
