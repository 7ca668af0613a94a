from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_fields(data: Mapping[str, Any], *names: str, message: Optional[str] = None) -> None:
    missing = [n for n in names if data.get(n) in (None, "")]
    if missing:
        raise ValidationError(message or f"Missing required fields: {', '.join(missing)}")


def require_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    return require_int(value, field_name)


def require_month(value: Any) -> int:
    month = require_int(value, "month")
    if month < 1 or month > 12:
        raise ValidationError("Invalid month. Month must be between 1 and 12.")
    return month


def require_year(value: Any) -> int:
    year = require_int(value, "year")
    if year < 1900 or year > 9999:
        raise ValidationError("Invalid year. Year must have four digits.")
    return year


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """Lenient money parsing: blanks and garbage become the default."""
    if value in (None, ""):
        return default
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default
    return parsed if parsed.is_finite() else default
