from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded towards +infinity (-2.5 -> -2)."""
    return int(math.floor(value + 0.5))
