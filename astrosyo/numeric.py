"""Small numeric helpers shared by the scoring modules."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def is_finite_number(value: Any) -> bool:
    """True for real, finite numbers (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero, the way display values are rounded.

    `round()` uses banker's rounding, which would turn an average cloud cover
    of 82.5 into 82.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round1(value: float) -> float:
    """Round to one decimal place, halves away from zero."""
    return round_half_up(value, 1)
