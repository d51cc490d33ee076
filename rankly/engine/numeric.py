"""Numeric coercion helpers.

Stored metric documents come from several generations of the upstream
calculator, so fields may be missing, None, strings or NaN. Everything is
coerced to a finite number before arithmetic.
"""

from __future__ import annotations

import math


def to_float(value: object) -> float:
    """Coerce a value to a finite float; anything invalid becomes 0.0."""
    if value is None or isinstance(value, bool):
        return float(value or 0)
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_count(value: object) -> int:
    """Coerce a value to a non-negative integer count."""
    return max(int(to_float(value)), 0)


def percentage(count: float, total: float, digits: int = 2) -> float:
    """count / total * 100 rounded; a zero total yields 0.0."""
    if total <= 0:
        return 0.0
    return round(count / total * 100.0, digits)
