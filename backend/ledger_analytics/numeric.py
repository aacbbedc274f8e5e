"""Numeric guards that keep NaN and infinity out of analytics output."""
from __future__ import annotations

import math
from typing import Any


def finite(value: Any, default: float = 0.0) -> float:
    """Coerce ``value`` to a finite float, returning ``default`` otherwise."""

    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def safe_mul(left: float, right: float) -> float:
    """Multiply, collapsing an overflowing product to 0."""

    result = left * right
    return result if math.isfinite(result) else 0.0


def safe_div(numerator: float, denominator: float) -> float:
    """Divide by positive denominators only; anything else yields 0."""

    if not denominator > 0:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


__all__ = ["finite", "safe_div", "safe_mul"]
