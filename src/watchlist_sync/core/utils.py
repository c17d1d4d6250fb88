"""Shared helpers for symbols and numbers."""
import math

DECIMALS = 2


def normalize_stock_symbol(symbol: str) -> str:
    """Canonical symbol: trimmed and uppercase."""
    return (symbol or "").strip().upper()


def round2(x: float | None) -> float | None:
    """Round a value to 2 decimal places; preserve None."""
    if x is None:
        return None
    return round(float(x), DECIMALS)


def as_number(value: object) -> float | None:
    """Return value as a finite float, or None if it is not numeric.

    Booleans are rejected even though they are ints in Python.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None
