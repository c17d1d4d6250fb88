"""Display formatting and alert evaluation helpers."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from watchlist_sync.core import as_number
from watchlist_sync.db import AlertType

_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")

_CAP_UNITS = (
    (1_000_000_000_000, "T"),
    (1_000_000_000, "B"),
    (1_000_000, "M"),
)


def _fixed(value: object, quantum: Decimal = _CENT) -> Decimal | None:
    """Half-up rounding on the shortest decimal repr, so 2.345 -> 2.35.

    None for non-numeric input and for values too large to quantize.
    """
    number = as_number(value)
    if number is None:
        return None
    try:
        return Decimal(repr(number)).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def format_price(value: float | None) -> str | None:
    """123.4 -> "$123.40"; None for non-numeric input."""
    fixed = _fixed(value)
    return f"${fixed}" if fixed is not None else None


def format_change_percent(value: float | None) -> str | None:
    """1.2 -> "+1.20%", 0 -> "+0.00%", -2.345 -> "-2.35%"."""
    fixed = _fixed(value)
    if fixed is None:
        return None
    if fixed == 0:
        return "+0.00%"
    sign = "+" if fixed > 0 else ""
    return f"{sign}{fixed}%"


def format_market_cap(value_usd: float | None) -> str | None:
    """2.5e12 -> "$2.50T", 1.2e9 -> "$1.20B", 3.5e8 -> "$350.00M"."""
    number = as_number(value_usd)
    if number is None or number <= 0:
        return None
    scaled, suffix = number, ""
    for size, unit in _CAP_UNITS:
        if number >= size:
            scaled, suffix = number / size, unit
            break
    fixed = _fixed(scaled)
    return f"${fixed}{suffix}" if fixed is not None else None


def format_pe_ratio(value: float | None) -> str | None:
    """28.456 -> "28.5"."""
    fixed = _fixed(value, _TENTH)
    return str(fixed) if fixed is not None else None


def alert_text(alert_type: str, threshold: float) -> str:
    """Human-readable condition, e.g. "Price > $150.00"."""
    op = ">" if alert_type == AlertType.UPPER.value else "<"
    return f"Price {op} {format_price(threshold)}"


def is_triggered(alert_type: str, threshold: float, price: float | None) -> bool:
    """Whether price has crossed threshold in the alert's direction."""
    number = as_number(price)
    if number is None:
        return False
    if alert_type == AlertType.UPPER.value:
        return number > threshold
    return number < threshold
