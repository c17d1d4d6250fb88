from __future__ import annotations

import pytest

from watchlist_sync.services.formatting import (alert_text,
                                                format_change_percent,
                                                format_market_cap,
                                                format_pe_ratio, format_price,
                                                is_triggered)


def test_price_uses_two_decimals_and_dollar_sign() -> None:
    assert format_price(123.4) == "$123.40"
    assert format_price(0.005) == "$0.01"
    assert format_price(2) == "$2.00"


@pytest.mark.parametrize("value", [None, float("nan"), float("inf"), True, "12"])
def test_non_numeric_values_format_to_none(value) -> None:
    assert format_price(value) is None
    assert format_change_percent(value) is None
    assert format_market_cap(value) is None
    assert format_pe_ratio(value) is None


def test_change_percent_sign_and_rounding() -> None:
    assert format_change_percent(1.2) == "+1.20%"
    assert format_change_percent(-2.345) == "-2.35%"
    assert format_change_percent(2.345) == "+2.35%"


def test_zero_change_is_rendered_positive() -> None:
    assert format_change_percent(0) == "+0.00%"
    assert format_change_percent(-0.001) == "+0.00%"


def test_market_cap_units() -> None:
    assert format_market_cap(2.5e12) == "$2.50T"
    assert format_market_cap(1.2e9) == "$1.20B"
    assert format_market_cap(3.5e8) == "$350.00M"
    assert format_market_cap(999) == "$999.00"
    assert format_market_cap(0) is None


def test_pe_ratio_has_one_decimal() -> None:
    assert format_pe_ratio(28.456) == "28.5"
    assert format_pe_ratio(10) == "10.0"


def test_alert_helpers() -> None:
    assert alert_text("upper", 150) == "Price > $150.00"
    assert alert_text("lower", 99.5) == "Price < $99.50"


def test_is_triggered_follows_direction() -> None:
    assert is_triggered("upper", 100.0, 100.01)
    assert not is_triggered("upper", 100.0, 100.0)
    assert is_triggered("lower", 100.0, 99.99)
    assert not is_triggered("lower", 100.0, None)


def test_values_too_large_to_round_format_to_none() -> None:
    assert format_price(1e30) is None
    assert format_change_percent(-1e30) is None
    assert format_pe_ratio(1e30) is None
    assert format_price(1e20) == "$100000000000000000000.00"
