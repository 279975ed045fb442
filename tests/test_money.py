from decimal import Decimal

import pytest

from travelstore.pricing.errors import DivisionGuardFailed, InvalidPercent, NotPercentageCoupon
from travelstore.pricing.money import (
    apply_percent,
    divide_by_factor,
    format_percent,
    parse_percent,
    percent_from_points,
    round_amount,
    round_trip_tolerance,
    validate_admin_percent,
    validate_coupon_percent,
)


def test_round_amount_is_half_up():
    assert round_amount(Decimal("2.5")) == 3
    assert round_amount(Decimal("3.5")) == 4
    assert round_amount(Decimal("3.49")) == 3
    assert round_amount(0.15 * 10) == 2


@pytest.mark.parametrize(
    "text, expected",
    [
        ("20%", Decimal("0.20")),
        ("Flat 12.5 % off", Decimal("0.125")),
        ("0%", Decimal("0")),
    ],
)
def test_parse_percent(text, expected):
    assert parse_percent(text) == expected


@pytest.mark.parametrize("text", ["Rs. 500 off", "", None])
def test_parse_percent_rejects_non_percentage(text):
    with pytest.raises(NotPercentageCoupon):
        parse_percent(text)


def test_percent_from_points():
    assert percent_from_points(15) == Decimal("0.15")
    assert percent_from_points("7.5") == Decimal("0.075")


def test_coupon_percent_must_be_below_one():
    assert validate_coupon_percent("0.5") == Decimal("0.5")
    with pytest.raises(InvalidPercent):
        validate_coupon_percent(1)
    with pytest.raises(InvalidPercent):
        validate_coupon_percent("-0.1")


def test_admin_percent_allows_one():
    assert validate_admin_percent(1) == Decimal("1")
    with pytest.raises(InvalidPercent):
        validate_admin_percent("1.01")


def test_apply_percent_rounds_result():
    assert apply_percent(10000, Decimal("0.2")) == 8000
    assert apply_percent(999, Decimal("0.15")) == 849


def test_divide_by_factor_guards_full_discount():
    assert divide_by_factor(8000, Decimal("0.2")) == Decimal("10000")
    with pytest.raises(DivisionGuardFailed):
        divide_by_factor(100, 1)


def test_round_trip_tolerance_grows_with_percent():
    assert round_trip_tolerance(Decimal("0.2")) == 1
    assert round_trip_tolerance(Decimal("0.9")) == 5
    with pytest.raises(DivisionGuardFailed):
        round_trip_tolerance(1)


def test_format_percent():
    assert format_percent(Decimal("0.20")) == "20%"
    assert format_percent(Decimal("0.125")) == "12.5%"
    assert format_percent(0) == "0%"


def test_coupon_percent_limited_to_stored_precision():
    assert validate_coupon_percent(parse_percent("12.34%")) == Decimal("0.1234")
    with pytest.raises(InvalidPercent):
        validate_coupon_percent(parse_percent("12.345%"))
