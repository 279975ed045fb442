"""
Money and percent primitives shared by the ledger and booking code.

Amounts are whole units of the single store currency (int). Percentages are
fractions held as Decimal, so 20% is Decimal("0.20").
"""

import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from travelstore.pricing.errors import (
    DivisionGuardFailed,
    InvalidPercent,
    NotPercentageCoupon,
)

Number = Union[int, float, str, Decimal]

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
# finest coupon percent the cart_item.coupon_percent column stores
PERCENT_STEP = Decimal("0.0001")

_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() keeps 0.15 as 0.15 instead of its binary expansion
        return Decimal(str(value))
    return Decimal(value)


def round_amount(value: Number) -> int:
    """Round half-up to the smallest currency unit."""
    return int(to_decimal(value).quantize(ONE, rounding=ROUND_HALF_UP))


def parse_percent(text: str) -> Decimal:
    """
    Extract a percentage from a display string such as "20%" or
    "Flat 12.5 % off" and return it as a fraction.
    """
    match = _PERCENT_RE.search(text or "")
    if not match:
        raise NotPercentageCoupon(f"'{text}' is not a percentage discount")
    return Decimal(match.group(1)) / HUNDRED


def percent_from_points(points: Number) -> Decimal:
    """Admin input is typed as 0-100."""
    return to_decimal(points) / HUNDRED


def validate_coupon_percent(percent: Number) -> Decimal:
    p = to_decimal(percent)
    if p < ZERO or p >= ONE:
        raise InvalidPercent(f"Coupon percent must be in [0, 1), got {p}")
    if p != p.quantize(PERCENT_STEP):
        raise InvalidPercent(
            f"Coupon percent {format_percent(p)} is finer than {format_percent(PERCENT_STEP)}"
        )
    return p


def validate_admin_percent(percent: Number) -> Decimal:
    p = to_decimal(percent)
    if p < ZERO or p > ONE:
        raise InvalidPercent(f"Admin discount percent must be in [0, 1], got {p}")
    return p


def discount_factor(percent: Number) -> Decimal:
    return ONE - to_decimal(percent)


def divide_by_factor(amount: Number, percent: Number) -> Decimal:
    """amount / (1 - percent), refusing percents that cannot be undone."""
    p = to_decimal(percent)
    if p >= ONE:
        raise DivisionGuardFailed(
            f"Cannot reverse a {format_percent(p)} discount on {amount}"
        )
    return to_decimal(amount) / (ONE - p)


def apply_percent(amount: Number, percent: Number) -> int:
    return round_amount(to_decimal(amount) * discount_factor(percent))


def round_trip_tolerance(percent: Number) -> int:
    """
    Largest drift an apply -> remove coupon round trip can show.

    Applying rounds by at most half a unit; removing divides that error by
    (1 - p) before rounding again.
    """
    p = to_decimal(percent)
    if p >= ONE:
        raise DivisionGuardFailed(f"No round trip exists for {format_percent(p)}")
    return max(1, math.ceil(Decimal("0.5") / (ONE - p)))


def format_percent(percent: Number) -> str:
    points = (to_decimal(percent) * HUNDRED).normalize()
    text = format(points, "f")
    return f"{text}%"
