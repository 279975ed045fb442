"""
Discount ledger for a single cart line item.

A line item's package price can carry up to two percentage layers: a
customer coupon (outer layer, applied first) and an admin override (inner
layer, applied last). Only the current price, the coupon and the price
just before the admin discount are persisted, so every historical price
point shown to shoppers and staff is reconstructed here from those fields.

Every function is pure: it takes a LineItem and returns a new one (or a
derived value). Loading and saving is left to the caller.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from travelstore.constants.booking_status import LifecycleState, can_transition
from travelstore.pricing.errors import (
    CouponAlreadyApplied,
    CouponRemovalBlocked,
    DivisionGuardFailed,
    ItemLocked,
    NoAdminDiscount,
    NoCouponApplied,
    VisaCostRequired,
)
from travelstore.pricing.money import (
    ONE,
    ZERO,
    apply_percent,
    divide_by_factor,
    format_percent,
    round_amount,
    to_decimal,
    validate_admin_percent,
    validate_coupon_percent,
)


class DiscountStage(str, Enum):
    no_discount = "no_discount"
    coupon_only = "coupon_only"
    admin_only = "admin_only"
    coupon_and_admin = "coupon_and_admin"


class QuantityConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    days: int = Field(ge=1)
    members: int = Field(default=1, ge=1)
    with_flights: bool = False
    with_visa: bool = False
    selected_date: Optional[datetime] = None


class AppliedCoupon(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    percent: Decimal
    code: Optional[str] = None


class ContactInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    phone_number: str = Field(min_length=5)
    best_time_to_connect: Optional[str] = None


class PackageQuote(BaseModel):
    """Read-only catalog view of a package."""

    model_config = ConfigDict(frozen=True)

    package_ref: int
    title: str = ""
    base_price: int = Field(ge=0)   # per person per day
    list_price: int = Field(ge=0)   # per person per day, MRP
    # {"with_flights": {"5": 42000}, "without_flights": {"5": 30000}}
    pricing: Dict[str, Dict[str, int]] = Field(default_factory=dict)


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    owner_id: int
    package_ref: int
    config: QuantityConfig

    current_price: int = Field(ge=0)
    price_before_admin_discount: Optional[int] = None
    applied_coupon: Optional[AppliedCoupon] = None
    visa_cost: int = Field(default=0, ge=0)

    lifecycle_state: LifecycleState = LifecycleState.cart
    contact: Optional[ContactInfo] = None
    updated_at: Optional[datetime] = None


class PriceBreakdown(BaseModel):
    original_price: int
    coupon_label: Optional[str] = None
    coupon_percent: Decimal = ZERO
    coupon_amount: int = 0
    price_after_coupon: int
    admin_percent: Decimal = ZERO
    admin_amount: int = 0
    current_price: int
    visa_cost: int = 0
    final_price: int
    savings: int = 0


# ---------------------------------------------------------------------------
# Catalog pricing
# ---------------------------------------------------------------------------

def per_person_price(package: PackageQuote, config: QuantityConfig) -> int:
    days = str(config.days)
    without_flights = package.pricing.get("without_flights", {}).get(days)

    if config.with_flights:
        with_flights = package.pricing.get("with_flights", {}).get(days)
        if with_flights:
            return with_flights
    if without_flights:
        return without_flights

    return package.base_price * config.days


def base_price(package: PackageQuote, config: QuantityConfig) -> int:
    """Undiscounted package portion for a configuration."""
    return per_person_price(package, config) * config.members


def list_price(package: PackageQuote, config: QuantityConfig) -> int:
    """
    Catalog MRP for a configuration, kept at the same list/base ratio as
    the package's headline prices.
    """
    base = base_price(package, config)
    if package.base_price <= 0:
        return base
    ratio = Decimal(package.list_price) / Decimal(package.base_price)
    return max(base, round_amount(base * ratio))


def new_line_item(
    *,
    owner_id: int,
    package: PackageQuote,
    config: QuantityConfig,
    visa_cost: int = 0,
) -> LineItem:
    return LineItem(
        owner_id=owner_id,
        package_ref=package.package_ref,
        config=config,
        current_price=base_price(package, config),
        visa_cost=visa_cost if config.with_visa else 0,
    )


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------

def _require_cart(item: LineItem) -> None:
    if item.lifecycle_state != LifecycleState.cart:
        raise ItemLocked(f"Item {item.id} is already booked", item_id=item.id)


def discount_stage(item: LineItem) -> DiscountStage:
    has_coupon = item.applied_coupon is not None
    has_admin = item.price_before_admin_discount is not None
    if has_coupon and has_admin:
        return DiscountStage.coupon_and_admin
    if has_coupon:
        return DiscountStage.coupon_only
    if has_admin:
        return DiscountStage.admin_only
    return DiscountStage.no_discount


def apply_coupon(item: LineItem, percent, title: str, code: Optional[str] = None) -> LineItem:
    _require_cart(item)
    if item.applied_coupon is not None:
        raise CouponAlreadyApplied(
            f"Item {item.id} already has coupon {coupon_label(item.applied_coupon)}",
            item_id=item.id,
        )
    p = validate_coupon_percent(percent)

    update = {
        "current_price": apply_percent(item.current_price, p),
        "applied_coupon": AppliedCoupon(title=title, percent=p, code=code),
    }
    # coupon is the outer layer: an existing admin baseline moves with it
    if item.price_before_admin_discount is not None:
        update["price_before_admin_discount"] = apply_percent(
            item.price_before_admin_discount, p
        )
    return item.model_copy(update=update)


def remove_coupon(item: LineItem) -> LineItem:
    _require_cart(item)
    if item.applied_coupon is None:
        raise NoCouponApplied(f"Item {item.id} has no coupon", item_id=item.id)
    if item.price_before_admin_discount is not None:
        raise CouponRemovalBlocked(
            f"Remove the admin discount on item {item.id} before its coupon",
            item_id=item.id,
        )

    restored = divide_by_factor(item.current_price, item.applied_coupon.percent)
    return item.model_copy(
        update={"current_price": round_amount(restored), "applied_coupon": None}
    )


def apply_admin_discount(item: LineItem, percent) -> LineItem:
    p = validate_admin_percent(percent)

    if item.price_before_admin_discount is not None:
        baseline = item.price_before_admin_discount
    else:
        baseline = item.current_price

    return item.model_copy(
        update={
            "price_before_admin_discount": baseline,
            "current_price": apply_percent(baseline, p),
        }
    )


def remove_admin_discount(item: LineItem) -> LineItem:
    if item.price_before_admin_discount is None:
        raise NoAdminDiscount(f"Item {item.id} has no admin discount", item_id=item.id)
    return item.model_copy(
        update={
            "current_price": item.price_before_admin_discount,
            "price_before_admin_discount": None,
        }
    )


def reset_to_base(
    item: LineItem,
    package: PackageQuote,
    config: Optional[QuantityConfig] = None,
    visa_cost: Optional[int] = None,
) -> LineItem:
    """
    Reprice after a configuration change; every discount is dropped.

    Turning visa on needs a ``visa_cost``; an item that already includes visa
    keeps its cost unless a new one is given.
    """
    _require_cart(item)
    config = config or item.config

    if not config.with_visa:
        visa = 0
    elif visa_cost is not None:
        visa = visa_cost
    elif item.config.with_visa:
        visa = item.visa_cost
    else:
        raise VisaCostRequired(
            f"Item {item.id} needs a visa cost to include visa", item_id=item.id
        )

    return item.model_copy(
        update={
            "config": config,
            "current_price": base_price(package, config),
            "applied_coupon": None,
            "price_before_admin_discount": None,
            "visa_cost": visa,
        }
    )


def lock_for_booking(item: LineItem, contact: Optional[ContactInfo]) -> LineItem:
    if not can_transition(item.lifecycle_state, LifecycleState.booked):
        raise ItemLocked(f"Item {item.id} is already booked", item_id=item.id)
    return item.model_copy(
        update={"lifecycle_state": LifecycleState.booked, "contact": contact}
    )


# ---------------------------------------------------------------------------
# Reconstruction (read only)
# ---------------------------------------------------------------------------

def effective_admin_percent(item: LineItem) -> Decimal:
    snapshot = item.price_before_admin_discount
    if snapshot is None:
        return ZERO
    if item.current_price > snapshot:
        raise DivisionGuardFailed(
            f"Item {item.id} price {item.current_price} exceeds its admin baseline {snapshot}",
            item_id=item.id,
        )
    if snapshot == 0:
        return ZERO
    return ONE - Decimal(item.current_price) / Decimal(snapshot)


def reconstruct_original_price(item: LineItem) -> int:
    """Price before any discount layer, used as the strike-through price."""
    coupon = item.applied_coupon
    snapshot = item.price_before_admin_discount

    try:
        if coupon is None and snapshot is None:
            return item.current_price
        if snapshot is None:
            return round_amount(divide_by_factor(item.current_price, coupon.percent))
        effective_admin_percent(item)
        if coupon is None:
            return snapshot
        return round_amount(divide_by_factor(snapshot, coupon.percent))
    except DivisionGuardFailed as exc:
        raise exc.for_item(item.id)


def reconstruct_price_after_coupon(item: LineItem) -> int:
    if item.price_before_admin_discount is None:
        return item.current_price
    return item.price_before_admin_discount


def final_price(item: LineItem) -> int:
    return item.current_price + item.visa_cost


def coupon_label(coupon: Optional[AppliedCoupon]) -> Optional[str]:
    if coupon is None:
        return None
    return f"{coupon.title} ({format_percent(coupon.percent)})"


def price_breakdown(item: LineItem) -> PriceBreakdown:
    original = reconstruct_original_price(item)
    after_coupon = reconstruct_price_after_coupon(item)
    coupon = item.applied_coupon

    return PriceBreakdown(
        original_price=original,
        coupon_label=coupon_label(coupon),
        coupon_percent=to_decimal(coupon.percent) if coupon else ZERO,
        coupon_amount=original - after_coupon if coupon else 0,
        price_after_coupon=after_coupon,
        admin_percent=effective_admin_percent(item),
        admin_amount=after_coupon - item.current_price,
        current_price=item.current_price,
        visa_cost=item.visa_cost,
        final_price=final_price(item),
        savings=original - item.current_price,
    )
