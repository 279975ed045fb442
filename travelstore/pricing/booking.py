"""
Cart -> booking conversion and booking-coupon distribution.

A booking coupon is never split as a lump sum. Each eligible item gets the
same percentage through ``ledger.apply_coupon``, so an item's share of the
total discount follows its own pre-discount value (its weight).
"""

from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from travelstore.constants.booking_status import LifecycleState
from travelstore.pricing import ledger
from travelstore.pricing.errors import NoNewItems, PricingError
from travelstore.pricing.ledger import AppliedCoupon, ContactInfo, LineItem
from travelstore.pricing.money import ZERO


class BookingLine(BaseModel):
    item_id: Optional[int]
    weight: int
    weight_share: Decimal = ZERO
    price_before: int
    price_after: int
    discount_amount: int = 0
    visa_cost: int = 0
    final_price: int
    already_booked: bool = False


class BookingPlan(BaseModel):
    converted: List[LineItem]
    untouched: List[LineItem]
    lines: List[BookingLine]
    coupon: Optional[AppliedCoupon] = None
    contact: Optional[ContactInfo] = None
    total: int
    total_discount: int = 0


class CouponDistribution(BaseModel):
    updated: List[LineItem]
    skipped: List[LineItem]
    lines: List[BookingLine]
    coupon: AppliedCoupon
    total: int
    total_discount: int = 0


def selection_total(items: Iterable[LineItem]) -> int:
    return sum(ledger.final_price(item) for item in items)


def _weights(items: Sequence[LineItem]) -> List[int]:
    return [ledger.reconstruct_original_price(item) for item in items]


def _share(weight: int, total_weight: int) -> Decimal:
    if total_weight <= 0:
        return ZERO
    return Decimal(weight) / Decimal(total_weight)


def _apply_each(
    items: Sequence[LineItem], coupon: Optional[AppliedCoupon]
) -> Tuple[List[LineItem], List[BookingLine]]:
    weights = _weights(items)
    total_weight = sum(weights)

    updated = []
    lines = []
    for item, weight in zip(items, weights):
        priced = item
        if coupon is not None:
            try:
                priced = ledger.apply_coupon(item, coupon.percent, coupon.title, coupon.code)
            except PricingError as exc:
                raise exc.for_item(item.id)

        updated.append(priced)
        lines.append(
            BookingLine(
                item_id=item.id,
                weight=weight,
                weight_share=_share(weight, total_weight),
                price_before=item.current_price,
                price_after=priced.current_price,
                discount_amount=item.current_price - priced.current_price,
                visa_cost=priced.visa_cost,
                final_price=ledger.final_price(priced),
            )
        )
    return updated, lines


def convert_to_booking(
    selection: Sequence[LineItem],
    booking_coupon: Optional[AppliedCoupon] = None,
    contact: Optional[ContactInfo] = None,
) -> BookingPlan:
    """
    Plan the conversion of the cart items in ``selection``.

    Items already booked stay exactly as they are. The plan is all or
    nothing: if any new item rejects the booking coupon, the error is raised
    with that item's id and nothing is converted.
    """
    already_booked = [i for i in selection if i.lifecycle_state == LifecycleState.booked]
    new_items = [i for i in selection if i.lifecycle_state == LifecycleState.cart]

    if not new_items:
        raise NoNewItems("Every selected package is already booked")

    priced, lines = _apply_each(new_items, booking_coupon)
    converted = [ledger.lock_for_booking(item, contact) for item in priced]

    for item in already_booked:
        price = item.current_price
        lines.append(
            BookingLine(
                item_id=item.id,
                weight=ledger.reconstruct_original_price(item),
                price_before=price,
                price_after=price,
                visa_cost=item.visa_cost,
                final_price=ledger.final_price(item),
                already_booked=True,
            )
        )

    return BookingPlan(
        converted=converted,
        untouched=list(already_booked),
        lines=lines,
        coupon=booking_coupon,
        contact=contact,
        total=selection_total(already_booked) + selection_total(converted),
        total_discount=sum(line.discount_amount for line in lines),
    )


def distribute_coupon(items: Sequence[LineItem], coupon: AppliedCoupon) -> CouponDistribution:
    """Apply one coupon to every cart item that does not carry one yet."""
    eligible = []
    skipped = []
    for item in items:
        if item.lifecycle_state == LifecycleState.cart and item.applied_coupon is None:
            eligible.append(item)
        else:
            skipped.append(item)

    if not eligible:
        raise NoNewItems("No cart item can take this coupon")

    updated, lines = _apply_each(eligible, coupon)
    return CouponDistribution(
        updated=updated,
        skipped=skipped,
        lines=lines,
        coupon=coupon,
        total=selection_total(updated) + selection_total(skipped),
        total_discount=sum(line.discount_amount for line in lines),
    )


def strip_coupons(items: Sequence[LineItem]) -> List[LineItem]:
    """Remove the coupon from every item that has one."""
    stripped = []
    for item in items:
        if item.applied_coupon is None:
            stripped.append(item)
            continue
        try:
            stripped.append(ledger.remove_coupon(item))
        except PricingError as exc:
            raise exc.for_item(item.id)
    return stripped


def replace_booking_coupon(items: Sequence[LineItem], coupon: AppliedCoupon) -> CouponDistribution:
    """
    Swap the booking-level coupon on ``items``: remove the old one layer by
    layer, then distribute the new one from the restored prices.
    """
    return distribute_coupon(strip_coupons(items), coupon)
