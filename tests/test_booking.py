from decimal import Decimal

import pytest

from travelstore.constants.booking_status import LifecycleState
from travelstore.pricing import booking, ledger
from travelstore.pricing.errors import CouponAlreadyApplied, NoNewItems
from travelstore.pricing.ledger import AppliedCoupon, ContactInfo, LineItem, QuantityConfig

CONTACT = ContactInfo(phone_number="9876543210", best_time_to_connect="evening")
BOOKING_COUPON = AppliedCoupon(title="Festive", percent=Decimal("0.15"), code="FEST15")


def make_item(item_id, price, **kwargs):
    return LineItem(
        id=item_id,
        owner_id=7,
        package_ref=3,
        config=QuantityConfig(days=5),
        current_price=price,
        **kwargs,
    )


def test_booking_coupon_applies_same_percent_to_each_item():
    plan = booking.convert_to_booking(
        [make_item(1, 10000), make_item(2, 5000)], BOOKING_COUPON, CONTACT
    )

    prices = {item.id: item.current_price for item in plan.converted}
    assert prices == {1: 8500, 2: 4250}
    assert plan.total == 12750
    assert plan.total_discount == 2250

    shares = {line.item_id: line.weight_share for line in plan.lines}
    assert shares[1] == Decimal(10000) / Decimal(15000)
    assert shares[2] == Decimal(5000) / Decimal(15000)


def test_converted_items_are_booked_with_contact():
    plan = booking.convert_to_booking([make_item(1, 10000)], None, CONTACT)

    item = plan.converted[0]
    assert item.lifecycle_state == LifecycleState.booked
    assert item.contact == CONTACT
    assert item.current_price == 10000
    assert plan.coupon is None


def test_already_booked_items_are_untouched():
    booked = make_item(1, 9000, lifecycle_state=LifecycleState.booked)
    fresh = make_item(2, 5000)

    plan = booking.convert_to_booking([booked, fresh], BOOKING_COUPON, CONTACT)

    assert [item.id for item in plan.converted] == [2]
    assert plan.untouched == [booked]
    assert plan.total == 9000 + 4250

    untouched_line = next(line for line in plan.lines if line.item_id == 1)
    assert untouched_line.already_booked
    assert untouched_line.price_after == 9000


def test_selection_of_only_booked_items():
    booked = make_item(1, 9000, lifecycle_state=LifecycleState.booked)
    with pytest.raises(NoNewItems):
        booking.convert_to_booking([booked], BOOKING_COUPON, CONTACT)


def test_booking_coupon_is_all_or_nothing():
    couponed = ledger.apply_coupon(make_item(2, 5000), Decimal("0.1"), "Early")

    with pytest.raises(CouponAlreadyApplied) as exc:
        booking.convert_to_booking([make_item(1, 10000), couponed], BOOKING_COUPON, CONTACT)
    assert exc.value.item_id == 2


def test_weight_uses_original_price():
    discounted = ledger.apply_admin_discount(make_item(1, 10000), Decimal("0.5"))
    plan = booking.convert_to_booking([discounted, make_item(2, 10000)], BOOKING_COUPON, CONTACT)

    weights = {line.item_id: line.weight for line in plan.lines}
    assert weights == {1: 10000, 2: 10000}


def test_distribute_coupon_skips_items_with_coupon():
    couponed = ledger.apply_coupon(make_item(2, 5000), Decimal("0.1"), "Early")
    booked = make_item(3, 7000, lifecycle_state=LifecycleState.booked)

    result = booking.distribute_coupon([make_item(1, 10000), couponed, booked], BOOKING_COUPON)

    assert [item.id for item in result.updated] == [1]
    assert [item.id for item in result.skipped] == [2, 3]
    assert result.updated[0].current_price == 8500
    assert result.updated[0].applied_coupon.code == "FEST15"
    assert result.total == 8500 + 4500 + 7000


def test_distribute_coupon_needs_an_eligible_item():
    couponed = ledger.apply_coupon(make_item(1, 5000), Decimal("0.1"), "Early")
    with pytest.raises(NoNewItems):
        booking.distribute_coupon([couponed], BOOKING_COUPON)


def test_replace_booking_coupon():
    items = [
        ledger.apply_coupon(make_item(1, 10000), Decimal("0.1"), "Early"),
        make_item(2, 5000),
    ]

    result = booking.replace_booking_coupon(items, BOOKING_COUPON)

    prices = {item.id: item.current_price for item in result.updated}
    assert prices == {1: 8500, 2: 4250}
    assert all(item.applied_coupon.title == "Festive" for item in result.updated)


def test_selection_total_includes_visa():
    items = [make_item(1, 10000, visa_cost=1500), make_item(2, 5000)]
    assert booking.selection_total(items) == 16500
