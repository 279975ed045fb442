from decimal import Decimal

import pytest
from sqlmodel import select

from travelstore.constants.booking_status import LifecycleState
from travelstore.models.coupon import UserCoupon
from travelstore.models.notifications import Notification, RecipientRole
from travelstore.pricing.errors import CouponUsed, ItemLocked, ItemNotFound, NoNewItems
from travelstore.pricing.ledger import ContactInfo, QuantityConfig
from travelstore.services import booking_service, cart_service

CONTACT = ContactInfo(phone_number="9876543210", best_time_to_connect="morning")


def add(session, owner, package, days=5):
    return cart_service.add_to_cart(
        session=session,
        owner_id=owner.id,
        package_ref=package.id,
        config=QuantityConfig(days=days),
    )


def test_convert_selection_with_booking_coupon(session, user, package, make_coupon):
    make_coupon(user, code="FEST15", discount="15%", title="Festive")
    first = add(session, user, package)
    second = add(session, user, package, days=3)

    report = booking_service.convert_selection(
        session=session,
        owner_id=user.id,
        item_ids=[first.id, second.id],
        contact=CONTACT,
        coupon_code="FEST15",
    )

    assert report.complete
    assert sorted(report.booked_ids) == [first.id, second.id]
    assert report.total == 8500 + 5100
    assert report.planned_total == report.total
    assert report.coupon_label == "Festive (15%)"

    booked = booking_service.booked_items(session=session, owner_id=user.id)
    assert {item.lifecycle_state for item in booked} == {LifecycleState.booked}
    assert booked[0].contact == CONTACT

    coupon = session.exec(select(UserCoupon).where(UserCoupon.coupon_code == "FEST15")).one()
    assert coupon.used


def test_booked_coupon_cannot_be_reused(session, user, package, make_coupon):
    make_coupon(user, code="FEST15", discount="15%")
    first = add(session, user, package)
    second = add(session, user, package)
    booking_service.convert_selection(
        session=session, owner_id=user.id, item_ids=[first.id], contact=CONTACT, coupon_code="FEST15"
    )

    with pytest.raises(CouponUsed):
        booking_service.convert_selection(
            session=session, owner_id=user.id, item_ids=[second.id], contact=CONTACT, coupon_code="FEST15"
        )


def test_item_coupon_is_marked_used_at_booking(session, user, package, make_coupon):
    make_coupon(user, code="SAVE20")
    item = add(session, user, package)
    cart_service.apply_item_coupon(session=session, owner_id=user.id, item_id=item.id, code="SAVE20")

    coupon = session.exec(select(UserCoupon).where(UserCoupon.coupon_code == "SAVE20")).one()
    assert not coupon.used

    booking_service.convert_selection(
        session=session, owner_id=user.id, item_ids=[item.id], contact=CONTACT
    )

    session.refresh(coupon)
    assert coupon.used


def test_missing_and_foreign_items_are_reported(session, user, other_user, package):
    mine = add(session, user, package)
    theirs = add(session, other_user, package)

    report = booking_service.convert_selection(
        session=session,
        owner_id=user.id,
        item_ids=[mine.id, theirs.id, 999, mine.id],
        contact=CONTACT,
    )

    assert report.booked_ids == [mine.id]
    assert not report.complete
    assert sorted(f.item_id for f in report.failed) == sorted([theirs.id, 999])
    assert {f.code for f in report.failed} == {"item_not_found"}


def test_already_booked_items_are_left_alone(session, user, package):
    first = add(session, user, package)
    second = add(session, user, package, days=3)
    booking_service.convert_selection(
        session=session, owner_id=user.id, item_ids=[first.id], contact=CONTACT
    )

    report = booking_service.convert_selection(
        session=session, owner_id=user.id, item_ids=[first.id, second.id], contact=CONTACT
    )

    assert report.booked_ids == [second.id]
    assert report.untouched_ids == [first.id]
    assert report.total == 10000 + 6000

    with pytest.raises(NoNewItems):
        booking_service.convert_selection(
            session=session, owner_id=user.id, item_ids=[first.id], contact=CONTACT
        )


def test_booking_locks_items_and_notifies_admin(session, user, package, admin):
    item = add(session, user, package)
    booking_service.convert_selection(
        session=session, owner_id=user.id, item_ids=[item.id], contact=CONTACT
    )

    with pytest.raises(ItemLocked):
        cart_service.remove_item_coupon(session=session, owner_id=user.id, item_id=item.id)

    notes = session.exec(
        select(Notification).where(Notification.recipient_role == RecipientRole.admin)
    ).all()
    assert len(notes) == 1
    assert "9876543210" in notes[0].content


def test_admin_discount_still_allowed_after_booking(session, user, package, admin):
    item = add(session, user, package)
    booking_service.convert_selection(
        session=session, owner_id=user.id, item_ids=[item.id], contact=CONTACT
    )

    after = cart_service.apply_admin_discount(
        session=session, item_id=item.id, discount_points=Decimal("10"), admin_id=admin.id
    )
    assert after.current_price == 9000
    assert after.lifecycle_state == LifecycleState.booked


def test_selection_with_no_owned_items_names_missing_ids(session, user, other_user, package):
    theirs = add(session, other_user, package)

    with pytest.raises(ItemNotFound) as exc:
        booking_service.convert_selection(
            session=session, owner_id=user.id, item_ids=[theirs.id, 999], contact=CONTACT
        )

    assert str(theirs.id) in exc.value.message
    assert "999" in exc.value.message
