from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from travelstore.pricing.errors import (
    CouponExpired,
    CouponNotFound,
    CouponUsed,
    NotPercentageCoupon,
)
from travelstore.services.coupon_directory import CouponDirectory


def test_lookup_is_case_insensitive(session, user, make_coupon):
    make_coupon(user, code="SAVE20")

    record = CouponDirectory(session).lookup(" save20 ", user.id)

    assert record.code == "SAVE20"
    assert record.percent == Decimal("0.2")


def test_coupon_belongs_to_its_owner(session, user, other_user, make_coupon):
    make_coupon(user, code="SAVE20")

    with pytest.raises(CouponNotFound):
        CouponDirectory(session).lookup("SAVE20", other_user.id)


def test_require_redeemable(session, user, make_coupon):
    make_coupon(user, code="SAVE20", title="Summer Sale")

    coupon = CouponDirectory(session).require_redeemable("SAVE20", user.id)

    assert coupon.title == "Summer Sale"
    assert coupon.percent == Decimal("0.2")
    assert coupon.code == "SAVE20"


def test_used_coupon(session, user, make_coupon):
    make_coupon(user, code="USED", used=True)
    with pytest.raises(CouponUsed):
        CouponDirectory(session).require_redeemable("USED", user.id)


def test_expired_coupon(session, user, make_coupon):
    make_coupon(user, code="OLD", expires_in_days=-1)
    with pytest.raises(CouponExpired):
        CouponDirectory(session).require_redeemable("OLD", user.id)


def test_flat_coupon_is_not_percentage(session, user, make_coupon):
    make_coupon(user, code="FLAT500", discount="Rs. 500 off")
    with pytest.raises(NotPercentageCoupon):
        CouponDirectory(session).require_redeemable("FLAT500", user.id)


def test_mark_used_and_list_available(session, user, make_coupon):
    make_coupon(user, code="SAVE20")
    make_coupon(user, code="SAVE10", discount="10%", expires_in_days=3)
    make_coupon(user, code="OLD", expires_in_days=-2)
    directory = CouponDirectory(session)

    directory.mark_used("SAVE20", user.id)

    available = directory.list_available(user.id, datetime.utcnow() + timedelta(seconds=1))
    assert [record.code for record in available] == ["SAVE10"]
    assert directory.lookup("SAVE20", user.id).used
