from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel
from sqlmodel import Session, select

from travelstore.models.coupon import UserCoupon
from travelstore.pricing.errors import (
    CouponExpired,
    CouponNotFound,
    CouponUsed,
    NotPercentageCoupon,
)
from travelstore.pricing.ledger import AppliedCoupon
from travelstore.pricing.money import parse_percent, validate_coupon_percent


class CouponRecord(BaseModel):
    code: str
    owner_id: int
    title: str
    discount: str
    percent: Optional[Decimal] = None   # None for non-percentage offers
    expires_at: datetime
    used: bool = False


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _to_record(row: UserCoupon) -> CouponRecord:
    try:
        percent = parse_percent(row.discount)
    except NotPercentageCoupon:
        percent = None

    return CouponRecord(
        code=row.coupon_code,
        owner_id=row.user_id,
        title=row.offer_title,
        discount=row.discount,
        percent=percent,
        expires_at=row.expires_at,
        used=row.used,
    )


class CouponDirectory:

    def __init__(self, session: Session):
        self.session = session

    def _row(self, code: str, owner_id: int) -> UserCoupon:
        row = self.session.exec(
            select(UserCoupon).where(
                UserCoupon.coupon_code == normalize_code(code),
                UserCoupon.user_id == owner_id,
            )
        ).first()
        if not row:
            raise CouponNotFound("Invalid or expired coupon code.")
        return row

    def lookup(self, code: str, owner_id: int) -> CouponRecord:
        return _to_record(self._row(code, owner_id))

    def require_redeemable(
        self, code: str, owner_id: int, now: Optional[datetime] = None
    ) -> AppliedCoupon:
        """The coupon as a ledger layer, or the reason it cannot be used."""
        record = self.lookup(code, owner_id)
        now = now or datetime.utcnow()

        if record.used:
            raise CouponUsed("This coupon has already been used.")
        if record.expires_at < now:
            raise CouponExpired("This coupon has expired.")
        if record.percent is None:
            raise NotPercentageCoupon(
                "This coupon is not a percentage discount and cannot be applied here."
            )

        return AppliedCoupon(
            title=record.title,
            percent=validate_coupon_percent(record.percent),
            code=record.code,
        )

    def mark_used(self, code: str, owner_id: int) -> None:
        row = self._row(code, owner_id)
        row.used = True
        row.used_at = datetime.utcnow()
        self.session.add(row)
        self.session.commit()

    def list_available(self, owner_id: int, now: Optional[datetime] = None) -> List[CouponRecord]:
        now = now or datetime.utcnow()
        rows = self.session.exec(
            select(UserCoupon)
            .where(UserCoupon.user_id == owner_id)
            .where(UserCoupon.used == False)  # noqa: E712
            .where(UserCoupon.expires_at >= now)
            .order_by(UserCoupon.expires_at)
        ).all()
        return [_to_record(row) for row in rows]
