"""
SQLModel-backed store for cart line items.

Writes are guarded by the row's ``updated_at``: ``save`` only lands when the
stored token still equals the one the caller loaded, otherwise the caller
gets ``StaleWrite`` and must reload before trying again.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from travelstore.constants.booking_status import LifecycleState
from travelstore.models.cart import CartItem
from travelstore.pricing.errors import ItemNotFound, StaleWrite
from travelstore.pricing.ledger import AppliedCoupon, ContactInfo, LineItem, QuantityConfig

logger = logging.getLogger(__name__)


def next_token(previous: Optional[datetime]) -> datetime:
    """A fresh updated_at that is strictly later than the previous one."""
    now = datetime.utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def to_line_item(row: CartItem) -> LineItem:
    coupon = None
    if row.coupon_percent is not None:
        coupon = AppliedCoupon(
            title=row.coupon_title or "Coupon",
            percent=Decimal(str(row.coupon_percent)),
            code=row.coupon_code,
        )

    contact = None
    if row.phone_number:
        contact = ContactInfo(
            phone_number=row.phone_number,
            best_time_to_connect=row.best_time_to_connect,
        )

    return LineItem(
        id=row.id,
        owner_id=row.user_id,
        package_ref=row.package_id,
        config=QuantityConfig(
            days=row.days,
            members=row.members,
            with_flights=row.with_flights,
            with_visa=row.with_visa,
            selected_date=row.selected_date,
        ),
        current_price=row.total_price,
        price_before_admin_discount=row.price_before_admin_discount,
        applied_coupon=coupon,
        visa_cost=row.visa_cost,
        lifecycle_state=LifecycleState(row.booking_type),
        contact=contact,
        updated_at=row.updated_at,
    )


def row_values(item: LineItem) -> dict:
    coupon = item.applied_coupon
    contact = item.contact
    return {
        "user_id": item.owner_id,
        "package_id": item.package_ref,
        "days": item.config.days,
        "members": item.config.members,
        "with_flights": item.config.with_flights,
        "with_visa": item.config.with_visa,
        "selected_date": item.config.selected_date,
        "total_price": item.current_price,
        "price_before_admin_discount": item.price_before_admin_discount,
        "coupon_title": coupon.title if coupon else None,
        "coupon_percent": coupon.percent if coupon else None,
        "coupon_code": coupon.code if coupon else None,
        "visa_cost": item.visa_cost,
        "booking_type": item.lifecycle_state.value,
        "phone_number": contact.phone_number if contact else None,
        "best_time_to_connect": contact.best_time_to_connect if contact else None,
    }


class LineItemRepository:

    def __init__(self, session: Session):
        self.session = session

    def add(self, item: LineItem) -> LineItem:
        now = datetime.utcnow()
        row = CartItem(**row_values(item), created_at=now, updated_at=now)

        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)

        logger.info(f"Created cart item {row.id} for user {row.user_id}")
        return to_line_item(row)

    def load(self, item_id: int) -> LineItem:
        row = self.session.get(CartItem, item_id, populate_existing=True)
        if not row:
            raise ItemNotFound(f"Cart item {item_id} not found", item_id=item_id)
        return to_line_item(row)

    def save(self, item: LineItem, expected_updated_at: datetime) -> LineItem:
        values = row_values(item)
        values["updated_at"] = next_token(expected_updated_at)

        result = self.session.execute(
            update(CartItem)
            .where(CartItem.id == item.id)
            .where(CartItem.updated_at == expected_updated_at)
            .values(**values)
        )

        if result.rowcount != 1:
            self.session.rollback()
            if self.session.get(CartItem, item.id) is None:
                raise ItemNotFound(f"Cart item {item.id} not found", item_id=item.id)
            logger.warning(f"Stale write on cart item {item.id} (expected {expected_updated_at})")
            raise StaleWrite(
                f"Cart item {item.id} changed since it was loaded", item_id=item.id
            )

        self.session.commit()
        return self.load(item.id)

    def delete(self, item_id: int) -> None:
        row = self.session.get(CartItem, item_id)
        if not row:
            raise ItemNotFound(f"Cart item {item_id} not found", item_id=item_id)
        self.session.delete(row)
        self.session.commit()
        logger.info(f"Deleted cart item {item_id}")

    def list_by_owner(
        self,
        owner_id: int,
        lifecycle_state: Optional[LifecycleState] = None,
    ) -> List[LineItem]:
        return [to_line_item(row) for row in self.session.exec(self.query(owner_id, lifecycle_state)).all()]

    def load_many(self, item_ids: List[int]) -> List[LineItem]:
        rows = self.session.exec(
            select(CartItem).where(CartItem.id.in_(item_ids))
        ).all()
        by_id = {row.id: row for row in rows}
        return [to_line_item(by_id[i]) for i in item_ids if i in by_id]

    @staticmethod
    def query(
        owner_id: Optional[int] = None,
        lifecycle_state: Optional[LifecycleState] = None,
    ):
        query = select(CartItem)
        if owner_id is not None:
            query = query.where(CartItem.user_id == owner_id)
        if lifecycle_state is not None:
            query = query.where(CartItem.booking_type == lifecycle_state.value)
        return query.order_by(CartItem.created_at, CartItem.id)
