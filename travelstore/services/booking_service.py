import logging
from typing import List, Optional

from sqlmodel import Session

from travelstore.constants.booking_status import LifecycleState
from travelstore.notifications import ItemChange, publish
from travelstore.pricing import booking, ledger
from travelstore.pricing.errors import ItemNotFound, PricingError
from travelstore.pricing.ledger import ContactInfo, LineItem
from travelstore.schemas.booking_schemas import BookingReport
from travelstore.services.cart_service import failure, save_each
from travelstore.services.coupon_directory import CouponDirectory
from travelstore.services.line_item_repository import LineItemRepository

logger = logging.getLogger(__name__)


def _mark_coupons_used(directory: CouponDirectory, owner_id: int, booked: List[LineItem]) -> None:
    codes = {
        item.applied_coupon.code
        for item in booked
        if item.applied_coupon is not None and item.applied_coupon.code
    }
    for code in sorted(codes):
        try:
            directory.mark_used(code, owner_id)
        except PricingError as exc:
            logger.warning(f"Could not mark coupon {code} used for user {owner_id}: {exc.message}")


def convert_selection(
    *,
    session: Session,
    owner_id: int,
    item_ids: List[int],
    contact: ContactInfo,
    coupon_code: Optional[str] = None,
) -> BookingReport:
    """
    Book the selected cart items, optionally distributing a booking coupon
    over the ones not booked yet.

    Each converted item is written on its own. The report lists exactly
    which items were booked, which were already booked and left alone, and
    which failed and why.
    """
    repo = LineItemRepository(session)
    directory = CouponDirectory(session)

    requested = list(dict.fromkeys(item_ids))
    items = [item for item in repo.load_many(requested) if item.owner_id == owner_id]
    found = {item.id for item in items}
    failed = [
        failure(ItemNotFound(f"Cart item {item_id} not found", item_id=item_id))
        for item_id in requested
        if item_id not in found
    ]
    if not items:
        missing = ", ".join(str(f.item_id) for f in failed)
        raise ItemNotFound(f"Cart items {missing} not found")

    coupon = directory.require_redeemable(coupon_code, owner_id) if coupon_code else None
    plan = booking.convert_to_booking(items, coupon, contact)

    originals = {item.id: item for item in items}
    booked, write_failures = save_each(repo, originals, plan.converted)
    failed.extend(write_failures)

    _mark_coupons_used(directory, owner_id, booked)

    for item in booked:
        publish(
            session=session,
            item_id=item.id,
            change=ItemChange.BOOKED,
            owner_id=owner_id,
            created_by="customer",
            extra={
                "admin_title": "New booking",
                "admin_content": (
                    f"Cart item {item.id} booked for {ledger.final_price(item)}; "
                    f"call {contact.phone_number}"
                    + (f" ({contact.best_time_to_connect})" if contact.best_time_to_connect else "")
                ),
                "meta": {"final_price": ledger.final_price(item)},
            },
        )

    logger.info(
        f"User {owner_id} booked {len(booked)} item(s), "
        f"{len(plan.untouched)} already booked, {len(failed)} failed"
    )

    return BookingReport(
        booked_ids=[item.id for item in booked],
        untouched_ids=[item.id for item in plan.untouched],
        failed=failed,
        lines=plan.lines,
        coupon_label=ledger.coupon_label(coupon),
        total=booking.selection_total(plan.untouched) + booking.selection_total(booked),
        planned_total=plan.total,
        total_discount=plan.total_discount,
        complete=not failed,
    )


def booked_items(*, session: Session, owner_id: int) -> List[LineItem]:
    return LineItemRepository(session).list_by_owner(owner_id, LifecycleState.booked)
