"""
Cart orchestration: load the persisted item, run the ledger, write it back
guarded by updated_at, then publish the change.

Nothing here keeps prices in memory between requests; every view is built
from freshly loaded items.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from sqlmodel import Session

from travelstore.config import settings
from travelstore.constants.booking_status import LifecycleState
from travelstore.models.package import Package
from travelstore.notifications import ItemChange, publish
from travelstore.pricing import booking, ledger
from travelstore.pricing.errors import ItemLocked, ItemNotFound, PricingError, StaleWrite
from travelstore.pricing.ledger import LineItem, QuantityConfig
from travelstore.pricing.money import format_percent, percent_from_points
from travelstore.schemas.cart_schemas import (
    AvailableCoupon,
    CartLineView,
    CartSummary,
    CartView,
    CouponReport,
    ItemFailure,
)
from travelstore.services.coupon_directory import CouponDirectory
from travelstore.services.line_item_repository import LineItemRepository
from travelstore.services.package_catalog import PackageCatalog, to_quote

logger = logging.getLogger(__name__)


def failure(exc: PricingError, item_id: Optional[int] = None) -> ItemFailure:
    return ItemFailure(
        item_id=exc.item_id if exc.item_id is not None else item_id,
        code=exc.code,
        detail=exc.message,
    )


def load_owned(repo: LineItemRepository, item_id: int, owner_id: Optional[int]) -> LineItem:
    item = repo.load(item_id)
    if owner_id is not None and item.owner_id != owner_id:
        raise ItemNotFound(f"Cart item {item_id} not found", item_id=item_id)
    return item


def mutate_item(
    *,
    session: Session,
    item_id: int,
    change: Callable[[LineItem], LineItem],
    owner_id: Optional[int] = None,
) -> Tuple[LineItem, LineItem]:
    """
    Read-compute-write one item, reloading and recomputing when another
    writer got there first. Returns (before, after).
    """
    repo = LineItemRepository(session)
    attempts = max(1, settings.stale_write_retries)

    for attempt in range(1, attempts + 1):
        current = load_owned(repo, item_id, owner_id)
        updated = change(current)
        try:
            return current, repo.save(updated, expected_updated_at=current.updated_at)
        except StaleWrite:
            if attempt == attempts:
                raise
            logger.warning(f"Retrying cart item {item_id} after stale write (attempt {attempt})")

    raise StaleWrite(f"Cart item {item_id} kept changing", item_id=item_id)


def save_each(
    repo: LineItemRepository,
    originals: dict,
    updated: List[LineItem],
) -> Tuple[List[LineItem], List[ItemFailure]]:
    """Independent guarded writes; no silent partial success."""
    saved = []
    failed = []
    for item in updated:
        try:
            saved.append(repo.save(item, expected_updated_at=originals[item.id].updated_at))
        except PricingError as exc:
            failed.append(failure(exc, item.id))
    return saved, failed


# -------------------------
# SHOPPER: CART ITEMS
# -------------------------

def add_to_cart(
    *,
    session: Session,
    owner_id: int,
    package_ref: int,
    config: QuantityConfig,
    visa_cost: int = 0,
) -> LineItem:
    package = PackageCatalog(session).get_active(package_ref)
    item = ledger.new_line_item(
        owner_id=owner_id, package=package, config=config, visa_cost=visa_cost
    )
    created = LineItemRepository(session).add(item)

    logger.info(f"User {owner_id} added package {package_ref} for {created.current_price}")
    publish(
        session=session,
        item_id=created.id,
        change=ItemChange.ADDED,
        owner_id=owner_id,
        created_by="customer",
        extra={"meta": {"price": created.current_price}},
    )
    return created


def update_configuration(
    *,
    session: Session,
    owner_id: int,
    item_id: int,
    days: int,
    members: Optional[int] = None,
    with_flights: Optional[bool] = None,
    with_visa: Optional[bool] = None,
    visa_cost: Optional[int] = None,
    selected_date: Optional[datetime] = None,
) -> LineItem:
    catalog = PackageCatalog(session)

    def change(item: LineItem) -> LineItem:
        current = item.config
        config = QuantityConfig(
            days=days,
            members=members if members is not None else current.members,
            with_flights=with_flights if with_flights is not None else current.with_flights,
            with_visa=with_visa if with_visa is not None else current.with_visa,
            selected_date=selected_date or current.selected_date,
        )
        return ledger.reset_to_base(item, catalog.get(item.package_ref), config, visa_cost)

    before, after = mutate_item(
        session=session, item_id=item_id, owner_id=owner_id, change=change
    )

    logger.info(f"Cart item {item_id} repriced {before.current_price} -> {after.current_price}")
    publish(
        session=session,
        item_id=item_id,
        change=ItemChange.CONFIG_RESET,
        owner_id=owner_id,
        created_by="customer",
        extra={
            "label": "Configuration changed, discounts removed",
            "meta": {"before": before.current_price, "after": after.current_price},
        },
    )
    return after


def remove_from_cart(*, session: Session, owner_id: int, item_id: int) -> None:
    repo = LineItemRepository(session)
    item = load_owned(repo, item_id, owner_id)
    if item.lifecycle_state != LifecycleState.cart:
        raise ItemLocked("Booked packages cannot be removed from the cart", item_id=item_id)

    repo.delete(item_id)
    publish(
        session=session,
        item_id=item_id,
        change=ItemChange.REMOVED,
        owner_id=owner_id,
        created_by="customer",
    )


# -------------------------
# SHOPPER: COUPONS
# -------------------------

def apply_item_coupon(*, session: Session, owner_id: int, item_id: int, code: str) -> LineItem:
    coupon = CouponDirectory(session).require_redeemable(code, owner_id)

    before, after = mutate_item(
        session=session,
        item_id=item_id,
        owner_id=owner_id,
        change=lambda item: ledger.apply_coupon(item, coupon.percent, coupon.title, coupon.code),
    )

    logger.info(
        f"Coupon {coupon.code} ({format_percent(coupon.percent)}) on item {item_id}: "
        f"{before.current_price} -> {after.current_price}"
    )
    publish(
        session=session,
        item_id=item_id,
        change=ItemChange.COUPON_APPLIED,
        owner_id=owner_id,
        created_by="customer",
        extra={"label": f"Coupon applied: {ledger.coupon_label(after.applied_coupon)}"},
    )
    return after


def remove_item_coupon(*, session: Session, owner_id: int, item_id: int) -> LineItem:
    before, after = mutate_item(
        session=session,
        item_id=item_id,
        owner_id=owner_id,
        change=ledger.remove_coupon,
    )

    publish(
        session=session,
        item_id=item_id,
        change=ItemChange.COUPON_REMOVED,
        owner_id=owner_id,
        created_by="customer",
        extra={"meta": {"before": before.current_price, "after": after.current_price}},
    )
    return after


def _coupon_report(coupon, distribution, failed, saved) -> CouponReport:
    return CouponReport(
        coupon_label=ledger.coupon_label(coupon),
        updated_ids=[item.id for item in saved],
        skipped_ids=[item.id for item in distribution.skipped],
        failed=failed,
        total=booking.selection_total(saved) + booking.selection_total(distribution.skipped),
        total_discount=distribution.total_discount,
        complete=not failed,
    )


def apply_cart_coupon(
    *, session: Session, owner_id: int, code: str, replace: bool = False
) -> CouponReport:
    """
    Spread one coupon over the shopper's cart. With ``replace`` an existing
    coupon is first removed from every item, then the new one distributed.
    """
    coupon = CouponDirectory(session).require_redeemable(code, owner_id)
    repo = LineItemRepository(session)
    items = repo.list_by_owner(owner_id, LifecycleState.cart)
    originals = {item.id: item for item in items}

    if replace:
        distribution = booking.replace_booking_coupon(items, coupon)
    else:
        distribution = booking.distribute_coupon(items, coupon)

    saved, failed = save_each(repo, originals, distribution.updated)
    report = _coupon_report(coupon, distribution, failed, saved)

    for item in saved:
        publish(
            session=session,
            item_id=item.id,
            change=ItemChange.COUPON_APPLIED,
            owner_id=owner_id,
            created_by="customer",
            extra={"label": f"Coupon applied: {report.coupon_label}"},
        )

    logger.info(
        f"Cart coupon {coupon.code} for user {owner_id}: "
        f"{len(saved)} updated, {len(failed)} failed"
    )
    return report


def remove_cart_coupon(*, session: Session, owner_id: int) -> CouponReport:
    repo = LineItemRepository(session)
    items = [
        item for item in repo.list_by_owner(owner_id, LifecycleState.cart)
        if item.applied_coupon is not None
    ]

    saved = []
    failed = []
    for item in items:
        try:
            _, after = mutate_item(
                session=session, item_id=item.id, owner_id=owner_id, change=ledger.remove_coupon
            )
        except PricingError as exc:
            failed.append(failure(exc, item.id))
            continue
        saved.append(after)
        publish(
            session=session,
            item_id=item.id,
            change=ItemChange.COUPON_REMOVED,
            owner_id=owner_id,
            created_by="customer",
        )

    return CouponReport(
        updated_ids=[item.id for item in saved],
        failed=failed,
        total=booking.selection_total(repo.list_by_owner(owner_id, LifecycleState.cart)),
        complete=not failed,
    )


def available_coupons(*, session: Session, owner_id: int) -> List[AvailableCoupon]:
    now = datetime.utcnow()
    return [
        AvailableCoupon(
            code=record.code,
            title=record.title,
            discount=record.discount,
            expires_at=record.expires_at,
            days_left=max(0, (record.expires_at - now).days),
        )
        for record in CouponDirectory(session).list_available(owner_id, now)
    ]


# -------------------------
# ADMIN: DISCOUNT OVERRIDE
# -------------------------

def apply_admin_discount(
    *, session: Session, item_id: int, discount_points, admin_id: int
) -> LineItem:
    percent = percent_from_points(discount_points)

    before, after = mutate_item(
        session=session,
        item_id=item_id,
        change=lambda item: ledger.apply_admin_discount(item, percent),
    )

    logger.info(
        f"Admin {admin_id} set {format_percent(percent)} on item {item_id}: "
        f"{before.current_price} -> {after.current_price}"
    )
    publish(
        session=session,
        item_id=item_id,
        change=ItemChange.ADMIN_DISCOUNT_APPLIED,
        owner_id=after.owner_id,
        created_by=f"admin:{admin_id}",
        extra={
            "label": f"Special discount {format_percent(percent)}",
            "meta": {"percent": str(percent), "before": before.current_price, "after": after.current_price},
            "user_content": f"Your package now costs {ledger.final_price(after)}.",
        },
    )
    return after


def remove_admin_discount(*, session: Session, item_id: int, admin_id: int) -> LineItem:
    before, after = mutate_item(
        session=session,
        item_id=item_id,
        change=ledger.remove_admin_discount,
    )

    publish(
        session=session,
        item_id=item_id,
        change=ItemChange.ADMIN_DISCOUNT_REMOVED,
        owner_id=after.owner_id,
        created_by=f"admin:{admin_id}",
        extra={
            "meta": {"before": before.current_price, "after": after.current_price},
            "user_content": f"Your package now costs {ledger.final_price(after)}.",
        },
    )
    return after


# -------------------------
# VIEWS
# -------------------------

def line_view(item: LineItem, package: Optional[Package] = None) -> CartLineView:
    breakdown = ledger.price_breakdown(item)

    list_price = None
    package_title = None
    if package is not None:
        package_title = package.title
        list_price = ledger.list_price(to_quote(package), item.config)

    return CartLineView(
        item_id=item.id,
        package_id=item.package_ref,
        package_title=package_title,
        days=item.config.days,
        members=item.config.members,
        with_flights=item.config.with_flights,
        with_visa=item.config.with_visa,
        state=item.lifecycle_state,
        discount_stage=ledger.discount_stage(item).value,
        list_price=list_price,
        original_price=breakdown.original_price,
        coupon_label=breakdown.coupon_label,
        coupon_amount=breakdown.coupon_amount,
        price_after_coupon=breakdown.price_after_coupon,
        admin_percent=breakdown.admin_percent,
        admin_amount=breakdown.admin_amount,
        current_price=breakdown.current_price,
        visa_cost=breakdown.visa_cost,
        final_price=breakdown.final_price,
        savings=breakdown.savings,
        contact=item.contact,
        updated_at=item.updated_at,
    )


def summarize(items: List[LineItem]) -> CartSummary:
    original_total = sum(ledger.reconstruct_original_price(i) + i.visa_cost for i in items)
    total = booking.selection_total(items)
    first_coupon = next((i.applied_coupon for i in items if i.applied_coupon), None)

    return CartSummary(
        items_count=len(items),
        original_total=original_total,
        savings=original_total - total,
        total=total,
        coupon_label=ledger.coupon_label(first_coupon),
    )


def cart_view(
    *,
    session: Session,
    owner_id: int,
    lifecycle_state: Optional[LifecycleState] = None,
) -> CartView:
    items = LineItemRepository(session).list_by_owner(owner_id, lifecycle_state)
    packages = {}
    for item in items:
        if item.package_ref not in packages:
            packages[item.package_ref] = session.get(Package, item.package_ref)

    return CartView(
        items=[line_view(item, packages.get(item.package_ref)) for item in items],
        summary=summarize(items),
    )
