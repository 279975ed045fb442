# -------- ADMIN CART REVIEW --------
from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from travelstore.constants.booking_status import LifecycleState
from travelstore.database import get_session
from travelstore.models.package import Package
from travelstore.models.user import User
from travelstore.schemas.admin_schemas import (
    AdminDiscountRequest,
    AdminItemDetail,
    TimelineEntry,
)
from travelstore.services import cart_service
from travelstore.services.item_event_service import item_timeline
from travelstore.services.line_item_repository import LineItemRepository, to_line_item
from travelstore.utils.pagination import paginate
from travelstore.utils.token import get_current_admin

router = APIRouter()


def _detail(session: Session, item_id: int) -> AdminItemDetail:
    item = LineItemRepository(session).load(item_id)
    owner = session.get(User, item.owner_id)

    return AdminItemDetail(
        owner_id=item.owner_id,
        customer_name=f"{owner.first_name} {owner.last_name}" if owner else None,
        customer_email=owner.email if owner else None,
        item=cart_service.line_view(item, session.get(Package, item.package_ref)),
        timeline=[
            TimelineEntry(
                event_type=e.event_type,
                label=e.label,
                created_by=e.created_by,
                created_at=e.created_at,
                meta=e.meta,
            )
            for e in item_timeline(session, item_id)
        ],
    )


@router.get("")
def list_items(
    page: int = 1,
    limit: int = 10,
    state: Optional[LifecycleState] = None,
    user_id: Optional[int] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    return paginate(
        session=session,
        query=LineItemRepository.query(user_id, state),
        page=page,
        limit=limit,
        transform=lambda row: cart_service.line_view(to_line_item(row)),
    )


@router.get("/{item_id}", response_model=AdminItemDetail)
def item_details(
    item_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    return _detail(session, item_id)


@router.post("/{item_id}/discount", response_model=AdminItemDetail)
def apply_discount(
    item_id: int,
    data: AdminDiscountRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin),
):
    cart_service.apply_admin_discount(
        session=session,
        item_id=item_id,
        discount_points=data.discount_percent,
        admin_id=admin.id,
    )
    return _detail(session, item_id)


@router.delete("/{item_id}/discount", response_model=AdminItemDetail)
def remove_discount(
    item_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin),
):
    cart_service.remove_admin_discount(session=session, item_id=item_id, admin_id=admin.id)
    return _detail(session, item_id)
