from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from travelstore.constants.booking_status import LifecycleState
from travelstore.database import get_session
from travelstore.models.user import User
from travelstore.pricing.ledger import QuantityConfig
from travelstore.schemas.cart_schemas import (
    CartAddRequest,
    CartConfigUpdateRequest,
    CouponCodeRequest,
)
from travelstore.services import cart_service
from travelstore.utils.token import get_current_user

router = APIRouter()


# View Cart

@router.get("/")
def get_cart(
    state: Optional[LifecycleState] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return cart_service.cart_view(
        session=session, owner_id=current_user.id, lifecycle_state=state
    )


# Add to Cart

@router.post("/add")
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    item = cart_service.add_to_cart(
        session=session,
        owner_id=current_user.id,
        package_ref=data.package_id,
        config=QuantityConfig(
            days=data.days,
            members=data.members,
            with_flights=data.with_flights,
            with_visa=data.with_visa,
            selected_date=data.selected_date,
        ),
        visa_cost=data.visa_cost,
    )
    return {"message": "Added to cart", "item": cart_service.line_view(item)}


# Update Cart

@router.put("/items/{item_id}")
def update_cart_item(
    item_id: int,
    data: CartConfigUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    item = cart_service.update_configuration(
        session=session,
        owner_id=current_user.id,
        item_id=item_id,
        days=data.days,
        members=data.members,
        with_flights=data.with_flights,
        with_visa=data.with_visa,
        visa_cost=data.visa_cost,
        selected_date=data.selected_date,
    )
    return {
        "message": "Cart item updated. Any special discounts have been removed.",
        "item": cart_service.line_view(item),
    }


# Remove Cart

@router.delete("/items/{item_id}")
def remove_item(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    cart_service.remove_from_cart(
        session=session, owner_id=current_user.id, item_id=item_id
    )
    return {"message": "Item removed from cart"}


# Item coupon

@router.post("/items/{item_id}/coupon")
def apply_item_coupon(
    item_id: int,
    data: CouponCodeRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    item = cart_service.apply_item_coupon(
        session=session, owner_id=current_user.id, item_id=item_id, code=data.code
    )
    view = cart_service.line_view(item)
    return {"message": f"Success! {view.coupon_label} applied.", "item": view}


@router.delete("/items/{item_id}/coupon")
def remove_item_coupon(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    item = cart_service.remove_item_coupon(
        session=session, owner_id=current_user.id, item_id=item_id
    )
    return {"message": "Coupon removed", "item": cart_service.line_view(item)}


# Cart-wide coupon

@router.post("/coupon")
def apply_cart_coupon(
    data: CouponCodeRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return cart_service.apply_cart_coupon(
        session=session,
        owner_id=current_user.id,
        code=data.code,
        replace=data.replace,
    )


@router.delete("/coupon")
def remove_cart_coupon(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return cart_service.remove_cart_coupon(session=session, owner_id=current_user.id)


@router.get("/coupons")
def list_coupons(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return cart_service.available_coupons(session=session, owner_id=current_user.id)
