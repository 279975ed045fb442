from fastapi import APIRouter, Depends
from sqlmodel import Session

from travelstore.database import get_session
from travelstore.models.user import User
from travelstore.schemas.booking_schemas import BookingReport, BookingRequest
from travelstore.services import booking_service, cart_service
from travelstore.utils.token import get_current_user

router = APIRouter()


@router.post("", response_model=BookingReport)
def book_selection(
    data: BookingRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return booking_service.convert_selection(
        session=session,
        owner_id=current_user.id,
        item_ids=data.item_ids,
        contact=data.contact,
        coupon_code=data.coupon_code,
    )


@router.get("")
def list_bookings(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    items = booking_service.booked_items(session=session, owner_id=current_user.id)
    return {
        "items": [cart_service.line_view(item) for item in items],
        "summary": cart_service.summarize(items),
    }
