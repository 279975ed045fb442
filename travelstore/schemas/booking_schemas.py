from typing import List, Optional

from pydantic import BaseModel, Field

from travelstore.pricing.booking import BookingLine
from travelstore.pricing.ledger import ContactInfo
from travelstore.schemas.cart_schemas import ItemFailure


class BookingRequest(BaseModel):
    item_ids: List[int] = Field(min_length=1)
    contact: ContactInfo
    coupon_code: Optional[str] = None


class BookingReport(BaseModel):
    booked_ids: List[int] = []
    untouched_ids: List[int] = []
    failed: List[ItemFailure] = []
    lines: List[BookingLine] = []
    coupon_label: Optional[str] = None
    total: int
    planned_total: int
    total_discount: int = 0
    complete: bool = True
