from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from travelstore.schemas.cart_schemas import CartLineView


class AdminDiscountRequest(BaseModel):
    # typed by staff as 0-100
    discount_percent: Decimal = Field(ge=0, le=100)


class TimelineEntry(BaseModel):
    event_type: str
    label: str
    created_by: str
    created_at: datetime
    meta: Optional[dict] = None


class AdminItemDetail(BaseModel):
    owner_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    item: CartLineView
    timeline: List[TimelineEntry] = []
