from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from travelstore.constants.booking_status import LifecycleState
from travelstore.pricing.ledger import ContactInfo


class CartAddRequest(BaseModel):
    package_id: int
    days: int = Field(ge=1)
    members: int = Field(default=1, ge=1)
    with_flights: bool = False
    with_visa: bool = False
    visa_cost: int = Field(default=0, ge=0)
    selected_date: Optional[datetime] = None


class CartConfigUpdateRequest(BaseModel):
    days: int = Field(ge=1)
    members: Optional[int] = Field(default=None, ge=1)
    with_flights: Optional[bool] = None
    with_visa: Optional[bool] = None
    visa_cost: Optional[int] = Field(default=None, ge=0)
    selected_date: Optional[datetime] = None


class CouponCodeRequest(BaseModel):
    code: str = Field(min_length=1)
    replace: bool = False


class CartLineView(BaseModel):
    item_id: int
    package_id: int
    package_title: Optional[str] = None
    days: int
    members: int
    with_flights: bool
    with_visa: bool
    state: LifecycleState
    discount_stage: str

    list_price: Optional[int] = None    # catalog MRP for this configuration
    original_price: int
    coupon_label: Optional[str] = None
    coupon_amount: int = 0
    price_after_coupon: int
    admin_percent: Decimal = Decimal("0")
    admin_amount: int = 0
    current_price: int
    visa_cost: int = 0
    final_price: int
    savings: int = 0

    contact: Optional[ContactInfo] = None
    updated_at: Optional[datetime] = None


class CartSummary(BaseModel):
    items_count: int
    original_total: int
    savings: int
    total: int
    coupon_label: Optional[str] = None   # first coupon found on a cart item


class CartView(BaseModel):
    items: List[CartLineView]
    summary: CartSummary


class ItemFailure(BaseModel):
    item_id: Optional[int] = None
    code: str
    detail: str


class CouponReport(BaseModel):
    coupon_label: Optional[str] = None
    updated_ids: List[int] = []
    skipped_ids: List[int] = []
    failed: List[ItemFailure] = []
    total: int
    total_discount: int = 0
    complete: bool = True


class AvailableCoupon(BaseModel):
    code: str
    title: str
    discount: str
    expires_at: datetime
    days_left: int
