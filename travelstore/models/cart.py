from sqlmodel import SQLModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime

from travelstore.constants.booking_status import LifecycleState


class CartItem(SQLModel, table=True):
    __tablename__ = "cart_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    package_id: int = Field(foreign_key="package.id")

    # configuration
    days: int
    members: int = 1
    with_flights: bool = False
    with_visa: bool = False
    selected_date: Optional[datetime] = None

    # pricing: package portion only, visa is always added on top
    total_price: int
    price_before_admin_discount: Optional[int] = None
    coupon_title: Optional[str] = None
    coupon_code: Optional[str] = None
    coupon_percent: Optional[Decimal] = Field(default=None, max_digits=6, decimal_places=4)
    visa_cost: int = 0

    booking_type: str = Field(default=LifecycleState.cart.value, index=True)
    phone_number: Optional[str] = None
    best_time_to_connect: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
