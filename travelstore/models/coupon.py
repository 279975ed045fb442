from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class UserCoupon(SQLModel, table=True):
    __tablename__ = "user_coupon"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    coupon_code: str = Field(index=True)   # stored upper case

    offer_title: str
    discount: str          # display text, e.g. "20%"

    expires_at: datetime
    used: bool = False
    used_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
