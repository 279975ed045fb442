from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional
from datetime import datetime


class Package(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    slug: str
    destination: Optional[str] = None

    # per person per day, used when no duration table matches
    price: int
    # catalog MRP, same unit as price
    original_price: int

    # {"with_flights": {"5": 42000}, "without_flights": {"5": 30000}}
    pricing: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
