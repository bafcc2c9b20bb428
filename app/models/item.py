from typing import Optional
from datetime import datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field

from app.models.core import created_at_field, updated_at_field


class Item(SQLModel, table=True):
    """Catalog entry (a.k.a. Product). Its price is copied into order details."""
    __tablename__ = "items"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    price: Decimal = Field(max_digits=18, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=500)
    stock: int = Field(default=0)

    created_at: datetime = created_at_field()
    updated_at: Optional[datetime] = updated_at_field()


class ItemCreate(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(gt=0, max_digits=18, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=500)
    stock: int = Field(default=0, ge=0)


class ItemUpdate(ItemCreate):
    # Full replacement; the id must match the one in the route
    id: int


class ItemRead(SQLModel):
    id: int
    name: str
    price: Decimal
    description: Optional[str] = None
    stock: int
    created_at: datetime
    updated_at: Optional[datetime] = None
