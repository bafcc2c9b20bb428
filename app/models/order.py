from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal
from sqlmodel import SQLModel, Field, Relationship

from app.models.core import ZERO, created_at_field, updated_at_field

if TYPE_CHECKING:
    from app.models.item import Item
    from app.models.person import Person


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    person_id: int = Field(foreign_key="persons.id", index=True, ondelete="CASCADE")
    number: int = Field(unique=True, index=True)
    notes: Optional[str] = Field(default=None, max_length=1000)
    # Always equal to the sum of the details' line_total; written only by OrderService
    total: Decimal = Field(default=ZERO, max_digits=18, decimal_places=2)
    # Optimistic concurrency token, bumped by every guarded write
    version: int = Field(default=1)

    created_at: datetime = created_at_field()
    updated_at: Optional[datetime] = updated_at_field()

    person: Optional["Person"] = Relationship(back_populates="orders")
    details: List["OrderDetail"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "OrderDetail.id"}
    )


class OrderDetail(SQLModel, table=True):
    __tablename__ = "order_details"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True, ondelete="CASCADE")
    # Items with history cannot be deleted (see ItemService.delete_item)
    item_id: int = Field(foreign_key="items.id", index=True, ondelete="RESTRICT")
    quantity: int
    unit_price: Decimal = Field(max_digits=18, decimal_places=2)  # snapshot of Item.price
    line_total: Decimal = Field(max_digits=18, decimal_places=2)
    version: int = Field(default=1)

    created_at: datetime = created_at_field()
    updated_at: Optional[datetime] = updated_at_field()

    order: Optional[Order] = Relationship(back_populates="details")
    item: Optional["Item"] = Relationship()


class OrderNumberCounter(SQLModel, table=True):
    """
    Single-row sequence for Order.number. Incremented inside the same
    transaction as the order insert, so two creates never read the same value.
    """
    __tablename__ = "order_number_counters"

    name: str = Field(primary_key=True)
    last_value: int


# --- DTOs ---

class OrderLineIn(SQLModel):
    item_id: int = Field(gt=0)
    quantity: int = Field(gt=0)
    # Accepted for client compatibility, ignored: the item's current price wins
    price: Optional[Decimal] = None


class OrderCreate(SQLModel):
    person_id: int = Field(gt=0)
    notes: Optional[str] = Field(default=None, max_length=1000)
    details: List[OrderLineIn] = []


class OrderUpdate(SQLModel):
    """Partial update; omitted fields keep their stored value."""
    notes: Optional[str] = Field(default=None, max_length=1000)
    # When sent, must match the stored version or the update is rejected
    version: Optional[int] = None


class OrderDetailCreate(SQLModel):
    item_id: int = Field(gt=0)
    quantity: int = Field(gt=0)


class OrderDetailRead(SQLModel):
    id: int
    order_id: int
    item_id: int
    item_name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderRead(SQLModel):
    id: int
    person_id: int
    person_name: Optional[str] = None
    number: int
    notes: Optional[str] = None
    total: Decimal
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    details: List[OrderDetailRead] = []
