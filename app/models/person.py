from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from pydantic import EmailStr
from sqlmodel import SQLModel, Field, Relationship

from app.models.core import created_at_field, updated_at_field

if TYPE_CHECKING:
    from app.models.order import Order


class Person(SQLModel, table=True):
    __tablename__ = "persons"

    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: str = Field(max_length=255, index=True)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = created_at_field()
    updated_at: Optional[datetime] = updated_at_field()

    # Deleting a person removes the orders it owns (and, through them, their details)
    orders: List["Order"] = Relationship(back_populates="person", sa_relationship_kwargs={"cascade": "all, delete-orphan"})

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class PersonCreate(SQLModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=255)


class PersonUpdate(SQLModel):
    """Partial update; omitted fields keep their stored value."""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=255)


class PersonRead(SQLModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
