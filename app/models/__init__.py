from .person import Person, PersonCreate, PersonUpdate, PersonRead
from .item import Item, ItemCreate, ItemUpdate, ItemRead
from .order import (
    Order,
    OrderDetail,
    OrderNumberCounter,
    OrderCreate,
    OrderLineIn,
    OrderUpdate,
    OrderDetailCreate,
    OrderDetailRead,
    OrderRead,
)

__all__ = [
    "Person",
    "PersonCreate",
    "PersonUpdate",
    "PersonRead",
    "Item",
    "ItemCreate",
    "ItemUpdate",
    "ItemRead",
    "Order",
    "OrderDetail",
    "OrderNumberCounter",
    "OrderCreate",
    "OrderLineIn",
    "OrderUpdate",
    "OrderDetailCreate",
    "OrderDetailRead",
    "OrderRead",
]
