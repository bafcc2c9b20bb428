import logging
from typing import List, Optional

from sqlmodel import select, col, func
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import commit_or_fail
from app.core.exceptions import InvalidArgumentError, ReferenceInUseError
from app.models.core import to_money, utcnow
from app.models.item import Item, ItemCreate, ItemUpdate
from app.models.order import OrderDetail

logger = logging.getLogger(__name__)


class ItemService:
    @staticmethod
    async def create_item(dto: ItemCreate, session: AsyncSession) -> Item:
        item = Item(
            name=dto.name,
            price=to_money(dto.price),
            description=dto.description,
            stock=dto.stock,
        )
        session.add(item)
        await commit_or_fail(session, "create item")
        await session.refresh(item)
        logger.info(f"Created Item {item.id} ({item.name}) at {item.price}.")
        return item

    @staticmethod
    async def get_item(item_id: int, session: AsyncSession) -> Optional[Item]:
        return await session.get(Item, item_id)

    @staticmethod
    async def list_items(session: AsyncSession) -> List[Item]:
        result = await session.exec(select(Item).order_by(col(Item.id)))
        return result.all()

    @staticmethod
    async def update_item(item_id: int, dto: ItemUpdate, session: AsyncSession) -> Optional[Item]:
        """
        Full replacement of the item's catalog data. A price change only
        affects order details created afterwards.
        """
        if dto.id != item_id:
            raise InvalidArgumentError(f"Route ID {item_id} does not match body ID {dto.id}.")

        item = await session.get(Item, item_id)
        if not item:
            return None

        item.name = dto.name
        item.price = to_money(dto.price)
        item.description = dto.description
        item.stock = dto.stock
        item.updated_at = utcnow()

        session.add(item)
        await commit_or_fail(session, "update item")
        await session.refresh(item)
        return item

    @staticmethod
    async def delete_item(item_id: int, session: AsyncSession) -> bool:
        item = await session.get(Item, item_id)
        if not item:
            logger.warning(f"Deletion attempted for Item {item_id} but it does not exist.")
            return False

        # Deleting an item with order history would silently change historical totals
        result = await session.exec(
            select(func.count()).select_from(OrderDetail).where(OrderDetail.item_id == item_id)
        )
        usage = result.one()
        if usage:
            logger.warning(f"Refusing to delete Item {item_id}: referenced by {usage} order detail(s).")
            raise ReferenceInUseError("Item", item_id, f"{usage} order detail(s)")

        await session.delete(item)
        await commit_or_fail(session, "delete item")
        logger.info(f"Deleted Item {item_id}.")
        return True
