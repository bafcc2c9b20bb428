import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import status
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlmodel import select, col
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.database import commit_or_fail
from app.core.exceptions import (
    ConcurrencyConflictError,
    InvalidArgumentError,
    ReferenceNotFoundError,
)
from app.models.core import ZERO, to_money, utcnow
from app.models.item import Item
from app.models.order import (
    Order,
    OrderDetail,
    OrderNumberCounter,
    OrderCreate,
    OrderUpdate,
    OrderDetailCreate,
    OrderDetailRead,
    OrderRead,
)
from app.models.person import Person

logger = logging.getLogger(__name__)

ORDER_NUMBER_SEQUENCE = "orders"


# --- Projections ---

def to_detail_read(detail: OrderDetail) -> OrderDetailRead:
    return OrderDetailRead(
        id=detail.id,
        order_id=detail.order_id,
        item_id=detail.item_id,
        item_name=detail.item.name if detail.item else None,
        quantity=detail.quantity,
        unit_price=detail.unit_price,
        line_total=detail.line_total,
        version=detail.version,
        created_at=detail.created_at,
        updated_at=detail.updated_at,
    )


def to_order_read(order: Order) -> OrderRead:
    # The person's name is resolved through the join at read time, never stored on the order
    return OrderRead(
        id=order.id,
        person_id=order.person_id,
        person_name=order.person.display_name if order.person else None,
        number=order.number,
        notes=order.notes,
        total=order.total,
        version=order.version,
        created_at=order.created_at,
        updated_at=order.updated_at,
        details=[to_detail_read(d) for d in order.details],
    )


def _build_detail(item: Item, quantity: int) -> OrderDetail:
    unit_price = to_money(item.price)
    return OrderDetail(
        item_id=item.id,
        quantity=quantity,
        unit_price=unit_price,
        line_total=to_money(unit_price * quantity),
    )


def _check_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise InvalidArgumentError("Quantity must be greater than zero.")


def _order_query():
    # Full eager load: lazy loading is not available on async sessions
    return (
        select(Order)
        .options(
            selectinload(Order.person),
            selectinload(Order.details).selectinload(OrderDetail.item),
        )
        .execution_options(populate_existing=True)
    )


def _detail_query():
    return (
        select(OrderDetail)
        .options(selectinload(OrderDetail.item))
        .execution_options(populate_existing=True)
    )


# --- Service Implementation ---

class OrderService:
    """
    Order aggregate service. Keeps Order.total equal to the sum of its
    details' line totals across every create/update/delete.
    """

    @staticmethod
    async def create_order(dto: OrderCreate, session: AsyncSession) -> OrderRead:
        # 1. Validate every reference before writing anything
        person = await session.get(Person, dto.person_id)
        if not person:
            logger.warning(f"Order creation rejected: Person {dto.person_id} not found.")
            raise ReferenceNotFoundError("Person", dto.person_id, status_code=status.HTTP_400_BAD_REQUEST)

        for line in dto.details:
            _check_quantity(line.quantity)

        item_ids = {line.item_id for line in dto.details}
        items = {}
        if item_ids:
            result = await session.exec(select(Item).where(col(Item.id).in_(item_ids)))
            items = {item.id: item for item in result.all()}

        missing = sorted(item_ids - items.keys())
        if missing:
            logger.warning(f"Order creation rejected: Items {missing} not found.")
            raise ReferenceNotFoundError("Item", missing[0], status_code=status.HTTP_400_BAD_REQUEST)

        # 2. Build the aggregate with snapshot prices; client-sent prices are ignored
        order = Order(
            person_id=person.id,
            number=await OrderService._next_order_number(session),
            notes=dto.notes,
        )
        for line in dto.details:
            order.details.append(_build_detail(items[line.item_id], line.quantity))
        order.total = to_money(sum((d.line_total for d in order.details), ZERO))

        # 3. Single commit for order, details and counter
        session.add(order)
        await session.flush()
        order_id = order.id
        await commit_or_fail(session, "create order")
        logger.info(f"Created Order {order_id} (#{order.number}) for Person {person.id} with {len(dto.details)} line(s), total {order.total}.")

        return await OrderService.get_order(order_id, session)

    @staticmethod
    async def get_order(order_id: int, session: AsyncSession) -> Optional[OrderRead]:
        result = await session.exec(_order_query().where(Order.id == order_id))
        order = result.first()
        return to_order_read(order) if order else None

    @staticmethod
    async def list_orders(session: AsyncSession) -> List[OrderRead]:
        statement = _order_query().order_by(col(Order.created_at).desc(), col(Order.id).desc())
        result = await session.exec(statement)
        return [to_order_read(o) for o in result.all()]

    @staticmethod
    async def list_orders_by_person(person_id: int, session: AsyncSession) -> List[OrderRead]:
        statement = (
            _order_query()
            .where(Order.person_id == person_id)
            .order_by(col(Order.created_at).desc(), col(Order.id).desc())
        )
        result = await session.exec(statement)
        return [to_order_read(o) for o in result.all()]

    @staticmethod
    async def update_order(order_id: int, dto: OrderUpdate, session: AsyncSession) -> Optional[OrderRead]:
        """
        Updates order metadata only; fields omitted from the request keep their
        stored value. Details and total are never touched here.
        """
        order = await session.get(Order, order_id)
        if not order:
            return None

        if dto.version is not None and dto.version != order.version:
            logger.warning(f"Stale update for Order {order_id}: client version {dto.version}, stored {order.version}.")
            raise ConcurrencyConflictError("Order", order_id)

        changes = dto.model_dump(exclude_unset=True, exclude={"version"})
        await OrderService._guarded_order_update(order, session, **changes)
        await commit_or_fail(session, "update order")
        return await OrderService.get_order(order_id, session)

    @staticmethod
    async def delete_order(order_id: int, session: AsyncSession) -> bool:
        result = await session.exec(
            select(Order).where(Order.id == order_id).options(selectinload(Order.details))
        )
        order = result.first()
        if not order:
            logger.warning(f"Deletion attempted for Order {order_id} but it does not exist.")
            return False

        # cascade="all, delete-orphan" on Order.details removes the lines
        await session.delete(order)
        await commit_or_fail(session, "delete order")
        logger.info(f"Deleted Order {order_id} and {len(order.details)} detail(s).")
        return True

    # --- Detail lines ---

    @staticmethod
    async def list_details(order_id: int, session: AsyncSession) -> List[OrderDetailRead]:
        if not await session.get(Order, order_id):
            raise ReferenceNotFoundError("Order", order_id)
        statement = (
            _detail_query()
            .where(OrderDetail.order_id == order_id)
            .order_by(col(OrderDetail.id))
        )
        result = await session.exec(statement)
        return [to_detail_read(d) for d in result.all()]

    @staticmethod
    async def get_detail(detail_id: int, session: AsyncSession) -> Optional[OrderDetailRead]:
        result = await session.exec(_detail_query().where(OrderDetail.id == detail_id))
        detail = result.first()
        return to_detail_read(detail) if detail else None

    @staticmethod
    async def add_detail(order_id: int, dto: OrderDetailCreate, session: AsyncSession) -> OrderDetailRead:
        _check_quantity(dto.quantity)

        order = await session.get(Order, order_id)
        if not order:
            raise ReferenceNotFoundError("Order", order_id)
        item = await session.get(Item, dto.item_id)
        if not item:
            raise ReferenceNotFoundError("Item", dto.item_id)

        detail = _build_detail(item, dto.quantity)
        detail.order_id = order.id
        session.add(detail)
        await OrderService._recompute_total(order, session)

        detail_id = detail.id
        await commit_or_fail(session, "add order detail")
        logger.info(f"Added Detail {detail_id} (Item {item.id} x{dto.quantity}) to Order {order_id}; total now {order.total}.")
        return await OrderService.get_detail(detail_id, session)

    @staticmethod
    async def update_detail_quantity(detail_id: int, quantity: int, session: AsyncSession) -> OrderDetailRead:
        _check_quantity(quantity)

        detail = await session.get(OrderDetail, detail_id)
        if not detail:
            raise ReferenceNotFoundError("OrderDetail", detail_id)

        # The stored snapshot price is reused; the item's current price is irrelevant here
        statement = (
            update(OrderDetail)
            .where(col(OrderDetail.id) == detail_id, col(OrderDetail.version) == detail.version)
            .values(
                quantity=quantity,
                line_total=to_money(detail.unit_price * quantity),
                version=detail.version + 1,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session="evaluate")
        )
        result = await session.execute(statement)
        if result.rowcount != 1:
            raise ConcurrencyConflictError("OrderDetail", detail_id)

        order = await session.get(Order, detail.order_id)
        await OrderService._recompute_total(order, session)
        await commit_or_fail(session, "update order detail quantity")
        logger.info(f"Detail {detail_id} quantity set to {quantity}; Order {order.id} total now {order.total}.")
        return await OrderService.get_detail(detail_id, session)

    @staticmethod
    async def remove_detail(detail_id: int, session: AsyncSession) -> bool:
        """Returns False instead of raising when the detail is already gone."""
        detail = await session.get(OrderDetail, detail_id)
        if not detail:
            logger.warning(f"Removal attempted for Detail {detail_id} but it does not exist.")
            return False

        order = await session.get(Order, detail.order_id)
        await session.delete(detail)
        await OrderService._recompute_total(order, session)
        await commit_or_fail(session, "remove order detail")
        logger.info(f"Removed Detail {detail_id} from Order {order.id}; total now {order.total}.")
        return True

    # --- Internal helpers ---

    @staticmethod
    async def _recompute_total(order: Order, session: AsyncSession) -> Decimal:
        """
        Re-sums every stored line total of the order and writes it back.
        O(details) per mutation; no incremental deltas.
        """
        await session.flush()
        result = await session.exec(
            select(OrderDetail.line_total).where(OrderDetail.order_id == order.id)
        )
        total = to_money(sum(result.all(), ZERO))
        await OrderService._guarded_order_update(order, session, total=total)
        return total

    @staticmethod
    async def _guarded_order_update(order: Order, session: AsyncSession, **values) -> None:
        """
        UPDATE ... WHERE version = <version we read>. Zero matched rows means a
        concurrent writer got there first.
        """
        statement = (
            update(Order)
            .where(col(Order.id) == order.id, col(Order.version) == order.version)
            .values(version=order.version + 1, updated_at=utcnow(), **values)
            .execution_options(synchronize_session="evaluate")
        )
        result = await session.execute(statement)
        if result.rowcount != 1:
            logger.warning(f"Version conflict on Order {order.id} (expected version {order.version}).")
            raise ConcurrencyConflictError("Order", order.id)

    @staticmethod
    async def ensure_number_sequence(session: AsyncSession) -> int:
        """
        Creates the order number counter row if it is missing and returns its
        last issued value. Runs at startup; the caller commits.
        """
        counter = await session.get(OrderNumberCounter, ORDER_NUMBER_SEQUENCE)
        if counter:
            return counter.last_value

        # Continue after the highest stored number, or start fresh
        max_result = await session.exec(select(func.max(Order.number)))
        max_number = max_result.one()
        last_value = max_number if max_number is not None else settings.ORDER_NUMBER_START - 1

        session.add(OrderNumberCounter(name=ORDER_NUMBER_SEQUENCE, last_value=last_value))
        try:
            await session.flush()
        except IntegrityError as e:
            # Another transaction created the row first; the caller may retry
            await session.rollback()
            logger.warning(f"Order number sequence was initialized concurrently: {e}")
            raise ConcurrencyConflictError("OrderNumberCounter", ORDER_NUMBER_SEQUENCE) from e

        logger.info(f"Initialized order number sequence; next number is {last_value + 1}.")
        return last_value

    @staticmethod
    async def _next_order_number(session: AsyncSession) -> int:
        """
        Allocates the next Order.number from the counter row. The row lock taken
        by the UPDATE is held until commit, so concurrent creates serialize.
        """
        statement = (
            update(OrderNumberCounter)
            .where(col(OrderNumberCounter.name) == ORDER_NUMBER_SEQUENCE)
            .values(last_value=col(OrderNumberCounter.last_value) + 1)
            .returning(col(OrderNumberCounter.last_value))
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(statement)
        number = result.scalar_one_or_none()
        if number is not None:
            return number

        # Counter row missing (startup seeding skipped or row removed)
        await OrderService.ensure_number_sequence(session)
        result = await session.execute(statement)
        return result.scalar_one()
