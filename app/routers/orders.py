from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List

from app.core.database import get_session
from app.models.order import OrderCreate, OrderUpdate, OrderDetailCreate, OrderDetailRead, OrderRead
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

@router.get("", response_model=List[OrderRead])
async def get_orders(session: AsyncSession = Depends(get_session)):
    return await OrderService.list_orders(session)

@router.get("/person/{person_id}", response_model=List[OrderRead])
async def get_orders_by_person(person_id: int, session: AsyncSession = Depends(get_session)):
    return await OrderService.list_orders_by_person(person_id, session)

@router.get("/details/{detail_id}", response_model=OrderDetailRead)
async def get_order_detail(detail_id: int, session: AsyncSession = Depends(get_session)):
    detail = await OrderService.get_detail(detail_id, session)
    if not detail:
        raise HTTPException(status_code=404, detail="Order detail not found")
    return detail

@router.put("/details/{detail_id}/quantity", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def update_order_detail_quantity(
    detail_id: int,
    quantity: int = Body(..., description="New quantity, must be greater than zero"),
    session: AsyncSession = Depends(get_session)
):
    await OrderService.update_detail_quantity(detail_id, quantity, session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/details/{detail_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_order_detail(detail_id: int, session: AsyncSession = Depends(get_session)):
    if not await OrderService.remove_detail(detail_id, session):
        raise HTTPException(status_code=404, detail="Order detail not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/{order_id}", response_model=OrderRead)
async def get_order(order_id: int, session: AsyncSession = Depends(get_session)):
    order = await OrderService.get_order(order_id, session)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order

@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
async def create_order(dto: OrderCreate, session: AsyncSession = Depends(get_session)):
    """
    Creates an order with its detail lines in one transaction.
    Unit prices always come from the current item price.
    """
    return await OrderService.create_order(dto, session)

@router.put("/{order_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def update_order(order_id: int, dto: OrderUpdate, session: AsyncSession = Depends(get_session)):
    updated = await OrderService.update_order(order_id, dto, session)
    if not updated:
        raise HTTPException(status_code=404, detail="Order not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_order(order_id: int, session: AsyncSession = Depends(get_session)):
    if not await OrderService.delete_order(order_id, session):
        raise HTTPException(status_code=404, detail="Order not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/{order_id}/details", response_model=List[OrderDetailRead])
async def get_order_details(order_id: int, session: AsyncSession = Depends(get_session)):
    return await OrderService.list_details(order_id, session)

@router.post("/{order_id}/details", response_model=OrderDetailRead, status_code=status.HTTP_201_CREATED)
async def add_order_detail(order_id: int, dto: OrderDetailCreate, session: AsyncSession = Depends(get_session)):
    return await OrderService.add_detail(order_id, dto, session)
