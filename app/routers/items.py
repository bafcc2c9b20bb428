from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List

from app.core.database import get_session
from app.models.item import ItemCreate, ItemUpdate, ItemRead
from app.services.item_service import ItemService

router = APIRouter(prefix="/items", tags=["Items"])

@router.get("", response_model=List[ItemRead])
async def get_items(session: AsyncSession = Depends(get_session)):
    return await ItemService.list_items(session)

@router.get("/{item_id}", response_model=ItemRead)
async def get_item(item_id: int, session: AsyncSession = Depends(get_session)):
    item = await ItemService.get_item(item_id, session)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item

@router.post("", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(dto: ItemCreate, session: AsyncSession = Depends(get_session)):
    return await ItemService.create_item(dto, session)

@router.put("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def update_item(item_id: int, dto: ItemUpdate, session: AsyncSession = Depends(get_session)):
    item = await ItemService.update_item(item_id, dto, session)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_item(item_id: int, session: AsyncSession = Depends(get_session)):
    """Items that already appear on orders cannot be deleted (409)."""
    if not await ItemService.delete_item(item_id, session):
        raise HTTPException(status_code=404, detail="Item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
