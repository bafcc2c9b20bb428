from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List

from app.core.database import get_session
from app.models.person import PersonCreate, PersonUpdate, PersonRead
from app.services.person_service import PersonService

router = APIRouter(prefix="/persons", tags=["Persons"])

@router.get("", response_model=List[PersonRead])
async def get_persons(session: AsyncSession = Depends(get_session)):
    return await PersonService.list_persons(session)

@router.get("/{person_id}", response_model=PersonRead)
async def get_person(person_id: int, session: AsyncSession = Depends(get_session)):
    person = await PersonService.get_person(person_id, session)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return person

@router.post("", response_model=PersonRead, status_code=status.HTTP_201_CREATED)
async def create_person(dto: PersonCreate, session: AsyncSession = Depends(get_session)):
    return await PersonService.create_person(dto, session)

@router.put("/{person_id}", response_model=PersonRead)
async def update_person(person_id: int, dto: PersonUpdate, session: AsyncSession = Depends(get_session)):
    person = await PersonService.update_person(person_id, dto, session)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return person

@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_person(person_id: int, session: AsyncSession = Depends(get_session)):
    """Deleting a person also deletes every order it owns."""
    if not await PersonService.delete_person(person_id, session):
        raise HTTPException(status_code=404, detail="Person not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
