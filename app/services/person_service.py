import logging
from typing import List, Optional

from sqlalchemy.orm import selectinload
from sqlmodel import select, col
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import commit_or_fail
from app.models.core import utcnow
from app.models.order import Order
from app.models.person import Person, PersonCreate, PersonUpdate

logger = logging.getLogger(__name__)


class PersonService:
    @staticmethod
    async def create_person(dto: PersonCreate, session: AsyncSession) -> Person:
        person = Person(**dto.model_dump())
        session.add(person)
        await commit_or_fail(session, "create person")
        await session.refresh(person)
        logger.info(f"Created Person {person.id} ({person.display_name}).")
        return person

    @staticmethod
    async def get_person(person_id: int, session: AsyncSession) -> Optional[Person]:
        return await session.get(Person, person_id)

    @staticmethod
    async def list_persons(session: AsyncSession) -> List[Person]:
        result = await session.exec(select(Person).order_by(col(Person.id)))
        return result.all()

    @staticmethod
    async def update_person(person_id: int, dto: PersonUpdate, session: AsyncSession) -> Optional[Person]:
        person = await session.get(Person, person_id)
        if not person:
            return None

        # Only fields present in the request are applied
        for key, value in dto.model_dump(exclude_unset=True).items():
            setattr(person, key, value)
        person.updated_at = utcnow()

        session.add(person)
        await commit_or_fail(session, "update person")
        await session.refresh(person)
        return person

    @staticmethod
    async def delete_person(person_id: int, session: AsyncSession) -> bool:
        """
        Deletes a person together with the orders it owns and their details.
        """
        statement = (
            select(Person)
            .where(Person.id == person_id)
            .options(selectinload(Person.orders).selectinload(Order.details))
        )
        result = await session.exec(statement)
        person = result.first()
        if not person:
            logger.warning(f"Deletion attempted for Person {person_id} but it does not exist.")
            return False

        logger.info(f"Cascading delete of Person {person.id} ({len(person.orders)} order(s))...")
        await session.delete(person)
        await commit_or_fail(session, "delete person")
        return True
