import asyncio
import sys
import os
from decimal import Decimal

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlmodel import select, SQLModel
from app.core.database import engine, async_session_maker
from app.models.item import Item
from app.models.person import Person

DEMO_ITEMS = [
    ("Notebook A5", Decimal("9.99"), "Dotted, 120 pages", 40),
    ("Gel Pen Set", Decimal("4.50"), "Pack of 6 colours", 120),
    ("Desk Lamp", Decimal("34.90"), "LED, adjustable arm", 8),
]

async def seed_demo_data():
    print("Creating tables...")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    print("Tables created successfully.")

    async with async_session_maker() as session:
        print("Checking for existing data...")

        result = await session.exec(select(Person))
        if not result.first():
            print("Seeding Person...")
            session.add(Person(
                first_name="Ada",
                last_name="Lovelace",
                email="ada@example.com",
                phone="+44 20 7946 0000",
            ))

        result = await session.exec(select(Item))
        if not result.first():
            print("Seeding Items...")
            for name, price, description, stock in DEMO_ITEMS:
                session.add(Item(name=name, price=price, description=description, stock=stock))

        await session.commit()
    print("Seeding complete.")

if __name__ == "__main__":
    asyncio.run(seed_demo_data())
