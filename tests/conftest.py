import os

# Must be set before app modules build the global engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from decimal import Decimal
from types import SimpleNamespace

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import enable_sqlite_foreign_keys, get_session
from app.main import app
from app.models.item import Item
from app.models.person import Person

# Use SQLite for testing (in-memory, one shared connection per test)
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest_asyncio.fixture
async def catalog(session_maker):
    """One person and two items, committed and detached before the test runs."""
    async with session_maker() as s:
        person = Person(first_name="Grace", last_name="Hopper", email="grace@example.com")
        notebook = Item(name="Notebook", price=Decimal("9.99"), stock=10)
        pen = Item(name="Pen", price=Decimal("1.50"), stock=100)
        s.add_all([person, notebook, pen])
        await s.commit()
        return SimpleNamespace(person_id=person.id, notebook_id=notebook.id, pen_id=pen.id)


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as s:
            try:
                yield s
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
