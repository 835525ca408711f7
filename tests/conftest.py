import os
from datetime import datetime
from typing import AsyncGenerator

# Point the app at SQLite before app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.api.deps import get_db
from app.core.clock import FixedClock, get_clock
from app.models import Expense, BodyWeight, WholesaleBatch


# Use SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Frozen "now" for every request made through the test client (a Monday)
NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session


def override_dependencies(test_session: AsyncSession) -> None:
    """Bind request handlers to the test session and a frozen clock."""

    async def override_get_db():
        yield test_session

    def override_get_clock():
        return FixedClock(NOW)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = override_get_clock


@pytest_asyncio.fixture(scope="function")
async def client(test_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client bound to the test session and a frozen clock."""
    override_dependencies(test_session)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def error_client(test_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Like ``client`` but returns the 500 response instead of re-raising the error."""
    override_dependencies(test_session)

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def add_expense(session: AsyncSession, date: datetime, amount: float, **overrides) -> Expense:
    fields = {
        "title": "Lunch",
        "amount": amount,
        "currency": "INR",
        "payment_type": "upi",
        "category": "food",
        "date": date,
        "tags": [],
        "is_recurring": False,
    }
    fields.update(overrides)
    expense = Expense(**fields)
    session.add(expense)
    await session.commit()
    await session.refresh(expense)
    return expense


async def add_body_weight(session: AsyncSession, date: datetime, weight: float, **overrides) -> BodyWeight:
    entry = BodyWeight(weight=weight, unit=overrides.pop("unit", "kg"), date=date, **overrides)
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return entry


async def add_batch(
    session: AsyncSession,
    date: datetime,
    investment_amount: float,
    boxes_purchased: int,
    profit_per_box: float = 20.0,
) -> WholesaleBatch:
    batch = WholesaleBatch(
        date=date,
        investment_amount=investment_amount,
        boxes_purchased=boxes_purchased,
        profit_per_box=profit_per_box,
    )
    session.add(batch)
    await session.commit()
    await session.refresh(batch)
    return batch
