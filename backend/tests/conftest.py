"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh schema on its own engine (in-memory SQLite by default,
set TEST_DATABASE_URL to run against PostgreSQL) and an HTTP client whose
`get_db` dependency is bound to that schema.
"""

import os

# Must be set before the app (and its cached settings) is imported
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("RESERVATION_GUARD", "local")

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from app.main import app
from app.db.base import Base
from app.db.session import get_db
from app.core.security import create_access_token
from app.infrastructure.booking_store import BookingStore
from app.models.car import Car
from app.models.booking import Booking, PENDING
from app.services.interfaces.local_guard import LocalReservationGuard

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

OWNER_EMAIL = "owner@example.com"
RENTER_EMAIL = "renter@example.com"
OTHER_EMAIL = "other@example.com"


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """
    Sessions on separate connections, the way two API workers see the
    database. SQLite runs file-backed here so each session gets its own
    connection.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'workers.db'}", poolclass=NullPool)
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def store(db_session: AsyncSession) -> BookingStore:
    return BookingStore(db_session)


@pytest_asyncio.fixture
async def guard() -> LocalReservationGuard:
    return LocalReservationGuard()


def headers_for(email: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': email})}"}


@pytest_asyncio.fixture
async def owner_headers() -> dict:
    return headers_for(OWNER_EMAIL)


@pytest_asyncio.fixture
async def renter_headers() -> dict:
    return headers_for(RENTER_EMAIL)


@pytest_asyncio.fixture
async def other_headers() -> dict:
    return headers_for(OTHER_EMAIL)


async def make_car(
    db_session: AsyncSession,
    daily_price: float = 50.0,
    model: str = "Toyota Corolla",
    branch: str = "DAC",
) -> Car:
    car = Car(
        model=model,
        daily_price=daily_price,
        images=[f"https://img.example.com/{model.replace(' ', '-').lower()}-1.jpg"],
        branch=branch,
        owner_email=OWNER_EMAIL,
        booking_count=0,
    )
    db_session.add(car)
    await db_session.commit()
    await db_session.refresh(car)
    return car


async def make_booking(
    db_session: AsyncSession,
    car: Car,
    start: datetime,
    end: datetime,
    status: str = PENDING,
    owner_email: str = RENTER_EMAIL,
    total_price: float = 0.0,
) -> Booking:
    booking = Booking(
        car_id=car.id,
        owner_email=owner_email,
        car_model=car.model,
        car_image=car.first_image,
        start_date=start,
        end_date=end,
        total_price=total_price,
        status=status,
    )
    db_session.add(booking)
    await db_session.commit()
    await db_session.refresh(booking)
    return booking


@pytest_asyncio.fixture
async def test_car(db_session: AsyncSession) -> Car:
    """Car X: 50 per day at the DAC branch."""
    return await make_car(db_session)
