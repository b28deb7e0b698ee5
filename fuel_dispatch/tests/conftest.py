"""
Pytest configuration and shared fixtures for the fuel dispatch test suite.

This module provides:
- Database fixtures (in-memory SQLite for fast tests)
- HTTP client fixtures with the database dependency overridden
- Data factories for trucks, drivers, customers and assignments
- Bearer tokens per role
"""

import os

# Settings are read at import time, so they must be in place before the app loads.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")

from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fuel_dispatch.auth.auth_handler import sign_jwt
from fuel_dispatch.core.db import Base, get_db
from fuel_dispatch.main import app
from fuel_dispatch.models import Assignment, Customer, Truck, User
from fuel_dispatch.models.enums import FuelType, TruckState, UserRole


# Test Database Configuration
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for testing with in-memory SQLite."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def async_db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for testing."""
    async_session = async_sessionmaker(async_engine, expire_on_commit=False)

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def async_client(async_db_session) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client with database dependency override."""

    async def override_get_db():
        yield async_db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Test Data Factories
@pytest_asyncio.fixture
async def test_truck(async_db_session) -> Truck:
    truck = Truck(
        plate="ABC-123",
        fuel_type=FuelType.DIESEL_B5,
        capacity_gal=5000.0,
        state=TruckState.ACTIVE,
        last_remaining=0.0,
    )
    async_db_session.add(truck)
    await async_db_session.commit()
    await async_db_session.refresh(truck)
    return truck


@pytest_asyncio.fixture
async def test_driver(async_db_session) -> User:
    driver = User(email="driver@example.com", fullname="Test Driver", role=UserRole.OPERATOR)
    async_db_session.add(driver)
    await async_db_session.commit()
    await async_db_session.refresh(driver)
    return driver


@pytest_asyncio.fixture
async def make_customer(async_db_session):
    """Factory creating customers with unique tax ids."""
    counter = {"n": 0}

    async def _make(company_name: str = None) -> Customer:
        counter["n"] += 1
        customer = Customer(
            company_name=company_name or f"Customer {counter['n']}",
            ruc=f"20{counter['n']:09d}",
            address=f"Av. Industrial {counter['n']}",
        )
        async_db_session.add(customer)
        await async_db_session.commit()
        await async_db_session.refresh(customer)
        return customer

    return _make


@pytest_asyncio.fixture
async def test_assignment(async_db_session, test_truck, test_driver) -> Assignment:
    """Open assignment with 1000 gal loaded; truck marked Assigned as the assignment flow would."""
    assignment = Assignment(
        truck_id=test_truck.id,
        driver_id=test_driver.id,
        fuel_type=test_truck.fuel_type,
        total_loaded=1000.0,
        total_remaining=1000.0,
        is_completed=False,
    )
    test_truck.state = TruckState.ASSIGNED
    async_db_session.add(assignment)
    await async_db_session.commit()
    await async_db_session.refresh(assignment)
    return assignment


async def reload(session: AsyncSession, *objs):
    """Re-read rows from the database; rejected operations roll back and expire the session."""
    for obj in objs:
        await session.refresh(obj)
    return objs[0] if len(objs) == 1 else objs


# Authentication Fixtures
def _headers(role: UserRole) -> dict:
    token = sign_jwt(f"{role.value.lower()}@example.com", role.value)["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict:
    return _headers(UserRole.ADMIN)


@pytest.fixture
def operator_headers() -> dict:
    return _headers(UserRole.OPERATOR)


# Common Test Doubles
@pytest.fixture
def mock_async_session():
    """Provide a reusable AsyncSession-like test double.

    - `add` is a `MagicMock` (synchronous)
    - `flush`, `commit`, `rollback`, `refresh`, `execute`, `delete` are `AsyncMock`
    Tests can override `execute.side_effect` / `flush.side_effect` as needed.
    """
    session = AsyncMock()
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.delete = AsyncMock()
    return session
