from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fuel_dispatch.models.assignment import Assignment
from fuel_dispatch.models.client_allocation import ClientAllocation
from fuel_dispatch.models.customer import Customer
from fuel_dispatch.models.enums import TruckState, UserRole
from fuel_dispatch.models.truck import Truck
from fuel_dispatch.models.user import User
from fuel_dispatch.services.exceptions import NotFoundError

# Rows read under a lock are always refreshed from the database, never served
# from the session identity map.
FRESH = {"populate_existing": True}


async def lock_assignment(db: AsyncSession, assignment_id: int) -> Assignment:
    assignment = (
        await db.execute(
            select(Assignment)
            .where(Assignment.id == assignment_id)
            .with_for_update()
            .execution_options(**FRESH)
        )
    ).scalar_one_or_none()
    if assignment is None:
        raise NotFoundError(f"Assignment {assignment_id} not found.")
    return assignment


async def lock_truck(db: AsyncSession, truck_id: int) -> Truck:
    truck = (
        await db.execute(
            select(Truck)
            .where(Truck.id == truck_id)
            .with_for_update()
            .execution_options(**FRESH)
        )
    ).scalar_one_or_none()
    if truck is None:
        raise NotFoundError(f"Truck {truck_id} not found.")
    return truck


async def load_ledger(db: AsyncSession, assignment_id: int, lock: bool = True) -> List[ClientAllocation]:
    stmt = (
        select(ClientAllocation)
        .where(ClientAllocation.assignment_id == assignment_id)
        .order_by(ClientAllocation.id)
        .execution_options(**FRESH)
    )
    if lock:
        stmt = stmt.with_for_update()
    return list((await db.execute(stmt)).scalars().all())


async def list_ledger_with_customers(db: AsyncSession, assignment_id: int) -> List[ClientAllocation]:
    stmt = (
        select(ClientAllocation)
        .options(selectinload(ClientAllocation.customer))
        .where(ClientAllocation.assignment_id == assignment_id)
        .order_by(ClientAllocation.id)
        .execution_options(**FRESH)
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_assignment(db: AsyncSession, assignment_id: int) -> Assignment:
    assignment = (
        await db.execute(
            select(Assignment)
            .where(Assignment.id == assignment_id)
            .execution_options(**FRESH)
        )
    ).scalar_one_or_none()
    if assignment is None:
        raise NotFoundError(f"Assignment {assignment_id} not found.")
    return assignment


async def get_customer(db: AsyncSession, customer_id: int) -> Customer:
    customer = (await db.execute(select(Customer).where(Customer.id == customer_id))).scalar_one_or_none()
    if customer is None:
        raise NotFoundError(f"Customer {customer_id} not found.")
    return customer


async def get_driver(db: AsyncSession, driver_id: int) -> User:
    driver = (
        await db.execute(
            select(User).where(User.id == driver_id, User.role == UserRole.OPERATOR)
        )
    ).scalar_one_or_none()
    if driver is None:
        raise NotFoundError(f"Driver {driver_id} not found or not an operator.")
    return driver


async def latest_assignment_for_truck(db: AsyncSession, truck_id: int) -> Optional[Assignment]:
    return (
        await db.execute(
            select(Assignment)
            .where(Assignment.truck_id == truck_id)
            .order_by(Assignment.created_at.desc(), Assignment.id.desc())
            .limit(1)
            .execution_options(**FRESH)
        )
    ).scalar_one_or_none()


async def dispatchable_truck_ids(db: AsyncSession) -> List[int]:
    """Trucks whose state is owned by the allocation engine."""
    stmt = (
        select(Truck.id)
        .where(Truck.state.in_([TruckState.ACTIVE, TruckState.ASSIGNED]))
        .order_by(Truck.id)
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_truck(db: AsyncSession, truck_id: int) -> Truck:
    truck = (
        await db.execute(
            select(Truck).where(Truck.id == truck_id).execution_options(**FRESH)
        )
    ).scalar_one_or_none()
    if truck is None:
        raise NotFoundError(f"Truck {truck_id} not found.")
    return truck
