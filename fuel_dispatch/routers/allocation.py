from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_dispatch.auth.rbac import Permission, require_permission
from fuel_dispatch.core.db import get_db
from fuel_dispatch.schemas.allocation import (
    AllocationCreate,
    AllocationDeleteOut,
    AllocationListOut,
    AllocationStatusUpdate,
    AllocationUpdateOut,
    ClientAllocationOut,
)
from fuel_dispatch.services.allocation_service import AllocationService


router = APIRouter(prefix="/assignments", tags=["allocations"])


@router.get(
    "/{assignment_id}/clients",
    response_model=AllocationListOut,
    dependencies=[Depends(require_permission(Permission.VIEW_ASSIGNMENTS))],
)
async def list_client_allocations(assignment_id: int, db: AsyncSession = Depends(get_db)):
    entries = await AllocationService(db).list_allocations(assignment_id)
    return AllocationListOut(assignment_id=assignment_id, client_allocations=entries)


@router.post(
    "/{assignment_id}/clients",
    status_code=201,
    response_model=ClientAllocationOut,
    dependencies=[Depends(require_permission(Permission.CREATE_ALLOCATION))],
)
async def create_client_allocation(
    assignment_id: int,
    req: AllocationCreate,
    db: AsyncSession = Depends(get_db),
):
    entry = await AllocationService(db).create_allocation(
        assignment_id=assignment_id,
        customer_id=req.customer_id,
        allocated_quantity=req.allocated_quantity,
    )
    return ClientAllocationOut.model_validate(entry)


@router.api_route(
    "/{assignment_id}/clients/{client_id}",
    methods=["PUT", "PATCH"],
    response_model=AllocationUpdateOut,
    dependencies=[Depends(require_permission(Permission.UPDATE_DELIVERY))],
)
async def update_client_allocation(
    assignment_id: int,
    client_id: int,
    req: AllocationStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    result = await AllocationService(db).update_allocation_status(
        assignment_id=assignment_id,
        client_allocation_id=client_id,
        status=req.status,
        delivered_quantity=req.delivered_quantity,
        meter_start=req.meter_start,
        meter_end=req.meter_end,
    )
    return AllocationUpdateOut.model_validate(result)


@router.delete(
    "/{assignment_id}/clients/{client_id}",
    response_model=AllocationDeleteOut,
    dependencies=[Depends(require_permission(Permission.DELETE_ALLOCATION))],
)
async def delete_client_allocation(assignment_id: int, client_id: int, db: AsyncSession = Depends(get_db)):
    result = await AllocationService(db).delete_allocation(assignment_id, client_id)
    return AllocationDeleteOut.model_validate(result)
