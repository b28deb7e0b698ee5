from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_dispatch.auth.rbac import Permission, require_permission
from fuel_dispatch.core.db import get_db
from fuel_dispatch.schemas.assignment import TruckRefreshOut
from fuel_dispatch.services.assignment_service import AssignmentService


router = APIRouter(prefix="/trucks", tags=["trucks"])


@router.post(
    "/refresh-status",
    response_model=TruckRefreshOut,
    dependencies=[Depends(require_permission(Permission.REFRESH_FLEET))],
)
async def refresh_truck_status(db: AsyncSession = Depends(get_db)):
    """Re-derive every dispatchable truck's state from its latest assignment ledger."""
    result = await AssignmentService(db).refresh_truck_status()
    return TruckRefreshOut.model_validate(result)
