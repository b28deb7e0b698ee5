from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_dispatch.auth.rbac import Permission, require_permission
from fuel_dispatch.core.db import get_db
from fuel_dispatch.schemas.assignment import AssignmentCreate, AssignmentDetailOut, AssignmentOut
from fuel_dispatch.services.assignment_service import AssignmentService


router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.post(
    "",
    status_code=201,
    response_model=AssignmentOut,
    dependencies=[Depends(require_permission(Permission.CREATE_ASSIGNMENT))],
)
async def create_assignment(req: AssignmentCreate, db: AsyncSession = Depends(get_db)):
    assignment = await AssignmentService(db).create_assignment(
        truck_id=req.truck_id,
        driver_id=req.driver_id,
        total_loaded=req.total_loaded,
        notes=req.notes,
    )
    return AssignmentOut.model_validate(assignment)


@router.get(
    "/{assignment_id}",
    response_model=AssignmentDetailOut,
    dependencies=[Depends(require_permission(Permission.VIEW_ASSIGNMENTS))],
)
async def get_assignment(assignment_id: int, db: AsyncSession = Depends(get_db)):
    detail = await AssignmentService(db).get_assignment(assignment_id)
    return AssignmentDetailOut.model_validate(detail)
