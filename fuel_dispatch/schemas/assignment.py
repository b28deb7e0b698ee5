from datetime import datetime
from typing import List, Optional

from pydantic import Field

from fuel_dispatch.models.enums import AssignmentStatus, FuelType
from fuel_dispatch.schemas.allocation import CamelModel, ClientAllocationWithCustomerOut


class AssignmentCreate(CamelModel):
    truck_id: int
    driver_id: int
    total_loaded: float
    notes: Optional[str] = Field(None, max_length=500)


class AssignmentOut(CamelModel):
    id: int
    truck_id: int
    driver_id: int
    fuel_type: FuelType
    total_loaded: float
    total_remaining: float
    is_completed: bool
    status: AssignmentStatus
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class AssignmentDetailOut(CamelModel):
    assignment: AssignmentOut
    client_allocations: List[ClientAllocationWithCustomerOut]
    available: float
    pending_deliveries: int


class TruckRefreshOut(CamelModel):
    updated_count: int
    checked_count: int
