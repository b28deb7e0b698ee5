from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fuel_dispatch.models.enums import AllocationStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AllocationCreate(CamelModel):
    customer_id: int
    # Positivity and the fuel ceiling are enforced by the engine so that the
    # rejection names the rule that was broken.
    allocated_quantity: float


class AllocationStatusUpdate(CamelModel):
    status: AllocationStatus
    delivered_quantity: Optional[float] = None
    meter_start: Optional[float] = Field(None, description="Dispenser meter reading before unloading")
    meter_end: Optional[float] = Field(None, description="Dispenser meter reading after unloading")


class CustomerOut(CamelModel):
    id: int
    company_name: str
    ruc: str
    address: str


class ClientAllocationOut(CamelModel):
    id: int
    assignment_id: int
    customer_id: int
    allocated_quantity: float
    delivered_quantity: float
    status: AllocationStatus
    meter_start: Optional[float] = None
    meter_end: Optional[float] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ClientAllocationWithCustomerOut(ClientAllocationOut):
    customer: CustomerOut


class AllocationUpdateOut(CamelModel):
    client_allocation: ClientAllocationOut
    total_remaining: float
    assignment_completed: bool
    pending_deliveries: int


class AllocationDeleteOut(CamelModel):
    total_remaining: float
    assignment_completed: bool
    pending_deliveries: int


class AllocationListOut(CamelModel):
    assignment_id: int
    client_allocations: List[ClientAllocationWithCustomerOut]
