from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from fuel_dispatch.core.db import Base
from fuel_dispatch.models.enums import AllocationStatus

class ClientAllocation(Base):
    __tablename__ = "client_allocations"
    __table_args__ = (
        UniqueConstraint("assignment_id", "customer_id", name="uq_client_allocation_customer"),
    )
    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    allocated_quantity = Column(Float, nullable=False)
    delivered_quantity = Column(Float, nullable=False, default=0.0)
    status = Column(Enum(AllocationStatus, name="allocation_status"), nullable=False, default=AllocationStatus.PENDING)
    meter_start = Column(Float, nullable=True)
    meter_end = Column(Float, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    assignment = relationship("Assignment", back_populates="client_allocations")
    customer = relationship("Customer", back_populates="allocations")
