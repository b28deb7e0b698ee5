from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from fuel_dispatch.core.db import Base
from fuel_dispatch.models.enums import AssignmentStatus, FuelType

class Assignment(Base):
    __tablename__ = "assignments"
    id = Column(Integer, primary_key=True, index=True)
    truck_id = Column(Integer, ForeignKey("trucks.id"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    fuel_type = Column(Enum(FuelType, name="fuel_type"), nullable=False)
    total_loaded = Column(Float, nullable=False)
    total_remaining = Column(Float, nullable=False)  # total_loaded minus confirmed deliveries
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    truck = relationship("Truck", back_populates="assignments")
    driver = relationship("User")
    client_allocations = relationship(
        "ClientAllocation",
        back_populates="assignment",
        cascade="all, delete-orphan",
    )

    @property
    def status(self) -> AssignmentStatus:
        return AssignmentStatus.COMPLETED if self.is_completed else AssignmentStatus.OPEN
