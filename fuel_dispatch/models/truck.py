from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, func
from sqlalchemy.orm import relationship
from fuel_dispatch.core.db import Base
from fuel_dispatch.models.enums import FuelType, TruckState

class Truck(Base):
    __tablename__ = "trucks"
    id = Column(Integer, primary_key=True, index=True)
    plate = Column(String, unique=True, nullable=False)
    fuel_type = Column(Enum(FuelType, name="fuel_type"), nullable=False)
    capacity_gal = Column(Float, nullable=False)
    state = Column(Enum(TruckState, name="truck_state"), nullable=False, default=TruckState.ACTIVE)
    last_remaining = Column(Float, nullable=False, default=0.0)  # fuel carried into the next assignment
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    assignments = relationship("Assignment", back_populates="truck")
