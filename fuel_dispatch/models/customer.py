from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from fuel_dispatch.core.db import Base

class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String, nullable=False)
    ruc = Column(String(11), unique=True, nullable=False)
    address = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    allocations = relationship("ClientAllocation", back_populates="customer")
