from sqlalchemy import Column, Integer, String, DateTime, Enum, func
from fuel_dispatch.core.db import Base
from fuel_dispatch.models.enums import UserRole

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    fullname = Column(String, nullable=False)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.OPERATOR)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
