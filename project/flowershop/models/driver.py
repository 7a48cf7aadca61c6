# flowershop/models/driver.py

from sqlalchemy import Column, Integer, String, Boolean, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from flowershop.utils.database import Base

class Driver(Base):
    __tablename__ = "drivers"

    id             = Column(Integer, primary_key=True, index=True)
    profile_id     = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    username       = Column(String, unique=True, nullable=True, index=True)
    vehicle_number = Column(String, nullable=True)
    license_number = Column(String, nullable=True)
    status         = Column(String, nullable=False, default="active")   # active | inactive
    is_available   = Column(Boolean, nullable=False, default=True)
    deliveries     = Column(Integer, nullable=False, default=0)
    rating         = Column(Float, nullable=False, default=0.0)
    created_at     = Column(DateTime(timezone=True), server_default=func.now())
    updated_at     = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", lazy="selectin")
