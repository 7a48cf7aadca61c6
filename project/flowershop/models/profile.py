# flowershop/models/profile.py

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from flowershop.utils.database import Base

class Profile(Base):
    __tablename__ = "profiles"

    id        = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=True)
    email     = Column(String, unique=True, nullable=False, index=True)  # login
    phone     = Column(String, nullable=True)
    role      = Column(String, nullable=False, default="customer")       # customer | admin | driver
    address   = Column(String, nullable=True)
    password  = Column(String, nullable=True)                            # hash
    created_at = Column(DateTime(timezone=True), server_default=func.now())
