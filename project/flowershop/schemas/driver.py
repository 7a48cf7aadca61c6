# flowershop/schemas/driver.py

from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional

DriverStatus = Literal["active", "inactive"]

class Driver(BaseModel):
    id: int
    profile_id: int
    name: str = "Unknown"
    email: str = ""
    username: Optional[str] = None
    phone: str = ""
    vehicle_number: Optional[str] = None
    license_number: Optional[str] = None
    status: DriverStatus = "active"
    is_available: bool = True
    deliveries: int = 0
    rating: float = 0.0

class DriverCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str
    phone: str
    username: str
    vehicle_number: str
    license_number: Optional[str] = None

class DriverUpdate(BaseModel):
    """Only the fields that were sent are applied."""
    status: Optional[DriverStatus] = None
    is_available: Optional[bool] = None
    vehicle_number: Optional[str] = None
    license_number: Optional[str] = None
