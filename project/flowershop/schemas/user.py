# flowershop/schemas/user.py

from pydantic import BaseModel, EmailStr, Field
from typing import Optional

class UserCreate(BaseModel):
    """
    Sign-up data. New accounts are always customers.
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = None
    phone: Optional[str] = None

class ProfileUpdate(BaseModel):
    """
    Self-service profile edit, only the fields that were sent change.
    """
    phone: Optional[str] = None
    address: Optional[str] = None

class ProfileResponse(BaseModel):
    id: int
    full_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: str
    address: Optional[str] = None

    model_config = {
        "from_attributes": True
    }
