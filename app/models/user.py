"""User models"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum


class UserRole(str, Enum):
    """User role enumeration"""
    USER = "user"
    ADMIN = "admin"


class UserAddress(BaseModel):
    """Saved address on a user profile"""
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = "India"


class User(BaseModel):
    """User model for authentication and authorization"""
    id: Optional[str] = Field(None, alias="_id")
    name: str = Field(max_length=50)
    email: EmailStr
    password: str
    role: UserRole = UserRole.USER
    is_active: bool = True
    phone: Optional[str] = None
    address: Optional[UserAddress] = None
    wishlist: List[str] = []
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "Asha Verma",
                "email": "asha@example.com",
                "role": "user",
                "is_active": True,
                "phone": "+919876543210",
                "wishlist": []
            }
        }
