"""Authentication schemas"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, List
from app.models.user import UserRole, UserAddress


class RegisterRequest(BaseModel):
    """Request schema for account registration"""
    name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Asha Verma",
                "email": "asha@example.com",
                "password": "secret123"
            }
        }


class LoginRequest(BaseModel):
    """Request schema for email/password login"""
    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "email": "asha@example.com",
                "password": "secret123"
            }
        }


class UserProfileResponse(BaseModel):
    """User profile response"""
    id: str
    name: str
    email: EmailStr
    role: UserRole
    is_active: bool
    phone: Optional[str] = None
    address: Optional[UserAddress] = None
    wishlist: List[str] = []
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": "507f1f77bcf86cd799439011",
                "name": "Asha Verma",
                "email": "asha@example.com",
                "role": "user",
                "is_active": True,
                "wishlist": []
            }
        }


class TokenResponse(BaseModel):
    """JWT token response"""
    success: bool = True
    token: str
    user: UserProfileResponse


class UpdateProfileRequest(BaseModel):
    """Request schema for updating user profile"""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[UserAddress] = None
    password: Optional[str] = Field(None, min_length=6)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Asha Verma",
                "phone": "+919876543210"
            }
        }
