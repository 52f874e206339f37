"""Common models shared across collections"""

from pydantic import BaseModel, EmailStr
from typing import Optional


class ShippingAddress(BaseModel):
    """Shipping address model"""
    full_name: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str = "India"
    phone: str

    class Config:
        json_schema_extra = {
            "example": {
                "full_name": "Asha Verma",
                "address": "221 MG Road",
                "city": "Bengaluru",
                "state": "Karnataka",
                "zip_code": "560001",
                "country": "India",
                "phone": "+919876543210"
            }
        }


class GuestInfo(BaseModel):
    """Contact details for orders placed without an account"""
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
