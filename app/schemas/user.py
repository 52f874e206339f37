"""User management schemas"""

from pydantic import BaseModel


class UserStatusUpdate(BaseModel):
    """Activate or deactivate an account"""
    is_active: bool

    class Config:
        json_schema_extra = {
            "example": {
                "is_active": False
            }
        }
