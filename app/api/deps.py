"""FastAPI dependencies for authentication and database access"""

from fastapi import Depends, HTTPException, status, Header
from motor.motor_asyncio import AsyncIOMotorDatabase
from app.database import get_database
from app.core.security import verify_token
from bson import ObjectId
from bson.errors import InvalidId
from typing import Optional


async def _user_from_token(token: str, db: AsyncIOMotorDatabase) -> Optional[dict]:
    """Resolve a bearer token to a user document, or None"""
    payload = verify_token(token)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    try:
        user = await db.users.find_one({"_id": ObjectId(user_id)}, {"password": 0})
    except InvalidId:
        return None

    if user:
        # Convert ObjectId to string for JSON serialization
        user["_id"] = str(user["_id"])
    return user


async def get_current_user(
    authorization: str = Header(None),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> dict:
    """
    Dependency to get current authenticated user from JWT token

    Args:
        authorization: Authorization header with Bearer token
        db: Database instance

    Returns:
        User dictionary from database, without the password hash

    Raises:
        HTTPException: If authentication fails
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.replace("Bearer ", "")
    if not verify_token(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await _user_from_token(token, db)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.get("is_active", True):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
        )

    return user


async def require_admin(
    current_user: dict = Depends(get_current_user)
) -> dict:
    """
    Dependency to require the admin role

    Raises:
        HTTPException: If user doesn't have required permissions
    """
    if current_user.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized as an admin",
        )

    return current_user


async def get_optional_user(
    authorization: Optional[str] = Header(None),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> Optional[dict]:
    """
    Dependency to optionally get current user (doesn't require authentication).
    Invalid or expired tokens are treated as anonymous requests.

    Returns:
        User dictionary if authenticated, None otherwise
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None

    user = await _user_from_token(authorization.replace("Bearer ", ""), db)

    if user and user.get("is_active", True):
        return user

    return None
