"""Authentication endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from datetime import datetime
from bson import ObjectId
import logging

from app.database import get_database
from app.api.deps import get_current_user
from app.core.security import create_access_token, hash_password, verify_password
from app.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    UserProfileResponse,
    UpdateProfileRequest,
)
from app.utils.validators import parse_object_id

router = APIRouter()
logger = logging.getLogger(__name__)


def user_to_profile(user: dict) -> UserProfileResponse:
    """Convert database user document to UserProfileResponse"""
    return UserProfileResponse(
        id=str(user["_id"]),
        name=user["name"],
        email=user["email"],
        role=user.get("role", "user"),
        is_active=user.get("is_active", True),
        phone=user.get("phone"),
        address=user.get("address"),
        wishlist=[str(p) for p in user.get("wishlist", [])],
        last_login=user.get("last_login"),
        created_at=user.get("created_at"),
    )


def issue_token(user: dict) -> TokenResponse:
    token = create_access_token({"sub": str(user["_id"]), "role": user.get("role", "user")})
    return TokenResponse(success=True, token=token, user=user_to_profile(user))


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Create a customer account and return a JWT.
    """
    email = request.email.lower()

    if await db.users.find_one({"email": email}):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email"
        )

    user_data = {
        "name": request.name.strip(),
        "email": email,
        "password": hash_password(request.password),
        "role": "user",
        "is_active": True,
        "wishlist": [],
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }

    try:
        result = await db.users.insert_one(user_data)
    except DuplicateKeyError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email"
        )

    user_data["_id"] = result.inserted_id
    logger.info(f"Registered user {email}")

    return issue_token(user_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Authenticate with email and password.
    """
    email = request.email.lower()
    user = await db.users.find_one({"email": email})

    if not user:
        logger.info(f"Login failed for {email}: no such user")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    if not user.get("is_active", True):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated"
        )

    if not verify_password(request.password, user.get("password", "")):
        logger.info(f"Login failed for {email}: password mismatch")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    now = datetime.utcnow()
    await db.users.update_one({"_id": user["_id"]}, {"$set": {"last_login": now}})
    user["last_login"] = now

    return issue_token(user)


@router.get("/me", response_model=UserProfileResponse)
async def get_me(current_user: dict = Depends(get_current_user)):
    """
    Get the authenticated user.
    """
    return user_to_profile(current_user)


@router.get("/profile", response_model=UserProfileResponse)
async def get_profile(current_user: dict = Depends(get_current_user)):
    """
    Get current user's profile.
    """
    return user_to_profile(current_user)


@router.put("/profile", response_model=TokenResponse)
async def update_profile(
    request: UpdateProfileRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Update current user's profile. Address fields are merged into the saved address.
    """
    update_data = request.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in update_data:
        update_data["email"] = update_data["email"].lower()
        existing = await db.users.find_one({"email": update_data["email"]})
        if existing and str(existing["_id"]) != current_user["_id"]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email is already in use"
            )

    if "address" in update_data:
        update_data["address"] = {**(current_user.get("address") or {}), **update_data["address"]}

    if "password" in update_data:
        update_data["password"] = hash_password(update_data["password"])

    update_data["updated_at"] = datetime.utcnow()

    user_id = ObjectId(current_user["_id"])
    await db.users.update_one({"_id": user_id}, {"$set": update_data})

    user = await db.users.find_one({"_id": user_id})
    return issue_token(user)


@router.post("/wishlist/{product_id}")
async def toggle_wishlist(
    product_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Add a product to the wishlist, or remove it if already present.
    """
    oid = parse_object_id(product_id, "product ID")

    if not await db.products.find_one({"_id": oid}, {"_id": 1}):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    wishlist = [str(p) for p in current_user.get("wishlist", [])]
    in_wishlist = product_id in wishlist

    if in_wishlist:
        wishlist = [p for p in wishlist if p != product_id]
    else:
        wishlist.append(product_id)

    await db.users.update_one(
        {"_id": ObjectId(current_user["_id"])},
        {"$set": {"wishlist": wishlist, "updated_at": datetime.utcnow()}}
    )

    return {
        "success": True,
        "message": "Removed from wishlist" if in_wishlist else "Added to wishlist",
        "wishlist": wishlist,
    }
