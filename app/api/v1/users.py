"""User endpoints"""

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from typing import List

from app.database import get_database
from app.api.deps import get_current_user
from app.api.v1.products import product_to_response
from app.schemas.product import ProductResponse
from app.utils.validators import validate_object_id

router = APIRouter()


@router.get("/wishlist", response_model=List[ProductResponse])
async def get_wishlist(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get the products on the current user's wishlist.
    """
    ids = [ObjectId(p) for p in current_user.get("wishlist", []) if validate_object_id(str(p))]
    if not ids:
        return []

    products = await db.products.find({"_id": {"$in": ids}}, {"reviews": 0}).to_list(length=len(ids))
    return [product_to_response(p) for p in products]
