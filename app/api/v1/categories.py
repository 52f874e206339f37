"""Category endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from typing import List

from app.database import get_database
from app.schemas.product import CategoryResponse

router = APIRouter()


def category_to_response(category: dict) -> CategoryResponse:
    """Convert database category document to CategoryResponse"""
    return CategoryResponse(
        id=str(category["_id"]),
        name=category["name"],
        slug=category["slug"],
        description=category.get("description"),
        image=category.get("image"),
        image_public_id=category.get("image_public_id"),
        parent_category=str(category["parent_category"]) if category.get("parent_category") else None,
        subcategories=[str(c) for c in category.get("subcategories", [])],
        is_active=category.get("is_active", True),
        sort_order=category.get("sort_order", 0),
        created_at=category.get("created_at", datetime.utcnow()),
        updated_at=category.get("updated_at", datetime.utcnow()),
    )


@router.get("/", response_model=List[CategoryResponse])
async def list_categories(db: AsyncIOMotorDatabase = Depends(get_database)):
    """
    Active categories ordered by sort order, then name.
    """
    cursor = db.categories.find({"is_active": True}).sort([("sort_order", 1), ("name", 1)])
    categories = await cursor.to_list(length=None)
    return [category_to_response(c) for c in categories]


@router.get("/{slug}", response_model=CategoryResponse)
async def get_category(slug: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """
    Get an active category by slug.
    """
    category = await db.categories.find_one({"slug": slug, "is_active": True})

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )

    return category_to_response(category)
