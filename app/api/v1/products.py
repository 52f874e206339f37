"""Products endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from bson import ObjectId
from typing import List, Optional
import re

from app.database import get_database
from app.api.deps import get_current_user, get_optional_user
from app.schemas.product import ProductResponse, ProductListResponse, ReviewCreate
from app.utils.pagination import get_skip, pagination_meta
from app.utils.validators import validate_object_id, parse_object_id

router = APIRouter()

SORT_OPTIONS = {
    "price_asc": [("price", 1)],
    "price_desc": [("price", -1)],
    "name_asc": [("name", 1)],
    "name_desc": [("name", -1)],
    "rating": [("average_rating", -1)],
    "newest": [("created_at", -1)],
    "oldest": [("created_at", 1)],
}
DEFAULT_SORT = [("sort_order", 1), ("created_at", -1)]


def product_to_response(product: dict, is_in_wishlist: Optional[bool] = None) -> ProductResponse:
    """Convert database product document to ProductResponse"""
    track_quantity = product.get("track_quantity", True)
    quantity = product.get("quantity", 0)
    low_stock_threshold = product.get("low_stock_threshold", 10)

    return ProductResponse(
        id=str(product["_id"]),
        name=product["name"],
        slug=product["slug"],
        description=product.get("description"),
        short_description=product.get("short_description"),
        price=product["price"],
        compare_price=product.get("compare_price"),
        sku=product["sku"],
        track_quantity=track_quantity,
        quantity=quantity,
        low_stock_threshold=low_stock_threshold,
        in_stock=not track_quantity or quantity > 0,
        is_low_stock=track_quantity and quantity <= low_stock_threshold,
        images=product.get("images", []),
        category=str(product["category"]) if product.get("category") else None,
        subcategory=str(product["subcategory"]) if product.get("subcategory") else None,
        brand=product.get("brand"),
        tags=product.get("tags", []),
        sizes=product.get("sizes", []),
        specifications=product.get("specifications", []),
        is_active=product.get("is_active", True),
        is_featured=product.get("is_featured", False),
        reviews=product.get("reviews", []),
        average_rating=product.get("average_rating", 0),
        num_reviews=product.get("num_reviews", 0),
        sort_order=product.get("sort_order", 0),
        gst_rate=product.get("gst_rate") or 0,
        gst_type=product.get("gst_type", "CGST_SGST"),
        hsn_code=product.get("hsn_code"),
        gst_inclusive=product.get("gst_inclusive", False),
        taxable=product.get("taxable", True),
        is_in_wishlist=is_in_wishlist,
        created_at=product.get("created_at", datetime.utcnow()),
        updated_at=product.get("updated_at", datetime.utcnow()),
    )


async def resolve_category(value: str, db: AsyncIOMotorDatabase) -> Optional[str]:
    """Accept a category id or slug and return the id as a string"""
    if validate_object_id(value):
        return value
    category = await db.categories.find_one({"slug": value}, {"_id": 1})
    return str(category["_id"]) if category else None


@router.get("/", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
    category: Optional[str] = None,
    subcategory: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    brand: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    sort: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List active products with filtering, sorting and pagination.
    Public endpoint - no authentication required.
    """
    query = {"is_active": True}
    conditions = []

    if category:
        query["category"] = await resolve_category(category, db)

    if subcategory:
        query["subcategory"] = await resolve_category(subcategory, db)

    if min_price is not None or max_price is not None:
        query["price"] = {}
        if min_price is not None:
            query["price"]["$gte"] = min_price
        if max_price is not None:
            query["price"]["$lte"] = max_price

    if brand:
        query["brand"] = {"$regex": re.escape(brand), "$options": "i"}

    if search:
        pattern = re.escape(search)
        conditions.append({"$or": [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
            {"tags": {"$regex": pattern, "$options": "i"}},
        ]})

    if featured:
        query["is_featured"] = True

    if in_stock:
        conditions.append({"$or": [
            {"track_quantity": False},
            {"quantity": {"$gt": 0}},
        ]})

    if conditions:
        query["$and"] = conditions

    cursor = (
        db.products.find(query, {"reviews": 0})
        .sort(SORT_OPTIONS.get(sort, DEFAULT_SORT))
        .skip(get_skip(page, limit))
        .limit(limit)
    )
    products = await cursor.to_list(length=limit)
    total = await db.products.count_documents(query)

    return ProductListResponse(
        products=[product_to_response(p) for p in products],
        pagination=pagination_meta(page, limit, total),
    )


@router.get("/featured/list", response_model=List[ProductResponse])
async def list_featured_products(
    limit: int = Query(8, ge=1, le=50),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Featured products for the storefront home page.
    """
    cursor = (
        db.products.find({"is_active": True, "is_featured": True}, {"reviews": 0})
        .sort(DEFAULT_SORT)
        .limit(limit)
    )
    products = await cursor.to_list(length=limit)
    return [product_to_response(p) for p in products]


@router.get("/{slug}", response_model=ProductResponse)
async def get_product(
    slug: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
    current_user: Optional[dict] = Depends(get_optional_user)
):
    """
    Get a single active product by slug.
    """
    product = await db.products.find_one({"slug": slug, "is_active": True})

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    is_in_wishlist = None
    if current_user:
        wishlist = [str(p) for p in current_user.get("wishlist", [])]
        is_in_wishlist = str(product["_id"]) in wishlist

    return product_to_response(product, is_in_wishlist=is_in_wishlist)


@router.post("/{product_id}/reviews", status_code=status.HTTP_201_CREATED)
async def add_review(
    product_id: str,
    review: ReviewCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Add a review. Each user may review a product once.
    """
    oid = parse_object_id(product_id, "product ID")
    product = await db.products.find_one({"_id": oid})

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    reviews = product.get("reviews", [])
    if any(str(r.get("user")) == current_user["_id"] for r in reviews):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product already reviewed"
        )

    reviews.append({
        "user": current_user["_id"],
        "name": current_user["name"],
        "rating": review.rating,
        "comment": review.comment,
        "created_at": datetime.utcnow(),
    })
    average = round(sum(r["rating"] for r in reviews) / len(reviews), 1)

    await db.products.update_one(
        {"_id": oid},
        {
            "$set": {
                "reviews": reviews,
                "average_rating": average,
                "num_reviews": len(reviews),
                "updated_at": datetime.utcnow(),
            }
        }
    )

    return {"success": True, "message": "Review added successfully"}
