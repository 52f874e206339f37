"""Admin endpoints - dashboard, catalog, orders and users"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from cloudinary.exceptions import Error as CloudinaryError
from razorpay.errors import BadRequestError, ServerError
from datetime import datetime, timedelta
from bson import ObjectId
from typing import List, Optional
import logging
import re

from app.database import get_database
from app.api.deps import require_admin
from app.api.v1.auth import user_to_profile
from app.api.v1.categories import category_to_response
from app.api.v1.orders import order_to_response, history_entry
from app.api.v1.products import product_to_response
from app.core import cloudinary_client, razorpay_client
from app.core.gst import amounts_match
from app.schemas.order import OrderResponse, OrderStatusUpdate, TrackingUpdate, RefundRequest
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
)
from app.schemas.user import UserStatusUpdate
from app.schemas.auth import UserProfileResponse
from app.utils.pagination import get_skip, pagination_meta
from app.utils.currency import format_inr, to_rupees
from app.utils.text import slugify
from app.utils.validators import parse_object_id

router = APIRouter()
logger = logging.getLogger(__name__)


def duplicate_field(error: DuplicateKeyError) -> str:
    """Name of the field that violated a unique index"""
    key_pattern = (error.details or {}).get("keyPattern") or {}
    return next(iter(key_pattern), "value")


def duplicate_error(field: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"{field} already exists. Please use a different value."
    )


async def ensure_category_exists(category_id: str, db: AsyncIOMotorDatabase):
    oid = parse_object_id(category_id, "category ID")
    if not await db.categories.find_one({"_id": oid}, {"_id": 1}):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category does not exist"
        )


async def delete_cloudinary_image(public_id: str):
    """Remove an image, logging failures so the owning record can still be deleted"""
    try:
        await cloudinary_client.delete_image(public_id)
    except CloudinaryError as e:
        logger.error(f"Error deleting image {public_id} from Cloudinary: {str(e)}")


# Dashboard

@router.get("/dashboard")
async def get_dashboard(
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Store statistics, recent orders and low-stock products (Admin only).
    """
    total_products = await db.products.count_documents({"is_active": True})
    total_orders = await db.orders.count_documents({})
    total_users = await db.users.count_documents({"is_active": True})

    revenue = await db.orders.aggregate([
        {"$match": {"is_paid": True}},
        {"$group": {"_id": None, "total": {"$sum": "$total_price"}}},
    ]).to_list(length=1)

    recent_orders = await db.orders.find().sort("created_at", -1).limit(5).to_list(length=5)

    tracked = await db.products.find(
        {"track_quantity": True},
        {"name": 1, "quantity": 1, "low_stock_threshold": 1}
    ).to_list(length=None)
    low_stock = [
        {
            "id": str(p["_id"]),
            "name": p["name"],
            "quantity": p.get("quantity", 0),
            "low_stock_threshold": p.get("low_stock_threshold", 10),
        }
        for p in tracked
        if p.get("quantity", 0) <= p.get("low_stock_threshold", 10)
    ][:10]

    since = datetime.utcnow() - timedelta(days=30)
    daily = {}
    async for order in db.orders.find({"created_at": {"$gte": since}}, {"created_at": 1, "is_paid": 1, "total_price": 1}):
        day = order["created_at"].strftime("%Y-%m-%d")
        stats = daily.setdefault(day, {"date": day, "count": 0, "revenue": 0.0})
        stats["count"] += 1
        if order.get("is_paid"):
            stats["revenue"] = round(stats["revenue"] + order.get("total_price", 0), 2)

    return {
        "success": True,
        "stats": {
            "total_products": total_products,
            "total_orders": total_orders,
            "total_users": total_users,
            "total_revenue": revenue[0]["total"] if revenue else 0,
        },
        "recent_orders": [order_to_response(o) for o in recent_orders],
        "low_stock_products": low_stock,
        "order_stats": [daily[d] for d in sorted(daily)],
    }


# Product management

@router.get("/products")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List all products, including inactive ones (Admin only).
    """
    query = {}
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"sku": {"$regex": pattern, "$options": "i"}},
        ]

    cursor = db.products.find(query).sort("created_at", -1).skip(get_skip(page, limit)).limit(limit)
    products = await cursor.to_list(length=limit)
    total = await db.products.count_documents(query)

    return {
        "products": [product_to_response(p) for p in products],
        "pagination": pagination_meta(page, limit, total),
    }


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Create a product. The slug is derived from the name and the SKU is upper-cased.
    """
    await ensure_category_exists(product_data.category, db)

    product_doc = product_data.model_dump(mode="json")
    product_doc["slug"] = slugify(product_doc["name"])
    product_doc["sku"] = product_doc["sku"].strip().upper()

    if await db.products.find_one({"slug": product_doc["slug"]}, {"_id": 1}):
        raise duplicate_error("slug")
    if await db.products.find_one({"sku": product_doc["sku"]}, {"_id": 1}):
        raise duplicate_error("sku")

    product_doc.update({
        "reviews": [],
        "average_rating": 0,
        "num_reviews": 0,
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    })

    try:
        result = await db.products.insert_one(product_doc)
    except DuplicateKeyError as e:
        raise duplicate_error(duplicate_field(e))

    logger.info(f"Created product {product_doc['sku']} ({product_doc['slug']})")

    product = await db.products.find_one({"_id": result.inserted_id})
    return product_to_response(product)


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Update a product (Admin only).
    """
    oid = parse_object_id(product_id, "product ID")
    product = await db.products.find_one({"_id": oid})

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    update_data = product_data.model_dump(mode="json", exclude_unset=True)

    if "category" in update_data:
        await ensure_category_exists(update_data["category"], db)

    if "name" in update_data and update_data["name"] != product["name"]:
        update_data["slug"] = slugify(update_data["name"])
        if await db.products.find_one({"slug": update_data["slug"], "_id": {"$ne": oid}}, {"_id": 1}):
            raise duplicate_error("slug")

    if "sku" in update_data:
        update_data["sku"] = update_data["sku"].strip().upper()
        if await db.products.find_one({"sku": update_data["sku"], "_id": {"$ne": oid}}, {"_id": 1}):
            raise duplicate_error("sku")

    update_data["updated_at"] = datetime.utcnow()

    try:
        await db.products.update_one({"_id": oid}, {"$set": update_data})
    except DuplicateKeyError as e:
        raise duplicate_error(duplicate_field(e))

    product = await db.products.find_one({"_id": oid})
    return product_to_response(product)


@router.delete("/products/{product_id}")
async def delete_product(
    product_id: str,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Delete a product and its Cloudinary images (Admin only).
    """
    oid = parse_object_id(product_id, "product ID")
    product = await db.products.find_one({"_id": oid})

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    for image in product.get("images", []):
        public_id = image.get("public_id") or cloudinary_client.extract_public_id(image.get("url"))
        if public_id:
            await delete_cloudinary_image(public_id)

    await db.products.delete_one({"_id": oid})
    logger.info(f"Deleted product {product.get('sku')}")

    return {"success": True, "message": "Product deleted successfully"}


# Category management

@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List all categories, including inactive ones (Admin only).
    """
    cursor = db.categories.find().sort([("sort_order", 1), ("name", 1)])
    categories = await cursor.to_list(length=None)
    return [category_to_response(c) for c in categories]


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Create a category, linking it under its parent when one is given.
    """
    category_doc = category_data.model_dump()
    category_doc["name"] = category_doc["name"].strip()
    category_doc["slug"] = slugify(category_doc["name"], prefix="category")

    if category_doc.get("parent_category"):
        parent_id = parse_object_id(category_doc["parent_category"], "parent category ID")
        if not await db.categories.find_one({"_id": parent_id}, {"_id": 1}):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Parent category does not exist"
            )

    if await db.categories.find_one({"slug": category_doc["slug"]}, {"_id": 1}):
        raise duplicate_error("slug")

    category_doc.update({
        "subcategories": [],
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    })

    try:
        result = await db.categories.insert_one(category_doc)
    except DuplicateKeyError as e:
        raise duplicate_error(duplicate_field(e))

    if category_doc.get("parent_category"):
        await db.categories.update_one(
            {"_id": ObjectId(category_doc["parent_category"])},
            {"$push": {"subcategories": str(result.inserted_id)}}
        )

    category = await db.categories.find_one({"_id": result.inserted_id})
    return category_to_response(category)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Update a category. Replacing the image deletes the previous one from Cloudinary.
    """
    oid = parse_object_id(category_id, "category ID")
    category = await db.categories.find_one({"_id": oid})

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )

    update_data = category_data.model_dump(exclude_unset=True)

    if "name" in update_data:
        update_data["name"] = update_data["name"].strip()
        update_data["slug"] = slugify(update_data["name"], prefix="category")
        if await db.categories.find_one({"slug": update_data["slug"], "_id": {"$ne": oid}}, {"_id": 1}):
            raise duplicate_error("slug")

    old_public_id = category.get("image_public_id")
    if "image_public_id" in update_data and old_public_id and update_data["image_public_id"] != old_public_id:
        await delete_cloudinary_image(old_public_id)

    update_data["updated_at"] = datetime.utcnow()
    await db.categories.update_one({"_id": oid}, {"$set": update_data})

    category = await db.categories.find_one({"_id": oid})
    return category_to_response(category)


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Delete a category. Refused while any product still belongs to it.
    """
    oid = parse_object_id(category_id, "category ID")
    category = await db.categories.find_one({"_id": oid})

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )

    product_count = await db.products.count_documents({"$or": [
        {"category": category_id},
        {"subcategory": category_id},
    ]})
    if product_count > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete category with existing products"
        )

    if category.get("image_public_id"):
        await delete_cloudinary_image(category["image_public_id"])

    await db.categories.delete_one({"_id": oid})
    if category.get("parent_category"):
        await db.categories.update_one(
            {"_id": ObjectId(category["parent_category"])},
            {"$pull": {"subcategories": category_id}}
        )

    return {"success": True, "message": "Category deleted successfully"}


# Order management

@router.get("/orders")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List orders with optional status filter and order-number search (Admin only).
    """
    query = {}
    if status_filter:
        query["status"] = status_filter
    if search:
        pattern = re.escape(search)
        query["order_number"] = {"$regex": pattern, "$options": "i"}

    cursor = db.orders.find(query).sort("created_at", -1).skip(get_skip(page, limit)).limit(limit)
    orders = await cursor.to_list(length=limit)
    total = await db.orders.count_documents(query)

    return {
        "orders": [order_to_response(o) for o in orders],
        "pagination": pagination_meta(page, limit, total),
    }


@router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    update: OrderStatusUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Change an order's status. Delivered orders are stamped with the delivery time.
    """
    oid = parse_object_id(order_id, "order ID")
    order = await db.orders.find_one({"_id": oid})

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    new_status = update.status.value
    update_data = {"status": new_status, "updated_at": datetime.utcnow()}
    if update.note:
        update_data["notes"] = update.note
    if new_status == "delivered":
        update_data["is_delivered"] = True
        update_data["delivered_at"] = datetime.utcnow()

    await db.orders.update_one(
        {"_id": oid},
        {"$set": update_data, "$push": {"status_history": history_entry(new_status, update.note)}}
    )
    logger.info(f"Order {order['order_number']} status {order.get('status')} -> {new_status}")

    order = await db.orders.find_one({"_id": oid})
    return order_to_response(order)


@router.put("/orders/{order_id}/tracking")
async def update_order_tracking(
    order_id: str,
    update: TrackingUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Set the tracking number. A processing order becomes shipped once it has one.
    """
    oid = parse_object_id(order_id, "order ID")
    order = await db.orders.find_one({"_id": oid})

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    update_ops = {"$set": {"updated_at": datetime.utcnow()}}
    if update.tracking_number:
        update_ops["$set"]["tracking_number"] = update.tracking_number
    if update.notes:
        update_ops["$set"]["notes"] = update.notes

    if update.tracking_number and order.get("status") == "processing":
        update_ops["$set"]["status"] = "shipped"
        update_ops["$push"] = {"status_history": history_entry(
            "shipped", f"Tracking number added: {update.tracking_number}"
        )}

    await db.orders.update_one({"_id": oid}, update_ops)

    order = await db.orders.find_one({"_id": oid})
    return {
        "success": True,
        "message": "Tracking information updated successfully",
        "order": order_to_response(order),
    }


async def get_paid_razorpay_order(order_id: str, db: AsyncIOMotorDatabase) -> dict:
    order = await db.orders.find_one({"_id": parse_object_id(order_id, "order ID")})

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    if not order.get("is_paid") or not order.get("razorpay_payment_id"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Order has no captured Razorpay payment"
        )

    return order


@router.post("/orders/{order_id}/refund", response_model=OrderResponse)
async def refund_order(
    order_id: str,
    refund: RefundRequest,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Refund a paid Razorpay order, in full unless an amount is given (Admin only).
    """
    order = await get_paid_razorpay_order(order_id, db)

    refunded = order.get("refunded_amount", 0)
    remaining = round(order["total_price"] - refunded, 2)

    if order.get("payment_status") == "refunded" or remaining < 0.01:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Order is already refunded"
        )

    amount = refund.amount or remaining
    if amount > remaining and not amounts_match(amount, remaining):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Refund cannot exceed the remaining {format_inr(remaining)}"
        )

    try:
        result = await razorpay_client.create_refund(
            order["razorpay_payment_id"],
            amount,
            notes={"order_number": order["order_number"], "reason": refund.reason or ""},
        )
    except (BadRequestError, ServerError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Refund failed: {str(e)}"
        )

    update_data = {"updated_at": datetime.utcnow()}
    note = f"Refunded {format_inr(amount)} ({result['id']})"
    if amounts_match(refunded + amount, order["total_price"]):
        update_data["payment_status"] = "refunded"
        update_data["status"] = "refunded"

    await db.orders.update_one(
        {"_id": order["_id"]},
        {
            "$set": update_data,
            "$inc": {"refunded_amount": amount},
            "$push": {"status_history": history_entry(update_data.get("status", order["status"]), note)},
        }
    )
    logger.info(f"Order {order['order_number']}: {note}")

    order = await db.orders.find_one({"_id": order["_id"]})
    return order_to_response(order)


@router.get("/orders/{order_id}/refunds")
async def list_order_refunds(
    order_id: str,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Refunds Razorpay has recorded against an order's payment (Admin only).
    """
    order = await get_paid_razorpay_order(order_id, db)

    try:
        result = await razorpay_client.fetch_refunds(order["razorpay_payment_id"])
    except BadRequestError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Failed to fetch refunds: {str(e)}"
        )

    return {
        "success": True,
        "refunds": [
            {
                "id": r["id"],
                "amount": to_rupees(r.get("amount", 0)),
                "status": r.get("status"),
                "created_at": r.get("created_at"),
            }
            for r in result.get("items", [])
        ],
    }


# User management

@router.get("/users")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List users with optional name/email search (Admin only).
    """
    query = {}
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
        ]

    cursor = db.users.find(query, {"password": 0}).sort("created_at", -1).skip(get_skip(page, limit)).limit(limit)
    users = await cursor.to_list(length=limit)
    total = await db.users.count_documents(query)

    return {
        "users": [user_to_profile(u) for u in users],
        "pagination": pagination_meta(page, limit, total),
    }


@router.put("/users/{user_id}/status", response_model=UserProfileResponse)
async def update_user_status(
    user_id: str,
    update: UserStatusUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Activate or deactivate a user account (Admin only).
    """
    oid = parse_object_id(user_id, "user ID")

    if user_id == current_user["_id"] and not update.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate your own account"
        )

    user = await db.users.find_one({"_id": oid})
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    await db.users.update_one(
        {"_id": oid},
        {"$set": {"is_active": update.is_active, "updated_at": datetime.utcnow()}}
    )

    user = await db.users.find_one({"_id": oid}, {"password": 0})
    return user_to_profile(user)
