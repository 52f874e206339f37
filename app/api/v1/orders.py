"""Order endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError
from datetime import datetime
from bson import ObjectId
from typing import List, Optional
import logging
import secrets

from app.database import get_database
from app.api.deps import get_current_user, get_optional_user
from app.core.gst import calculate_order_totals, amounts_match
from app.schemas.order import (
    OrderItemInput,
    OrderCreate,
    OrderResponse,
    OrderItemResponse,
    PayOrderRequest,
)
from app.utils.currency import format_inr
from app.utils.pagination import get_skip, pagination_meta
from app.utils.validators import parse_object_id

router = APIRouter()
logger = logging.getLogger(__name__)

RECONCILED_FIELDS = ["items_price", "tax_price", "shipping_price", "total_price"]


# Helper functions

def generate_order_number() -> str:
    """Generate unique order number"""
    timestamp = datetime.utcnow().strftime("%Y%m%d")
    random_suffix = secrets.token_hex(4).upper()
    return f"ORD-{timestamp}-{random_suffix}"


def history_entry(status_value: str, note: Optional[str] = None) -> dict:
    return {"status": status_value, "date": datetime.utcnow(), "note": note}


async def price_order_items(items_input: List[OrderItemInput], db: AsyncIOMotorDatabase) -> tuple:
    """
    Price a cart from the stored products and compute GST totals.

    Unit prices, GST rates and the inclusive flag always come from the
    product documents. A price sent by the client must equal the stored one.

    Returns:
        (order_items, totals) where totals is the calculate_order_totals() result
    """
    priced = []
    requested = {}

    for item in items_input:
        product_id = parse_object_id(item.product, "product ID")
        product = await db.products.find_one({"_id": product_id, "is_active": True})

        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product {item.name or item.product} not found"
            )

        if item.price is not None and not amounts_match(product["price"], item.price):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Price mismatch for {product['name']}"
            )

        # Several lines may name the same product in different sizes
        requested[product_id] = requested.get(product_id, 0) + item.quantity
        if product.get("track_quantity", True) and product.get("quantity", 0) < requested[product_id]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Insufficient stock for {product['name']}. Available: {product.get('quantity', 0)}"
            )

        images = product.get("images", [])
        main_image = next((img for img in images if img.get("is_main")), images[0] if images else None)

        priced.append({
            "product": str(product["_id"]),
            "name": product["name"],
            "image": item.image or (main_image["url"] if main_image else None),
            "size": item.size,
            "price": product["price"],
            "quantity": item.quantity,
            "gst_rate": (product.get("gst_rate") or 0) if product.get("taxable", True) else 0,
            "gst_inclusive": product.get("gst_inclusive", False),
            "track_quantity": product.get("track_quantity", True),
        })

    totals = calculate_order_totals(priced)

    order_items = []
    for item, line in zip(priced, totals["lines"]):
        item["tax_amount"] = line["tax_amount"]
        order_items.append(item)

    return order_items, totals


def check_submitted_totals(submitted: dict, totals: dict):
    """Reject client totals that do not reconcile with the server's"""
    for field in RECONCILED_FIELDS:
        value = submitted.get(field)
        if value is not None and not amounts_match(totals[field], value):
            logger.warning(f"Order {field} mismatch: expected {totals[field]}, received {value}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"Order total mismatch for {field}: expected {format_inr(totals[field])}, "
                    f"received {format_inr(value)}"
                )
            )


def stock_requirements(order_items: list) -> dict:
    """Total quantity per tracked product across all order lines"""
    needed = {}
    for item in order_items:
        if not item.get("track_quantity", True):
            continue
        needed.setdefault(item["product"], [item["name"], 0])
        needed[item["product"]][1] += item["quantity"]
    return needed


async def restore_stock(taken: dict, db: AsyncIOMotorDatabase):
    for product_id, quantity in taken.items():
        await db.products.update_one(
            {"_id": ObjectId(product_id)},
            {"$inc": {"quantity": quantity}}
        )


async def decrement_stock(order_items: list, db: AsyncIOMotorDatabase) -> Optional[str]:
    """
    Take ordered quantities out of stock for products that track quantity.

    Each product is only decremented while enough units remain. If any
    product falls short, the quantities already taken are put back.

    Returns:
        None on success, otherwise the name of the product that ran out
    """
    taken = {}

    for product_id, (name, quantity) in stock_requirements(order_items).items():
        result = await db.products.update_one(
            {"_id": ObjectId(product_id), "quantity": {"$gte": quantity}},
            {"$inc": {"quantity": -quantity}}
        )
        if result.modified_count == 0:
            await restore_stock(taken, db)
            return name
        taken[product_id] = quantity

    return None


async def insert_order(order_doc: dict, db: AsyncIOMotorDatabase) -> dict:
    """Insert an order, retrying once if the generated order number collides"""
    try:
        result = await db.orders.insert_one(order_doc)
    except DuplicateKeyError:
        order_doc.pop("_id", None)
        order_doc["order_number"] = generate_order_number()
        result = await db.orders.insert_one(order_doc)
    order_doc["_id"] = result.inserted_id
    return order_doc


def order_to_response(order: dict) -> OrderResponse:
    """Convert database order document to OrderResponse"""
    items = order.get("order_items", [])
    return OrderResponse(
        id=str(order["_id"]),
        order_number=order["order_number"],
        user=str(order["user"]) if order.get("user") else None,
        guest_info=order.get("guest_info"),
        is_guest_order=order.get("is_guest_order", False),
        order_items=[
            OrderItemResponse(
                product=str(item["product"]),
                name=item["name"],
                image=item.get("image"),
                size=item.get("size"),
                price=item["price"],
                quantity=item["quantity"],
                gst_rate=item.get("gst_rate", 0),
                gst_inclusive=item.get("gst_inclusive", False),
                tax_amount=item.get("tax_amount", 0),
            )
            for item in items
        ],
        total_items=sum(item["quantity"] for item in items),
        shipping_address=order.get("shipping_address"),
        payment_method=order["payment_method"],
        payment_result=order.get("payment_result"),
        razorpay_order_id=order.get("razorpay_order_id"),
        razorpay_payment_id=order.get("razorpay_payment_id"),
        payment_details=order.get("payment_details"),
        payment_status=order.get("payment_status", "pending"),
        items_price=order["items_price"],
        tax_price=order.get("tax_price", 0),
        shipping_price=order.get("shipping_price", 0),
        total_price=order["total_price"],
        discount_amount=order.get("discount_amount", 0),
        refunded_amount=order.get("refunded_amount", 0),
        coupon_code=order.get("coupon_code", ""),
        is_paid=order.get("is_paid", False),
        paid_at=order.get("paid_at"),
        is_delivered=order.get("is_delivered", False),
        delivered_at=order.get("delivered_at"),
        status=order.get("status", "pending"),
        tracking_number=order.get("tracking_number"),
        notes=order.get("notes"),
        status_history=order.get("status_history", []),
        created_at=order.get("created_at", datetime.utcnow()),
        updated_at=order.get("updated_at", datetime.utcnow()),
    )


async def get_order_for_user(order_id: str, current_user: dict, db: AsyncIOMotorDatabase) -> dict:
    """Load an order the current user owns (admins may load any order)"""
    order = await db.orders.find_one({"_id": parse_object_id(order_id, "order ID")})

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    if order.get("user") != current_user["_id"] and current_user.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this order"
        )

    return order


# Order endpoints

@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    current_user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Place an order. Authenticated and guest checkout are both supported.
    Prices and GST are computed from the catalog, and any totals the client
    sends must reconcile with them.
    """
    if not current_user and not (order_data.guest_info and order_data.guest_info.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Guest orders require a contact email"
        )

    order_items, totals = await price_order_items(order_data.order_items, db)
    check_submitted_totals(order_data.model_dump(), totals)

    order_doc = {
        "order_number": generate_order_number(),
        "user": current_user["_id"] if current_user else None,
        "guest_info": None if current_user else order_data.guest_info.model_dump(),
        "is_guest_order": current_user is None,
        "order_items": order_items,
        "shipping_address": order_data.shipping_address.model_dump(),
        "payment_method": order_data.payment_method.value,
        "payment_status": "pending",
        "items_price": totals["items_price"],
        "tax_price": totals["tax_price"],
        "shipping_price": totals["shipping_price"],
        "total_price": totals["total_price"],
        "discount_amount": 0,
        "refunded_amount": 0,
        "coupon_code": order_data.coupon_code,
        "is_paid": False,
        "is_delivered": False,
        "status": "pending",
        "notes": order_data.notes,
        "status_history": [history_entry("pending", "Order placed")],
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }

    short = await decrement_stock(order_items, db)
    if short:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Insufficient stock for {short}"
        )

    try:
        order = await insert_order(order_doc, db)
    except PyMongoError:
        await restore_stock(
            {product_id: quantity for product_id, (_, quantity) in stock_requirements(order_items).items()},
            db
        )
        raise

    logger.info(f"Created order {order['order_number']} total {totals['total_price']}")

    return order_to_response(order)


@router.get("/myorders")
async def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List the current user's orders, newest first.
    """
    query = {"user": current_user["_id"]}

    cursor = db.orders.find(query).sort("created_at", -1).skip(get_skip(page, limit)).limit(limit)
    orders = await cursor.to_list(length=limit)
    total = await db.orders.count_documents(query)

    return {
        "orders": [order_to_response(o) for o in orders],
        "pagination": pagination_meta(page, limit, total),
    }


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get an order. Users can only see their own orders.
    """
    order = await get_order_for_user(order_id, current_user, db)
    return order_to_response(order)


@router.put("/{order_id}/pay", response_model=OrderResponse)
async def mark_order_paid(
    order_id: str,
    payment: PayOrderRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Record a payment reported by the client and move the order to processing.
    """
    order = await get_order_for_user(order_id, current_user, db)

    if order.get("user") != current_user["_id"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to update this order"
        )

    if order.get("is_paid"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Order is already paid"
        )

    now = datetime.utcnow()
    await db.orders.update_one(
        {"_id": order["_id"]},
        {
            "$set": {
                "is_paid": True,
                "paid_at": now,
                "status": "processing",
                "payment_status": "completed",
                "payment_result": payment.model_dump(),
                "updated_at": now,
            },
            "$push": {"status_history": history_entry("processing", "Payment received")},
        }
    )

    order = await db.orders.find_one({"_id": order["_id"]})
    return order_to_response(order)
