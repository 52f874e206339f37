"""Razorpay payment endpoints"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
import json
import logging

from app.config import settings
from app.database import get_database
from app.api.deps import get_current_user
from app.api.v1.orders import (
    generate_order_number,
    history_entry,
    insert_order,
    price_order_items,
    decrement_stock,
)
from app.core import razorpay_client
from app.core.gst import amounts_match
from app.schemas.payment import (
    CreatePaymentOrderRequest,
    VerifyPaymentRequest,
    PaymentConfigResponse,
)
from app.utils.currency import format_inr, to_rupees
from app.utils.validators import parse_object_id

router = APIRouter()
logger = logging.getLogger(__name__)


async def complete_payment(order: dict, db: AsyncIOMotorDatabase, payment_id: str = None,
                           payment_details: dict = None) -> bool:
    """
    Mark an order as paid and take its items out of stock.

    Returns False when the order had already been completed, so repeated
    notifications for the same payment change nothing.
    """
    now = datetime.utcnow()
    update = {
        "payment_status": "completed",
        "is_paid": True,
        "paid_at": now,
        "status": "processing",
        "updated_at": now,
    }
    if payment_id:
        update["razorpay_payment_id"] = payment_id
    if payment_details:
        update["payment_details"] = payment_details

    result = await db.orders.update_one(
        {"_id": order["_id"], "payment_status": {"$ne": "completed"}},
        {"$set": update, "$push": {"status_history": history_entry("processing", "Payment captured")}}
    )

    if result.modified_count == 0:
        return False

    short = await decrement_stock(order.get("order_items", []), db)
    if short:
        # The money is already captured, so the order stays paid for an admin to resolve
        logger.error(f"Order {order['order_number']} paid but {short} is out of stock")
        await db.orders.update_one(
            {"_id": order["_id"]},
            {"$push": {"status_history": history_entry("processing", f"Insufficient stock for {short}")}}
        )
        return True

    logger.info(f"Order {order['order_number']} paid")
    return True


def payment_details_from(payment: dict) -> dict:
    """Subset of a Razorpay payment entity kept on the order"""
    created = payment.get("created_at")
    return {
        "method": payment.get("method"),
        "bank": payment.get("bank"),
        "wallet": payment.get("wallet"),
        "vpa": payment.get("vpa"),
        "card_id": payment.get("card_id"),
        "amount": to_rupees(payment.get("amount", 0)),
        "currency": payment.get("currency"),
        "status": payment.get("status"),
        "created_at": datetime.utcfromtimestamp(created) if created else None,
    }


@router.post("/create-order")
async def create_payment_order(
    request: CreatePaymentOrderRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Create a Razorpay order for the cart and a pending order in the database.
    The amount the client intends to charge must match the server total.
    """
    order_items, totals = await price_order_items(request.items, db)

    if not amounts_match(totals["total_price"], request.amount):
        logger.warning(
            f"Payment amount mismatch for user {current_user['_id']}: "
            f"expected {totals['total_price']}, received {request.amount}"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Amount mismatch: expected {format_inr(totals['total_price'])}, "
                f"received {format_inr(request.amount)}"
            )
        )

    order_number = generate_order_number()
    notes = {
        **request.notes,
        "user_id": current_user["_id"],
        "user_email": current_user["email"],
        "order_number": order_number,
    }

    try:
        razorpay_order = await razorpay_client.create_order(
            amount=totals["total_price"],
            receipt=order_number,
            currency=request.currency,
            notes=notes,
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create payment order: {str(e)}"
        )

    order_doc = {
        "order_number": order_number,
        "user": current_user["_id"],
        "guest_info": None,
        "is_guest_order": False,
        "order_items": order_items,
        "shipping_address": request.shipping_address.model_dump(),
        "payment_method": "razorpay",
        "payment_status": "pending",
        "razorpay_order_id": razorpay_order["id"],
        "items_price": totals["items_price"],
        "tax_price": totals["tax_price"],
        "shipping_price": totals["shipping_price"],
        "total_price": totals["total_price"],
        "discount_amount": 0,
        "refunded_amount": 0,
        "coupon_code": "",
        "is_paid": False,
        "is_delivered": False,
        "status": "pending",
        "status_history": [history_entry("pending", "Awaiting payment")],
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }
    order = await insert_order(order_doc, db)

    return {
        "success": True,
        "order": {
            "id": razorpay_order["id"],
            "amount": razorpay_order["amount"],
            "currency": razorpay_order["currency"],
            "receipt": razorpay_order.get("receipt"),
        },
        "key_id": settings.razorpay_key_id,
        "order_id": str(order["_id"]),
        "totals": {k: totals[k] for k in ["items_price", "tax_price", "shipping_price", "total_price"]},
        "user": {
            "name": current_user.get("name"),
            "email": current_user.get("email"),
            "contact": current_user.get("phone") or "",
        },
    }


@router.post("/verify")
async def verify_payment(
    request: VerifyPaymentRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Verify the checkout signature and mark the order as paid.
    """
    if not razorpay_client.verify_payment_signature(
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature,
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payment signature"
        )

    order = await db.orders.find_one({"_id": parse_object_id(request.order_id, "order ID")})

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    if order.get("user") != current_user["_id"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized access to order"
        )

    if order.get("razorpay_order_id") != request.razorpay_order_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payment does not belong to this order"
        )

    try:
        payment = await razorpay_client.fetch_payment(request.razorpay_payment_id)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch payment details: {str(e)}"
        )

    await complete_payment(
        order,
        db,
        payment_id=request.razorpay_payment_id,
        payment_details=payment_details_from(payment),
    )
    order = await db.orders.find_one({"_id": order["_id"]})

    return {
        "success": True,
        "message": "Payment verified successfully",
        "order": {
            "id": str(order["_id"]),
            "order_number": order["order_number"],
            "status": order["status"],
            "payment_status": order["payment_status"],
            "total_amount": order["total_price"],
            "paid_at": order.get("paid_at"),
        },
    }


def webhook_entity(payload: dict, kind: str) -> dict:
    """The payment or order entity carried by a webhook event"""
    section = payload.get(kind) if isinstance(payload, dict) else None
    entity = section.get("entity") if isinstance(section, dict) else None
    if not isinstance(entity, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook payload"
        )
    return entity


@router.post("/webhook")
async def razorpay_webhook(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Razorpay webhook receiver. The raw body is checked against the
    X-Razorpay-Signature header before any event is processed.
    """
    try:
        body = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook payload"
        )
    signature = request.headers.get("x-razorpay-signature", "")

    if not razorpay_client.verify_webhook_signature(body, signature):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook signature"
        )

    try:
        event = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook payload"
        )

    if not isinstance(event, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook payload"
        )

    event_type = event.get("event")
    payload = event.get("payload") or {}
    logger.info(f"Razorpay webhook event: {event_type}")

    if event_type == "payment.captured":
        payment = webhook_entity(payload, "payment")
        order = await db.orders.find_one({"razorpay_order_id": payment.get("order_id")})
        if order:
            await complete_payment(order, db, payment_id=payment.get("id"),
                                   payment_details=payment_details_from(payment))

    elif event_type == "payment.failed":
        payment = webhook_entity(payload, "payment")
        order = await db.orders.find_one({"razorpay_order_id": payment.get("order_id")})
        if order and order.get("payment_status") != "completed":
            await db.orders.update_one(
                {"_id": order["_id"]},
                {
                    "$set": {
                        "payment_status": "failed",
                        "status": "cancelled",
                        "updated_at": datetime.utcnow(),
                    },
                    "$push": {"status_history": history_entry(
                        "cancelled", payment.get("error_description") or "Payment failed"
                    )},
                }
            )
            logger.info(f"Order {order['order_number']} payment failed")

    elif event_type == "order.paid":
        razorpay_order = webhook_entity(payload, "order")
        order = await db.orders.find_one({"razorpay_order_id": razorpay_order.get("id")})
        if order:
            await complete_payment(order, db)

    else:
        logger.info(f"Unhandled webhook event: {event_type}")

    return {"success": True}


@router.get("/config", response_model=PaymentConfigResponse)
async def get_payment_config():
    """
    Public Razorpay key for the checkout widget.
    """
    return PaymentConfigResponse(success=True, key_id=settings.razorpay_key_id, currency="INR")
