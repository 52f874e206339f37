"""Order schemas"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.models.common import ShippingAddress, GuestInfo
from app.models.order import (
    OrderStatus,
    PaymentStatus,
    PaymentMethod,
    PaymentResult,
    PaymentDetails,
    StatusHistoryEntry,
)


class OrderItemInput(BaseModel):
    """Cart line submitted at checkout"""
    product: str
    name: Optional[str] = None
    image: Optional[str] = None
    size: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    quantity: int = Field(ge=1)


class OrderCreate(BaseModel):
    """Schema for creating an order. Totals are optional and, when sent, must match the server's."""
    order_items: List[OrderItemInput] = Field(min_length=1)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    items_price: Optional[float] = Field(None, ge=0)
    tax_price: Optional[float] = Field(None, ge=0)
    shipping_price: Optional[float] = Field(None, ge=0)
    total_price: Optional[float] = Field(None, ge=0)
    discount_amount: float = Field(default=0, ge=0)
    coupon_code: str = ""
    guest_info: Optional[GuestInfo] = None
    notes: Optional[str] = Field(None, max_length=500)

    class Config:
        json_schema_extra = {
            "example": {
                "order_items": [
                    {"product": "507f191e810c19729de860ea", "quantity": 1, "price": 1000}
                ],
                "shipping_address": {
                    "full_name": "Asha Verma",
                    "address": "221 MG Road",
                    "city": "Bengaluru",
                    "state": "Karnataka",
                    "zip_code": "560001",
                    "country": "India",
                    "phone": "+919876543210"
                },
                "payment_method": "razorpay",
                "total_price": 1180
            }
        }


class OrderItemResponse(BaseModel):
    product: str
    name: str
    image: Optional[str] = None
    size: Optional[str] = None
    price: float
    quantity: int
    gst_rate: float
    gst_inclusive: bool
    tax_amount: float


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: str
    order_number: str
    user: Optional[str] = None
    guest_info: Optional[GuestInfo] = None
    is_guest_order: bool
    order_items: List[OrderItemResponse]
    total_items: int
    shipping_address: Optional[ShippingAddress] = None
    payment_method: PaymentMethod
    payment_result: Optional[PaymentResult] = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    payment_details: Optional[PaymentDetails] = None
    payment_status: PaymentStatus
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    discount_amount: float
    refunded_amount: float = 0
    coupon_code: str
    is_paid: bool
    paid_at: Optional[datetime] = None
    is_delivered: bool
    delivered_at: Optional[datetime] = None
    status: OrderStatus
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    status_history: List[StatusHistoryEntry] = []
    created_at: datetime
    updated_at: datetime


class PayOrderRequest(BaseModel):
    """Payment result reported by the client"""
    id: Optional[str] = None
    status: Optional[str] = None
    update_time: Optional[str] = None
    email_address: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    note: Optional[str] = Field(None, max_length=500)


class TrackingUpdate(BaseModel):
    tracking_number: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class RefundRequest(BaseModel):
    """Refund a paid Razorpay order; omit amount to refund the full total"""
    amount: Optional[float] = Field(None, gt=0)
    reason: Optional[str] = Field(None, max_length=200)
