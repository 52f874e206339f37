"""Order models"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum
from app.models.common import ShippingAddress, GuestInfo


class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    """Payment status enumeration"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    RAZORPAY = "razorpay"
    CASH_ON_DELIVERY = "cash_on_delivery"


class OrderItem(BaseModel):
    """Order line with the price and GST captured at checkout"""
    product: str
    name: str
    image: Optional[str] = None
    size: Optional[str] = None
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    gst_rate: float = 0
    gst_inclusive: bool = False
    tax_amount: float = 0


class PaymentResult(BaseModel):
    id: Optional[str] = None
    status: Optional[str] = None
    update_time: Optional[str] = None
    email_address: Optional[str] = None


class PaymentDetails(BaseModel):
    """Payment details reported by Razorpay"""
    method: Optional[str] = None
    bank: Optional[str] = None
    wallet: Optional[str] = None
    vpa: Optional[str] = None
    card_id: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class StatusHistoryEntry(BaseModel):
    status: OrderStatus
    date: datetime = Field(default_factory=datetime.utcnow)
    note: Optional[str] = None


class Order(BaseModel):
    """Order model"""
    id: Optional[str] = Field(None, alias="_id")
    order_number: str
    user: Optional[str] = None
    guest_info: Optional[GuestInfo] = None
    is_guest_order: bool = False
    order_items: List[OrderItem]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    payment_result: Optional[PaymentResult] = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    payment_details: Optional[PaymentDetails] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    items_price: float = Field(ge=0)
    tax_price: float = Field(default=0, ge=0)
    shipping_price: float = Field(default=0, ge=0)
    total_price: float = Field(ge=0)
    discount_amount: float = Field(default=0, ge=0)
    refunded_amount: float = Field(default=0, ge=0)
    coupon_code: str = ""
    is_paid: bool = False
    paid_at: Optional[datetime] = None
    is_delivered: bool = False
    delivered_at: Optional[datetime] = None
    status: OrderStatus = OrderStatus.PENDING
    tracking_number: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)
    status_history: List[StatusHistoryEntry] = []
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.order_items)
