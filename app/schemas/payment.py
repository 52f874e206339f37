"""Razorpay payment schemas"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from app.models.common import ShippingAddress
from app.schemas.order import OrderItemInput


class CreatePaymentOrderRequest(BaseModel):
    """Checkout request; amount is what the client will charge and must match the server total"""
    amount: float = Field(gt=0)
    currency: str = "INR"
    items: List[OrderItemInput] = Field(min_length=1)
    shipping_address: ShippingAddress
    notes: Dict[str, str] = {}

    class Config:
        json_schema_extra = {
            "example": {
                "amount": 1680,
                "currency": "INR",
                "items": [
                    {"product": "507f191e810c19729de860ea", "quantity": 1},
                    {"product": "507f191e810c19729de860eb", "quantity": 1}
                ],
                "shipping_address": {
                    "full_name": "Asha Verma",
                    "address": "221 MG Road",
                    "city": "Bengaluru",
                    "state": "Karnataka",
                    "zip_code": "560001",
                    "phone": "+919876543210"
                }
            }
        }


class VerifyPaymentRequest(BaseModel):
    """Values returned by Razorpay Checkout on success"""
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    order_id: str


class PaymentConfigResponse(BaseModel):
    success: bool = True
    key_id: Optional[str] = None
    currency: str = "INR"
