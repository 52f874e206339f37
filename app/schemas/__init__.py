"""Pydantic schemas for request/response validation"""

from app.schemas.common import SuccessResponse, ErrorResponse, PaginationMeta
from app.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    UserProfileResponse,
    UpdateProfileRequest,
)
from app.schemas.user import UserStatusUpdate
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ReviewCreate,
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
)
from app.schemas.order import (
    OrderItemInput,
    OrderCreate,
    OrderResponse,
    OrderItemResponse,
    PayOrderRequest,
    OrderStatusUpdate,
    TrackingUpdate,
    RefundRequest,
)
from app.schemas.payment import (
    CreatePaymentOrderRequest,
    VerifyPaymentRequest,
    PaymentConfigResponse,
)

__all__ = [
    "SuccessResponse",
    "ErrorResponse",
    "PaginationMeta",
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "UserProfileResponse",
    "UpdateProfileRequest",
    "UserStatusUpdate",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "ReviewCreate",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "OrderItemInput",
    "OrderCreate",
    "OrderResponse",
    "OrderItemResponse",
    "PayOrderRequest",
    "OrderStatusUpdate",
    "TrackingUpdate",
    "RefundRequest",
    "CreatePaymentOrderRequest",
    "VerifyPaymentRequest",
    "PaymentConfigResponse",
]
