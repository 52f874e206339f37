"""MongoDB models using Pydantic"""

from app.models.common import ShippingAddress, GuestInfo
from app.models.user import User, UserRole, UserAddress
from app.models.product import (
    Product,
    Category,
    GSTType,
    ProductImage,
    ProductSize,
    Specification,
    Review,
)
from app.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    PaymentMethod,
    PaymentResult,
    PaymentDetails,
    StatusHistoryEntry,
)

__all__ = [
    "ShippingAddress",
    "GuestInfo",
    "User",
    "UserRole",
    "UserAddress",
    "Product",
    "Category",
    "GSTType",
    "ProductImage",
    "ProductSize",
    "Specification",
    "Review",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "PaymentResult",
    "PaymentDetails",
    "StatusHistoryEntry",
]
