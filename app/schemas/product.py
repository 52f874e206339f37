"""Product and category schemas for CRUD operations"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from app.core.gst import validate_gst_rate
from app.models.product import GSTType, ProductImage, ProductSize, Specification, Review
from app.schemas.common import PaginationMeta


def _check_gst_rate(value):
    if value is None:
        return value
    result = validate_gst_rate(value)
    if not result["valid"]:
        raise ValueError(result["error"])
    return value


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=200)
    price: float = Field(ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    sku: str = Field(min_length=1)
    barcode: Optional[str] = None
    track_quantity: bool = True
    quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    images: List[ProductImage] = []
    category: str
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    tags: List[str] = []
    sizes: List[ProductSize] = []
    specifications: List[Specification] = []
    is_active: bool = True
    is_featured: bool = False
    sort_order: int = 0
    gst_rate: float = 18
    gst_type: GSTType = GSTType.CGST_SGST
    hsn_code: Optional[str] = Field(None, max_length=10)
    gst_inclusive: bool = False
    taxable: bool = True

    @field_validator("gst_rate")
    @classmethod
    def check_gst_rate(cls, v):
        return _check_gst_rate(v)

    @field_validator("name", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("cannot be empty")
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Classic Linen Shirt",
                "description": "Breathable linen shirt for everyday wear",
                "price": 1299,
                "sku": "LIN-SHIRT-001",
                "quantity": 40,
                "category": "507f1f77bcf86cd799439011",
                "gst_rate": 12,
                "gst_inclusive": False
            }
        }


class ProductUpdate(BaseModel):
    """Schema for updating a product"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=200)
    price: Optional[float] = Field(None, ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    sku: Optional[str] = Field(None, min_length=1)
    barcode: Optional[str] = None
    track_quantity: Optional[bool] = None
    quantity: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    images: Optional[List[ProductImage]] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    tags: Optional[List[str]] = None
    sizes: Optional[List[ProductSize]] = None
    specifications: Optional[List[Specification]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    sort_order: Optional[int] = None
    gst_rate: Optional[float] = None
    gst_type: Optional[GSTType] = None
    hsn_code: Optional[str] = Field(None, max_length=10)
    gst_inclusive: Optional[bool] = None
    taxable: Optional[bool] = None

    @field_validator("gst_rate")
    @classmethod
    def check_gst_rate(cls, v):
        return _check_gst_rate(v)

    class Config:
        json_schema_extra = {
            "example": {
                "price": 1199,
                "quantity": 25,
                "gst_rate": 5
            }
        }


class ProductResponse(BaseModel):
    """Schema for product response"""
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: float
    compare_price: Optional[float] = None
    sku: str
    track_quantity: bool
    quantity: int
    low_stock_threshold: int
    in_stock: bool
    is_low_stock: bool
    images: List[ProductImage]
    category: Optional[str] = None
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    tags: List[str]
    sizes: List[ProductSize]
    specifications: List[Specification]
    is_active: bool
    is_featured: bool
    reviews: List[Review] = []
    average_rating: float
    num_reviews: int
    sort_order: int
    gst_rate: float
    gst_type: GSTType
    hsn_code: Optional[str] = None
    gst_inclusive: bool
    taxable: bool
    is_in_wishlist: Optional[bool] = None
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    pagination: PaginationMeta


class ReviewCreate(BaseModel):
    """Schema for adding a review"""
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1, max_length=500)

    class Config:
        json_schema_extra = {
            "example": {
                "rating": 5,
                "comment": "Great fit and fabric"
            }
        }


class CategoryCreate(BaseModel):
    """Schema for creating a new category"""
    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = None
    image_public_id: Optional[str] = None
    parent_category: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Shirts",
                "description": "Casual and formal shirts",
                "sort_order": 1
            }
        }


class CategoryUpdate(BaseModel):
    """Schema for updating a category"""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = None
    image_public_id: Optional[str] = None
    parent_category: Optional[str] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class CategoryResponse(BaseModel):
    """Schema for category response"""
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    image_public_id: Optional[str] = None
    parent_category: Optional[str] = None
    subcategories: List[str] = []
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime
