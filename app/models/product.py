"""Product and category models"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum


class GSTType(str, Enum):
    """How GST is levied on a product"""
    CGST_SGST = "CGST_SGST"
    IGST = "IGST"
    EXEMPT = "EXEMPT"
    ZERO_RATED = "ZERO_RATED"


class ProductImage(BaseModel):
    """Product image hosted on Cloudinary"""
    url: str
    alt: Optional[str] = None
    is_main: bool = False
    public_id: Optional[str] = None


class ProductSize(BaseModel):
    """Size variant with its own stock"""
    name: str
    label: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    is_available: bool = True
    sort_order: int = 0


class Specification(BaseModel):
    name: str
    value: str


class Review(BaseModel):
    """Customer review"""
    user: str
    name: str
    rating: int = Field(ge=1, le=5)
    comment: str = Field(max_length=500)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Product(BaseModel):
    """Product model"""
    id: Optional[str] = Field(None, alias="_id")
    name: str = Field(max_length=100)
    slug: str
    description: str = Field(max_length=2000)
    short_description: Optional[str] = Field(None, max_length=200)
    price: float = Field(ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    sku: str
    barcode: Optional[str] = None
    track_quantity: bool = True
    quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = 10
    images: List[ProductImage] = []
    category: str
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    tags: List[str] = []
    sizes: List[ProductSize] = []
    specifications: List[Specification] = []
    is_active: bool = True
    is_featured: bool = False
    reviews: List[Review] = []
    average_rating: float = 0
    num_reviews: int = 0
    sort_order: int = 0
    gst_rate: float = Field(default=18, ge=0, le=28)
    gst_type: GSTType = GSTType.CGST_SGST
    hsn_code: Optional[str] = Field(None, max_length=10)
    gst_inclusive: bool = False
    taxable: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "Classic Linen Shirt",
                "slug": "classic-linen-shirt",
                "description": "Breathable linen shirt for everyday wear",
                "price": 1299,
                "compare_price": 1599,
                "sku": "LIN-SHIRT-001",
                "quantity": 40,
                "category": "507f1f77bcf86cd799439011",
                "brand": "Yistorik",
                "gst_rate": 12,
                "gst_type": "CGST_SGST",
                "hsn_code": "6205",
                "gst_inclusive": False
            }
        }

    @property
    def in_stock(self) -> bool:
        """Products that do not track quantity are always in stock"""
        if not self.track_quantity:
            return True
        return self.quantity > 0

    @property
    def is_low_stock(self) -> bool:
        if not self.track_quantity:
            return False
        return self.quantity <= self.low_stock_threshold


class Category(BaseModel):
    """Product category model"""
    id: Optional[str] = Field(None, alias="_id")
    name: str = Field(max_length=50)
    slug: str
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = None
    image_public_id: Optional[str] = None
    parent_category: Optional[str] = None
    subcategories: List[str] = []
    is_active: bool = True
    sort_order: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "Shirts",
                "slug": "shirts",
                "description": "Casual and formal shirts",
                "image": "https://res.cloudinary.com/demo/image/upload/clothing-store/categories/shirts.jpg",
                "is_active": True,
                "sort_order": 1
            }
        }
