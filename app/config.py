"""Application configuration using Pydantic Settings"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # App
    app_name: str = "Yistorik Store API"
    debug: bool = False
    environment: str = "development"
    port: int = 5001

    # Database
    mongodb_uri: str = "mongodb://localhost:27017/clothing-store"
    mongodb_db_name: str = "clothing-store"

    # Security
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 30  # 30 days

    # Razorpay
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_webhook_secret: str = ""

    # Cloudinary
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "clothing-store/products"

    # Admin account used by seed and diagnostic scripts
    admin_email: str = "admin@example.com"
    admin_password: str = "admin123"

    # URLs
    backend_url: str = "http://localhost:5001"
    frontend_url: Optional[str] = None
    cors_origins: List[str] = []

    # Checkout
    free_shipping_threshold: float = 499.0
    shipping_price: float = 99.0

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
