import os

os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "test_key_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "test_webhook_secret"
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "123456"
os.environ["CLOUDINARY_API_SECRET"] = "cloud-secret"
os.environ["FRONTEND_URL"] = "https://shop.example.com"

import asyncio
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.main import app
from app.database import get_database
from app.core.security import create_access_token, hash_password


def run(coro):
    """Run a database coroutine from a synchronous test"""
    return asyncio.run(coro)


@pytest.fixture
def db():
    database = AsyncMongoMockClient()["test-store"]
    app.dependency_overrides[get_database] = lambda: database
    yield database
    app.dependency_overrides.clear()


@pytest.fixture
def client(db):
    return TestClient(app)


def insert_user(db, email="asha@example.com", password="secret123", role="user", is_active=True, name="Asha Verma"):
    doc = {
        "name": name,
        "email": email,
        "password": hash_password(password),
        "role": role,
        "is_active": is_active,
        "wishlist": [],
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }
    result = run(db.users.insert_one(doc))
    doc["_id"] = result.inserted_id
    return doc


def auth_header(user):
    token = create_access_token({"sub": str(user["_id"]), "role": user["role"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(db):
    return insert_user(db)


@pytest.fixture
def admin(db):
    return insert_user(db, email="admin@example.com", password="admin123", role="admin", name="Admin User")


@pytest.fixture
def user_headers(user):
    return auth_header(user)


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin)


@pytest.fixture
def category(db):
    doc = {
        "name": "Shirts",
        "slug": "shirts",
        "description": "Casual and formal shirts",
        "subcategories": [],
        "is_active": True,
        "sort_order": 1,
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }
    result = run(db.categories.insert_one(doc))
    doc["_id"] = result.inserted_id
    return doc


@pytest.fixture
def make_product(db, category):
    counter = {"n": 0}

    def factory(**overrides):
        counter["n"] += 1
        n = counter["n"]
        doc = {
            "name": f"Product {n}",
            "slug": f"product-{n}",
            "description": "Test product",
            "price": 1000,
            "sku": f"SKU-{n:03d}",
            "track_quantity": True,
            "quantity": 10,
            "low_stock_threshold": 3,
            "images": [],
            "category": str(category["_id"]),
            "tags": [],
            "sizes": [],
            "specifications": [],
            "is_active": True,
            "is_featured": False,
            "reviews": [],
            "average_rating": 0,
            "num_reviews": 0,
            "sort_order": 0,
            "gst_rate": 18,
            "gst_type": "CGST_SGST",
            "gst_inclusive": False,
            "taxable": True,
            "created_at": datetime.utcnow(),
            "updated_at": datetime.utcnow(),
        }
        doc.update(overrides)
        result = run(db.products.insert_one(doc))
        doc["_id"] = result.inserted_id
        return doc

    return factory


SHIPPING_ADDRESS = {
    "full_name": "Asha Verma",
    "address": "221 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "zip_code": "560001",
    "country": "India",
    "phone": "+919876543210",
}
