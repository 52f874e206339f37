"""
Seed the database with an admin, categories and sample products

Run: python scripts/seed_data.py
"""

import asyncio
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from pymongo.errors import PyMongoError
from app.config import settings
from app.core.gst import get_gst_suggestion
from app.core.security import hash_password
from app.database import create_client, create_indexes
from app.utils.text import slugify
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

CATEGORIES = [
    {"name": "Shirts", "description": "Casual and formal shirts", "sort_order": 1},
    {"name": "Jeans", "description": "Denim for every fit", "sort_order": 2},
    {"name": "Books", "description": "Style guides and lookbooks", "sort_order": 3},
    {"name": "Jewelry", "description": "Silver and gold accessories", "sort_order": 4},
]

PRODUCTS = [
    {
        "name": "Classic Linen Shirt", "category": "Shirts", "price": 1299, "sku": "SHIRT-LIN-001",
        "brand": "Yistorik", "quantity": 40, "is_featured": True,
        "sizes": [{"name": "M", "label": "Medium", "stock": 20}, {"name": "L", "label": "Large", "stock": 20}],
    },
    {
        "name": "Oxford Button Down", "category": "Shirts", "price": 1599, "sku": "SHIRT-OXF-002",
        "brand": "Yistorik", "quantity": 25, "gst_inclusive": True,
    },
    {
        "name": "Slim Fit Indigo Jeans", "category": "Jeans", "price": 2199, "sku": "JEAN-IND-001",
        "brand": "Yistorik", "quantity": 30, "is_featured": True,
    },
    {
        "name": "The Handloom Lookbook", "category": "Books", "price": 499, "sku": "BOOK-HND-001",
        "brand": "Yistorik Press", "quantity": 100,
    },
    {
        "name": "Oxidised Silver Studs", "category": "Jewelry", "price": 899, "sku": "JWL-SLV-001",
        "brand": "Yistorik", "quantity": 8,
    },
]


async def seed() -> bool:
    print("=" * 60)
    print("  Seed Database")
    print("=" * 60 + "\n")

    client = create_client()
    try:
        db = client[settings.mongodb_db_name]
        await create_indexes(db)

        await db.products.delete_many({})
        await db.categories.delete_many({})
        await db.users.delete_many({"email": settings.admin_email.lower()})
        logger.info("🗑️  Cleared products, categories and admin user")

        now = datetime.utcnow()
        await db.users.insert_one({
            "name": "Admin User",
            "email": settings.admin_email.lower(),
            "password": hash_password(settings.admin_password),
            "role": "admin",
            "is_active": True,
            "wishlist": [],
            "created_at": now,
            "updated_at": now,
        })
        logger.info(f"👤 Admin: {settings.admin_email}")

        category_ids = {}
        for category in CATEGORIES:
            result = await db.categories.insert_one({
                **category,
                "slug": slugify(category["name"], prefix="category"),
                "subcategories": [],
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            })
            category_ids[category["name"]] = str(result.inserted_id)
        logger.info(f"📂 Categories: {len(category_ids)}")

        for product in PRODUCTS:
            suggestion = get_gst_suggestion(product["category"]) or {"rate": 18, "hsn": None}
            doc = {
                "description": f"{product['name']} from the Yistorik collection",
                "track_quantity": True,
                "low_stock_threshold": 10,
                "images": [],
                "tags": [product["category"].lower()],
                "sizes": [],
                "specifications": [],
                "is_active": True,
                "is_featured": False,
                "reviews": [],
                "average_rating": 0,
                "num_reviews": 0,
                "sort_order": 0,
                "gst_rate": suggestion["rate"],
                "gst_type": "EXEMPT" if suggestion["rate"] == 0 else "CGST_SGST",
                "hsn_code": suggestion["hsn"],
                "gst_inclusive": False,
                "taxable": suggestion["rate"] > 0,
                "created_at": now,
                "updated_at": now,
                **product,
            }
            doc["category"] = category_ids[product["category"]]
            doc["slug"] = slugify(product["name"])
            await db.products.insert_one(doc)
            logger.info(f"   + {doc['name']} ({doc['sku']}) GST {doc['gst_rate']}%")

        logger.info(f"✅ Seeded {len(PRODUCTS)} products")
        return True
    except PyMongoError as e:
        logger.error(f"❌ Seeding failed: {e}")
        return False
    finally:
        client.close()


if __name__ == "__main__":
    if not asyncio.run(seed()):
        sys.exit(1)
