"""MongoDB database connection using Motor (async driver)"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, TEXT
import logging

from app.config import settings

logger = logging.getLogger(__name__)


class Database:
    """Database connection manager"""
    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None


database = Database()


def create_client(uri: str = None) -> AsyncIOMotorClient:
    """Build a Motor client with the connection options used by the API and scripts"""
    return AsyncIOMotorClient(
        uri or settings.mongodb_uri,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
        socketTimeoutMS=45000,
        maxPoolSize=20,
        minPoolSize=5,
        maxIdleTimeMS=30000,
        retryWrites=True,
        w="majority",
    )


async def connect_to_mongo():
    """Connect to MongoDB on application startup"""
    database.client = create_client()
    database.db = database.client[settings.mongodb_db_name]
    logger.info(f"Connected to MongoDB: {settings.mongodb_db_name}")


async def close_mongo_connection():
    """Close MongoDB connection on application shutdown"""
    if database.client:
        database.client.close()
        logger.info("Closed MongoDB connection")


def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance"""
    return database.db


async def ping(db: AsyncIOMotorDatabase) -> bool:
    """Return True when the server answers a ping"""
    result = await db.command("ping")
    return bool(result.get("ok"))


async def create_indexes(db: AsyncIOMotorDatabase):
    """
    Create uniqueness constraints and query indexes for all collections

    Args:
        db: Database instance
    """
    # Products
    await db.products.create_index([("slug", ASCENDING)], unique=True)
    await db.products.create_index([("sku", ASCENDING)], unique=True)
    await db.products.create_index([("is_active", ASCENDING)])
    await db.products.create_index([("category", ASCENDING)])
    await db.products.create_index([("subcategory", ASCENDING)])
    await db.products.create_index([("price", ASCENDING)])
    await db.products.create_index([("average_rating", DESCENDING)])
    await db.products.create_index([("created_at", DESCENDING)])
    await db.products.create_index([("sort_order", ASCENDING), ("created_at", DESCENDING)])
    await db.products.create_index(
        [("name", TEXT), ("description", TEXT), ("tags", TEXT)],
        name="product_text_search",
    )
    await db.products.create_index(
        [("is_active", ASCENDING), ("category", ASCENDING), ("price", ASCENDING)]
    )
    await db.products.create_index(
        [("track_quantity", ASCENDING), ("quantity", ASCENDING), ("low_stock_threshold", ASCENDING)]
    )
    logger.info("Product indexes created")

    # Users
    await db.users.create_index([("email", ASCENDING)], unique=True)
    await db.users.create_index([("is_active", ASCENDING)])
    await db.users.create_index([("role", ASCENDING)])
    await db.users.create_index([("last_login", DESCENDING)])
    logger.info("User indexes created")

    # Orders
    await db.orders.create_index([("order_number", ASCENDING)], unique=True)
    await db.orders.create_index([("user", ASCENDING), ("created_at", DESCENDING)])
    await db.orders.create_index([("status", ASCENDING), ("created_at", DESCENDING)])
    await db.orders.create_index([("is_paid", ASCENDING)])
    await db.orders.create_index([("razorpay_order_id", ASCENDING)], sparse=True)
    logger.info("Order indexes created")

    # Categories
    await db.categories.create_index([("slug", ASCENDING)], unique=True)
    await db.categories.create_index([("is_active", ASCENDING)])
    await db.categories.create_index([("sort_order", ASCENDING), ("name", ASCENDING)])
    await db.categories.create_index([("parent_category", ASCENDING)])
    logger.info("Category indexes created")
