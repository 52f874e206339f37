"""
Check the MongoDB connection configured in MONGODB_URI

Run: python scripts/check_mongo.py
"""

import asyncio
import re
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from pymongo.errors import ConfigurationError, OperationFailure, ServerSelectionTimeoutError
from app.config import settings
from app.database import create_client, ping
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def mask_uri(uri: str) -> str:
    """Hide the password in a connection string"""
    return re.sub(r"//([^:/@]+):([^@]+)@", r"//\1:****@", uri)


async def check_connection() -> bool:
    print("=" * 60)
    print("  MongoDB Connection Check")
    print("=" * 60 + "\n")

    logger.info(f"🔌 URI: {mask_uri(settings.mongodb_uri)}")
    logger.info(f"📦 Database: {settings.mongodb_db_name}")

    client = create_client()
    try:
        db = client[settings.mongodb_db_name]
        await ping(db)
        logger.info("✅ Connection successful!")

        collections = await db.list_collection_names()
        logger.info(f"📦 Collections: {collections if collections else '(none yet)'}")
        for name in collections:
            count = await db[name].estimated_document_count()
            logger.info(f"   - {name}: {count} documents")
        return True

    except ServerSelectionTimeoutError as e:
        logger.error(f"❌ Server selection timed out: {e}")
        logger.error("   Check that the cluster is running and your IP is on the access list")
    except OperationFailure as e:
        logger.error(f"❌ Operation failed: {e}")
        logger.error("   Check the username and password in MONGODB_URI")
    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        logger.error("   Check the format of MONGODB_URI")
    finally:
        client.close()

    return False


if __name__ == "__main__":
    if not asyncio.run(check_connection()):
        sys.exit(1)
