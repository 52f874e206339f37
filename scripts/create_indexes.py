"""
Create MongoDB indexes for all collections

Run: python scripts/create_indexes.py
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from pymongo.errors import PyMongoError
from app.config import settings
from app.database import create_client, create_indexes
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def main() -> bool:
    print("=" * 60)
    print("  Create Indexes")
    print("=" * 60 + "\n")

    client = create_client()
    try:
        db = client[settings.mongodb_db_name]
        await create_indexes(db)

        for name in ["products", "users", "orders", "categories"]:
            indexes = await db[name].index_information()
            logger.info(f"📑 {name}: {', '.join(indexes)}")

        logger.info("✅ Indexes created")
        return True
    except PyMongoError as e:
        logger.error(f"❌ Failed to create indexes: {e}")
        return False
    finally:
        client.close()


if __name__ == "__main__":
    if not asyncio.run(main()):
        sys.exit(1)
