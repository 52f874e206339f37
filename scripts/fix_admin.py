"""
Recreate the admin account from ADMIN_EMAIL / ADMIN_PASSWORD with a fresh hash

Run: python scripts/fix_admin.py
"""

import asyncio
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from pymongo.errors import PyMongoError
from app.config import settings
from app.core.security import hash_password, verify_password
from app.database import create_client
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def fix_admin() -> bool:
    print("=" * 60)
    print("  Fix Admin User")
    print("=" * 60 + "\n")

    client = create_client()
    try:
        db = client[settings.mongodb_db_name]
        email = settings.admin_email.lower()

        result = await db.users.delete_many({"email": email})
        logger.info(f"🗑️  Removed {result.deleted_count} existing account(s) for {email}")

        hashed = hash_password(settings.admin_password)
        await db.users.insert_one({
            "name": "Admin User",
            "email": email,
            "password": hashed,
            "role": "admin",
            "is_active": True,
            "wishlist": [],
            "created_at": datetime.utcnow(),
            "updated_at": datetime.utcnow(),
        })

        admin = await db.users.find_one({"email": email})
        matches = verify_password(settings.admin_password, admin["password"])
        logger.info(f"✅ Admin recreated: {admin['email']} (role={admin['role']})")
        logger.info(f"🔑 Password check: {'OK' if matches else 'FAILED'}")
        return matches
    except PyMongoError as e:
        logger.error(f"❌ Failed to recreate admin: {e}")
        return False
    finally:
        client.close()


if __name__ == "__main__":
    if not asyncio.run(fix_admin()):
        sys.exit(1)
