"""
Debug admin authentication: look up (or create) the admin user and compare
passwords against the stored bcrypt hash

Run: python scripts/debug_auth.py
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


async def debug_auth() -> bool:
    print("=" * 60)
    print("  Auth Debug")
    print("=" * 60 + "\n")

    client = create_client()
    try:
        db = client[settings.mongodb_db_name]
        email = settings.admin_email.lower()

        print("\n1. Admin lookup")
        admin = await db.users.find_one({"email": email})
        if not admin:
            logger.warning(f"⚠️  No user with email {email}, creating one")
            await db.users.insert_one({
                "name": "Admin User",
                "email": email,
                "password": hash_password(settings.admin_password),
                "role": "admin",
                "is_active": True,
                "wishlist": [],
                "created_at": datetime.utcnow(),
                "updated_at": datetime.utcnow(),
            })
            admin = await db.users.find_one({"email": email})

        logger.info(f"👤 id={admin['_id']} role={admin.get('role')} active={admin.get('is_active')}")
        stored = admin.get("password", "")
        logger.info(f"🔒 Hash prefix: {stored[:7]}  length: {len(stored)}")

        print("\n2. Password comparisons")
        candidates = [settings.admin_password, settings.admin_password.upper(), "wrong-password"]
        results = {}
        for candidate in candidates:
            results[candidate] = verify_password(candidate, stored)
            logger.info(f"   '{candidate}': {'✅ match' if results[candidate] else '❌ no match'}")

        print("\n3. Fresh hash round trip")
        fresh = hash_password(settings.admin_password)
        logger.info(f"   New hash verifies: {verify_password(settings.admin_password, fresh)}")

        print("\n4. Users")
        async for user in db.users.find({}, {"email": 1, "role": 1, "is_active": 1}).limit(20):
            logger.info(f"   - {user['email']} ({user.get('role')}, active={user.get('is_active', True)})")

        if not results[settings.admin_password]:
            logger.error("❌ Configured admin password does not match. Run scripts/fix_admin.py")
            return False
        return True
    except PyMongoError as e:
        logger.error(f"❌ Database error: {e}")
        return False
    finally:
        client.close()


if __name__ == "__main__":
    if not asyncio.run(debug_auth()):
        sys.exit(1)
