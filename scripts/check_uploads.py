"""
Exercise the upload API end to end: admin login, image upload, delete

Run: python scripts/check_uploads.py
"""

import asyncio
import base64
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
from app.config import settings
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

API_BASE = f"{settings.backend_url.rstrip('/')}/api"

# 1x1 transparent PNG
TEST_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


async def main() -> bool:
    print("=" * 60)
    print("  Upload Endpoints Check")
    print("=" * 60 + "\n")

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            print("1. Admin login")
            response = await client.post(f"{API_BASE}/auth/login", json={
                "email": settings.admin_email,
                "password": settings.admin_password,
            })
            if response.status_code != 200:
                logger.error(f"❌ Login failed: {response.status_code} {response.text}")
                return False
            token = response.json()["token"]
            headers = {"Authorization": f"Bearer {token}"}
            logger.info("✅ Logged in as admin")

            print("\n2. Upload image")
            response = await client.post(
                f"{API_BASE}/upload/image",
                headers=headers,
                files={"image": ("test.png", TEST_PNG, "image/png")},
            )
            if response.status_code != 200:
                logger.error(f"❌ Upload failed: {response.status_code} {response.text}")
                return False
            image = response.json()["image"]
            logger.info(f"✅ Uploaded: {image['url']} (public_id={image['public_id']})")

            print("\n3. Delete image")
            response = await client.delete(f"{API_BASE}/upload/image/{image['public_id']}", headers=headers)
            if response.status_code != 200:
                logger.error(f"❌ Delete failed: {response.status_code} {response.text}")
                return False
            logger.info("✅ Deleted test image")
            return True

        except httpx.HTTPError as e:
            logger.error(f"❌ Request failed: {e}")
            return False


if __name__ == "__main__":
    if not asyncio.run(main()):
        sys.exit(1)
