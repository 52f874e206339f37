"""
Cloudinary integration check: configuration, API ping, upload/delete of a
test image and a listing of the store folder

Run: python scripts/check_cloudinary.py
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from cloudinary.exceptions import Error as CloudinaryError
from app.core import cloudinary_client
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

TEST_IMAGE_URL = "https://res.cloudinary.com/demo/image/upload/sample.jpg"


async def main() -> bool:
    print("=" * 60)
    print("  Cloudinary Check")
    print("=" * 60 + "\n")

    print("1. Environment variables")
    missing = cloudinary_client.missing_config()
    if missing:
        logger.error(f"❌ Missing: {', '.join(missing)}")
        return False
    logger.info("✅ All Cloudinary variables set")

    try:
        print("\n2. API ping")
        result = await cloudinary_client.ping()
        logger.info(f"✅ Ping: {result.get('status')}")

        print("\n3. Upload test image")
        uploaded = await cloudinary_client.upload_image(TEST_IMAGE_URL, folder="clothing-store/test")
        logger.info(f"✅ Uploaded: {uploaded['secure_url']}")
        logger.info(f"   public_id={uploaded['public_id']} {uploaded.get('width')}x{uploaded.get('height')}")

        derived = cloudinary_client.extract_public_id(uploaded["secure_url"])
        logger.info(f"   Public id from URL: {derived} ({'matches' if derived == uploaded['public_id'] else 'differs'})")

        print("\n4. Delete test image")
        deleted = await cloudinary_client.delete_image(uploaded["public_id"])
        logger.info(f"✅ Delete result: {deleted.get('result')}")

        print("\n5. Folder listing")
        resources = await cloudinary_client.list_resources()
        logger.info(f"📁 {len(resources)} resource(s) under {cloudinary_client.ROOT_FOLDER}/")
        for resource in resources:
            logger.info(f"   - {resource['public_id']} ({resource.get('bytes')} bytes)")

        return True
    except CloudinaryError as e:
        logger.error(f"❌ Cloudinary error: {e}")
        return False


if __name__ == "__main__":
    if not asyncio.run(main()):
        sys.exit(1)
