"""
Send CORS preflight requests from every allowed origin, plus one foreign
origin that must be rejected

Run: python scripts/check_cors.py
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
from app.config import settings
from app.core.cors import get_allowed_origins, is_origin_allowed
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

FOREIGN_ORIGIN = "https://malicious-site.example"
TEST_PATH = "/api/products/"


async def preflight(client: httpx.AsyncClient, origin: str) -> bool:
    """Return True when the server echoes the origin back"""
    response = await client.options(
        f"{settings.backend_url.rstrip('/')}{TEST_PATH}",
        headers={
            "Origin": origin,
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Content-Type,Authorization",
        },
    )
    allowed = response.headers.get("access-control-allow-origin") == origin
    logger.info(f"   {origin}: {response.status_code} allow-origin={response.headers.get('access-control-allow-origin')}")
    return allowed


async def main() -> bool:
    print("=" * 60)
    print("  CORS Check")
    print("=" * 60 + "\n")

    failures = []
    async with httpx.AsyncClient(timeout=10.0) as client:
        try:
            for origin in get_allowed_origins():
                if not await preflight(client, origin):
                    failures.append(origin)

            if await preflight(client, FOREIGN_ORIGIN):
                logger.error(f"❌ Foreign origin {FOREIGN_ORIGIN} was allowed")
                failures.append(FOREIGN_ORIGIN)
            else:
                logger.info(f"✅ Foreign origin rejected (allow-list says {is_origin_allowed(FOREIGN_ORIGIN)})")
        except httpx.HTTPError as e:
            logger.error(f"❌ Request failed: {e}")
            return False

    if failures:
        logger.error(f"❌ Unexpected CORS results for: {failures}")
        return False

    logger.info("✅ All origins behave as configured")
    return True


if __name__ == "__main__":
    if not asyncio.run(main()):
        sys.exit(1)
