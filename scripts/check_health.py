"""
Backend health check against BACKEND_URL: server, database, endpoints,
CORS preflight, environment variables and response time

Run: python scripts/check_health.py
"""

import asyncio
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
from pymongo.errors import PyMongoError
from app.config import settings
from app.database import create_client, ping
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

API_BASE = f"{settings.backend_url.rstrip('/')}/api"
HEADERS = {"User-Agent": "Health-Check-Script", "Accept": "application/json"}
SLOW_RESPONSE_MS = 2000

ENDPOINTS = [
    ("Products", "/products/"),
    ("Categories", "/categories/"),
    ("Auth Status", "/auth/me"),
]


async def check_server(client: httpx.AsyncClient) -> bool:
    print("\n1. 🏥 Server Health Check...")
    try:
        response = await client.get(f"{API_BASE}/health")
        logger.info(f"✅ Server is responding: {response.status_code} {response.json()}")
        return response.status_code == 200
    except httpx.HTTPError as e:
        logger.error(f"❌ Server health check failed: {e}")
        return False


async def check_database() -> bool:
    print("\n2. 🗄️  Database Connection Check...")
    mongo = create_client()
    try:
        db = mongo[settings.mongodb_db_name]
        await ping(db)
        collections = await db.list_collection_names()
        logger.info(f"✅ Database connection successful, {len(collections)} collections")
        for name in collections:
            logger.info(f"   - {name}")
        return True
    except PyMongoError as e:
        logger.error(f"❌ Database connection failed: {e}")
        return False
    finally:
        mongo.close()


async def check_endpoints(client: httpx.AsyncClient) -> bool:
    print("\n3. 🔌 API Endpoints Check...")
    healthy = True
    for name, path in ENDPOINTS:
        try:
            response = await client.get(f"{API_BASE}{path}")
        except httpx.HTTPError as e:
            logger.error(f"   ❌ {name}: {e}")
            healthy = False
            continue

        # 4xx means the route is up, e.g. /auth/me without a token
        ok = response.status_code < 500
        healthy = healthy and ok
        data = response.json()
        if isinstance(data, list):
            summary = f"array with {len(data)} items"
        else:
            summary = f"object with keys: {', '.join(data)}"
        logger.info(f"   {'✅' if ok else '❌'} {name}: {response.status_code} ({summary})")
    return healthy


async def check_cors(client: httpx.AsyncClient) -> bool:
    print("\n4. 🌐 CORS Headers Check...")
    try:
        response = await client.options(f"{API_BASE}/products/", headers={
            "Origin": "https://www.yistorik.in",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Content-Type",
        })
    except httpx.HTTPError as e:
        logger.error(f"❌ CORS preflight failed: {e}")
        return False

    for header in ["access-control-allow-origin", "access-control-allow-methods", "access-control-allow-headers"]:
        logger.info(f"   {header}: {response.headers.get(header)}")
    ok = response.status_code == 200
    logger.info(f"{'✅' if ok else '❌'} CORS preflight: {response.status_code}")
    return ok


def check_environment() -> bool:
    print("\n5. ⚙️  Environment Variables Check...")
    values = {
        "MONGODB_URI": settings.mongodb_uri,
        "JWT_SECRET": settings.jwt_secret,
        "ENVIRONMENT": settings.environment,
        "PORT": settings.port,
    }
    for name, value in values.items():
        logger.info(f"   {'✅' if value else '❌'} {name}: {'Set' if value else 'Missing'}")
    return all(values.values())


async def check_performance(client: httpx.AsyncClient) -> bool:
    print("\n6. ⚡ Performance Check...")
    start = time.perf_counter()
    try:
        await client.get(f"{API_BASE}/health")
    except httpx.HTTPError as e:
        logger.error(f"❌ Performance check failed: {e}")
        return False
    elapsed_ms = (time.perf_counter() - start) * 1000
    ok = elapsed_ms < SLOW_RESPONSE_MS
    logger.info(f"{'✅' if ok else '⚠️ '} Response time: {elapsed_ms:.0f}ms")
    return ok


async def main() -> bool:
    print("=" * 60)
    print("  Backend Health Check")
    print("=" * 60)
    logger.info(f"🔍 Checking backend at: {settings.backend_url}")

    async with httpx.AsyncClient(timeout=10.0, headers=HEADERS) as client:
        results = [
            await check_server(client),
            await check_database(),
            await check_endpoints(client),
            await check_cors(client),
            check_environment(),
            await check_performance(client),
        ]

    print("\n" + "=" * 60)
    print(f"  {sum(results)}/{len(results)} checks passed")
    print("=" * 60)
    return all(results)


if __name__ == "__main__":
    if not asyncio.run(main()):
        sys.exit(1)
