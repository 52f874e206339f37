"""Main FastAPI application"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime
import logging

from app.config import settings
from app.database import connect_to_mongo, close_mongo_connection, database, ping
from app.core import razorpay_client, cloudinary_client
from app.core.cors import get_allowed_origins, ALLOWED_METHODS, ALLOWED_HEADERS, EXPOSED_HEADERS
from app.api.v1 import auth, users, categories, products, orders, payments, admin, upload

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events"""
    # Startup
    logger.info(f"Starting up {settings.app_name} ({settings.environment})...")
    await connect_to_mongo()

    if not razorpay_client.validate_config():
        logger.error("Razorpay configuration is invalid. Payment routes may not work properly.")
    missing = cloudinary_client.missing_config()
    if missing:
        logger.warning(f"Missing Cloudinary environment variables: {missing}")

    logger.info("Application ready!")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await close_mongo_connection()
    logger.info("Shutdown complete!")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="""
    Storefront API for an Indian clothing store.

    ## Features

    * **Authentication**: Email/password accounts with bcrypt and JWT
    * **Catalog**: Products with GST settings, categories, reviews and wishlists
    * **Orders**: Guest and account checkout with server-side GST totals
    * **Payments**: Razorpay orders, signature verification and webhooks
    * **Admin**: Catalog, order and user management with Cloudinary image uploads

    ## Authentication

    Protected endpoints require a JWT in the Authorization header:
    ```
    Authorization: Bearer <your_jwt_token>
    ```
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=ALLOWED_METHODS,
    allow_headers=ALLOWED_HEADERS,
    expose_headers=EXPOSED_HEADERS,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its status and duration"""
    start = datetime.utcnow()
    response = await call_next(request)
    elapsed_ms = (datetime.utcnow() - start).total_seconds() * 1000
    logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.0f}ms")
    return response


# Health check endpoints
@app.get("/api/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint to verify the API is running.
    """
    return {
        "status": "OK",
        "message": "Server is running",
        "timestamp": datetime.utcnow().isoformat(),
    }


@app.get("/api/health/db", tags=["Health"])
async def database_health():
    """
    Report whether MongoDB answers a ping.
    """
    if database.db is None:
        return JSONResponse(
            status_code=503,
            content={"status": "ERROR", "database": "not connected"}
        )
    try:
        await ping(database.db)
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return JSONResponse(
            status_code=503,
            content={"status": "ERROR", "database": "unreachable", "error": str(e)}
        )
    return {"status": "OK", "database": "connected"}


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "success": True,
        "message": f"Welcome to {settings.app_name}",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
    }


# Include routers
app.include_router(
    auth.router,
    prefix="/api/auth",
    tags=["Authentication"]
)

app.include_router(
    users.router,
    prefix="/api/users",
    tags=["Users"]
)

app.include_router(
    categories.router,
    prefix="/api/categories",
    tags=["Categories"]
)

app.include_router(
    products.router,
    prefix="/api/products",
    tags=["Products"]
)

app.include_router(
    orders.router,
    prefix="/api/orders",
    tags=["Orders"]
)

app.include_router(
    payments.router,
    prefix="/api/payment",
    tags=["Payments"]
)

app.include_router(
    admin.router,
    prefix="/api/admin",
    tags=["Admin"]
)

app.include_router(
    upload.router,
    prefix="/api/upload",
    tags=["Upload"]
)


# Error handlers
@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Custom 404 handler"""
    detail = "The requested resource was not found"
    if isinstance(exc, HTTPException) and exc.detail and exc.detail != "Not Found":
        detail = exc.detail
    return JSONResponse(
        status_code=404,
        content={
            "success": False,
            "error": "Not Found",
            "detail": detail
        }
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Custom 500 handler"""
    logger.error(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred. Please try again later."
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level="info"
    )
