"""Allowed browser origins for CORS"""

from typing import List, Optional
from app.config import settings

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "https://localhost:5173",
    "https://localhost:5174",
    "https://yistorik.in",
    "https://www.yistorik.in",
    "http://yistorik.in",
    "http://www.yistorik.in",
    "https://new-yistorik.vercel.app",
    "https://new-yistorik-delta.vercel.app",
]

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-Requested-With"]
EXPOSED_HEADERS = ["Content-Length", "Content-Type"]


def get_allowed_origins() -> List[str]:
    """Static allow-list plus FRONTEND_URL and CORS_ORIGINS, without duplicates"""
    origins = list(DEFAULT_ALLOWED_ORIGINS)
    extra = [settings.frontend_url] + list(settings.cors_origins)
    for origin in extra:
        if origin and origin.rstrip("/") not in origins:
            origins.append(origin.rstrip("/"))
    return origins


def is_origin_allowed(origin: Optional[str]) -> bool:
    """Exact-match lookup of a request Origin header"""
    if not origin:
        return False
    return origin.rstrip("/") in get_allowed_origins()
