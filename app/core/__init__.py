"""Core utilities for the application"""

from app.core.security import create_access_token, verify_token, hash_password, verify_password
from app.core.gst import calculate_gst, calculate_line_tax, calculate_order_totals

__all__ = [
    "create_access_token",
    "verify_token",
    "hash_password",
    "verify_password",
    "calculate_gst",
    "calculate_line_tax",
    "calculate_order_totals",
]
