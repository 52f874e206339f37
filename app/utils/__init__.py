"""Utility functions"""

from app.utils.pagination import get_skip, pagination_meta
from app.utils.validators import validate_object_id, parse_object_id
from app.utils.text import slugify
from app.utils.currency import format_inr, to_paise, to_rupees

__all__ = [
    "get_skip",
    "pagination_meta",
    "validate_object_id",
    "parse_object_id",
    "slugify",
    "format_inr",
    "to_paise",
    "to_rupees",
]
