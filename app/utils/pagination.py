"""Pagination utilities"""

from math import ceil


def get_skip(page: int, limit: int) -> int:
    """Number of documents to skip for a 1-indexed page"""
    return (page - 1) * limit


def pagination_meta(page: int, limit: int, total: int) -> dict:
    """
    Build the pagination block returned alongside list results

    Args:
        page: Current page number (1-indexed)
        limit: Number of items per page
        total: Total number of matching documents

    Returns:
        Dictionary with page, limit, total and pages
    """
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": ceil(total / limit) if total > 0 else 0,
    }
