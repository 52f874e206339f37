"""Slug generation"""

import re
import time


def slugify(name: str, prefix: str = "product") -> str:
    """
    Build a URL slug from a display name

    Non-alphanumeric characters are dropped, whitespace runs become single
    hyphens. Names that leave nothing behind fall back to "<prefix>-<epoch ms>".
    """
    slug = ""
    if name and name.strip():
        slug = name.lower().strip()
        slug = re.sub(r"[^a-z0-9\s]", "", slug)
        slug = re.sub(r"\s+", "-", slug)
        slug = re.sub(r"-+", "-", slug)
        slug = slug.strip("-")

    if not slug:
        slug = f"{prefix}-{int(time.time() * 1000)}"

    return slug
