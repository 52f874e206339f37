import pytest
from fastapi import HTTPException

from app.utils.currency import format_inr, parse_inr, to_paise, to_rupees
from app.utils.text import slugify
from app.utils.validators import parse_object_id, validate_object_id


def test_format_inr_uses_indian_grouping():
    assert format_inr(1234567.8) == "₹12,34,567.80"
    assert format_inr(999) == "₹999.00"
    assert format_inr(-1500) == "-₹1,500.00"


def test_format_inr_handles_junk():
    assert format_inr(None) == "₹0.00"
    assert format_inr("abc", show_symbol=False) == "0.00"


def test_parse_inr():
    assert parse_inr("₹1,234.56") == 1234.56
    assert parse_inr("") == 0
    assert parse_inr("not money") == 0


def test_paise_conversion():
    assert to_paise(1680) == 168000
    assert to_paise(99.99) == 9999
    assert to_rupees(168000) == 1680


def test_slugify():
    assert slugify("Men's Cotton T-Shirt!") == "mens-cotton-tshirt"
    assert slugify("  Linen   Kurta  ") == "linen-kurta"


def test_slugify_fallback_uses_prefix():
    assert slugify("!!!").startswith("product-")
    assert slugify("", prefix="category").startswith("category-")


def test_object_id_helpers():
    assert validate_object_id("507f1f77bcf86cd799439011")
    assert not validate_object_id("nope")

    with pytest.raises(HTTPException) as exc:
        parse_object_id("nope", "product ID")
    assert exc.value.status_code == 400
    assert exc.value.detail == "Invalid product ID"
