"""GST (Indian Goods and Services Tax) calculations"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional

from app.config import settings
from app.utils.currency import format_inr

# Standard GST slabs
GST_RATES = {
    "EXEMPT": 0,
    "SPECIAL_JEWELRY": 3,
    "ESSENTIAL": 5,
    "STANDARD_LOW": 12,
    "STANDARD": 18,
    "LUXURY": 28,
}

STANDARD_GST_RATES = [0, 3, 5, 12, 18, 28]

MAX_GST_RATE = 28

GST_CATEGORY_SUGGESTIONS = {
    "clothing": {"rate": 12, "note": "Textiles and clothing typically have 12% GST", "hsn": "6203"},
    "textiles": {"rate": 12, "note": "Textile products typically have 12% GST", "hsn": "5208"},
    "electronics": {"rate": 18, "note": "Electronics typically have 18% GST", "hsn": "8517"},
    "mobile": {"rate": 18, "note": "Mobile phones typically have 18% GST", "hsn": "8517"},
    "computer": {"rate": 18, "note": "Computers typically have 18% GST", "hsn": "8471"},
    "food": {"rate": 5, "note": "Food items typically have 5% GST", "hsn": "1905"},
    "books": {"rate": 0, "note": "Books are typically GST exempt (0%)", "hsn": "4901"},
    "cosmetics": {"rate": 18, "note": "Cosmetics typically have 18% GST", "hsn": "3304"},
    "jewelry": {"rate": 3, "note": "Jewelry typically has 3% GST", "hsn": "7113"},
    "gold": {"rate": 3, "note": "Gold jewelry typically has 3% GST", "hsn": "7108"},
    "silver": {"rate": 3, "note": "Silver jewelry typically has 3% GST", "hsn": "7106"},
    "automobiles": {"rate": 28, "note": "Automobiles typically have 28% GST", "hsn": "8703"},
    "cars": {"rate": 28, "note": "Cars typically have 28% GST", "hsn": "8703"},
    "furniture": {"rate": 12, "note": "Furniture typically has 12% GST", "hsn": "9403"},
    "medicines": {"rate": 5, "note": "Medicines typically have 5% GST", "hsn": "3004"},
    "luxury": {"rate": 28, "note": "Luxury items typically have 28% GST", "hsn": "9999"},
    "shoes": {"rate": 18, "note": "Footwear typically has 18% GST", "hsn": "6403"},
    "bags": {"rate": 18, "note": "Bags and luggage typically have 18% GST", "hsn": "4202"},
    "watches": {"rate": 18, "note": "Watches typically have 18% GST", "hsn": "9102"},
    "toys": {"rate": 12, "note": "Toys typically have 12% GST", "hsn": "9503"},
    "sports": {"rate": 18, "note": "Sports equipment typically has 18% GST", "hsn": "9506"},
    "home": {"rate": 18, "note": "Home appliances typically have 18% GST", "hsn": "8516"},
    "kitchen": {"rate": 18, "note": "Kitchen appliances typically have 18% GST", "hsn": "8516"},
}

COMMON_GST_RATES = [
    {"rate": 0, "label": "0%", "description": "Exempt items"},
    {"rate": 3, "label": "3%", "description": "Jewelry, precious metals"},
    {"rate": 5, "label": "5%", "description": "Essential items, food"},
    {"rate": 12, "label": "12%", "description": "Standard items, textiles"},
    {"rate": 18, "label": "18%", "description": "Most goods & services"},
    {"rate": 28, "label": "28%", "description": "Luxury items, automobiles"},
]


def _to_float(value) -> float:
    """Coerce a price/rate-like value to float, treating None and junk as 0"""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_quantity(value) -> int:
    """Cart lines without a quantity count as one unit"""
    if value is None or value == "":
        return 1
    return int(value)


def _round(value: float) -> float:
    return round(value, 2)


def calculate_line_tax(price: float, quantity: int = 1, gst_rate: float = 0,
                       gst_inclusive: bool = False) -> float:
    """
    GST carried by one cart line.

    Exclusive prices add ``price * qty * rate / 100`` on top. Inclusive
    prices already contain the tax, which is ``total - total / (1 + rate/100)``.

    Args:
        price: Unit price as listed
        quantity: Number of units
        gst_rate: GST percentage (None counts as 0)
        gst_inclusive: Whether the listed price already includes GST

    Returns:
        Unrounded tax amount for the line
    """
    rate = _to_float(gst_rate)
    line_total = _to_float(price) * _to_quantity(quantity)

    if rate <= 0 or line_total <= 0:
        return 0.0

    if gst_inclusive:
        return line_total - (line_total / (1 + rate / 100))
    return line_total * (rate / 100)


def calculate_gst(base_price: float, gst_rate: float, gst_inclusive: bool = False) -> Dict:
    """
    Split a single price into base, GST and total

    Args:
        base_price: Listed price
        gst_rate: GST percentage
        gst_inclusive: Whether the listed price includes GST

    Returns:
        Dictionary with base_price, gst_amount, total_price, gst_rate, gst_inclusive
    """
    price = _to_float(base_price)
    rate = _to_float(gst_rate)

    if gst_inclusive:
        gst_amount = (price * rate) / (100 + rate)
        return {
            "base_price": price - gst_amount,
            "gst_amount": gst_amount,
            "total_price": price,
            "gst_rate": rate,
            "gst_inclusive": True,
        }

    gst_amount = (price * rate) / 100
    return {
        "base_price": price,
        "gst_amount": gst_amount,
        "total_price": price + gst_amount,
        "gst_rate": rate,
        "gst_inclusive": False,
    }


def calculate_shipping(subtotal: float, item_count: int = 1) -> float:
    """Flat shipping rate, free above the configured threshold or for empty carts"""
    if item_count == 0 or subtotal > settings.free_shipping_threshold:
        return 0.0
    return float(settings.shipping_price)


def calculate_order_totals(items: Iterable[Dict], shipping_price: Optional[float] = None) -> Dict:
    """
    Aggregate prices and GST across a cart of mixed-rate items.

    Each item is a mapping with ``price``, ``quantity``, ``gst_rate`` and
    ``gst_inclusive``. ``items_price`` is the pre-tax value of the goods, so
    ``total_price == items_price + shipping_price + tax_price`` holds for
    inclusive and exclusive lines alike. Free shipping is judged on the
    listed subtotal (price times quantity), before any tax is split out.

    Args:
        items: Cart lines
        shipping_price: Override for the computed shipping charge

    Returns:
        Dictionary with lines, listed_subtotal, items_price, tax_price,
        shipping_price, total_price
    """
    lines: List[Dict] = []
    items_price = 0.0
    tax_price = 0.0
    listed_subtotal = 0.0

    for item in items:
        price = _to_float(item.get("price"))
        quantity = _to_quantity(item.get("quantity"))
        rate = _to_float(item.get("gst_rate"))
        inclusive = bool(item.get("gst_inclusive", False))

        line_total = price * quantity
        tax = calculate_line_tax(price, quantity, rate, inclusive)
        base = line_total - tax if inclusive else line_total

        lines.append({
            "price": price,
            "quantity": quantity,
            "gst_rate": rate,
            "gst_inclusive": inclusive,
            "line_base": _round(base),
            "tax_amount": _round(tax),
            "line_total": _round(base + tax),
        })

        items_price += base
        listed_subtotal += line_total
        tax_price += tax

    items_price = _round(items_price)
    tax_price = _round(tax_price)

    if shipping_price is None:
        shipping_price = calculate_shipping(listed_subtotal, len(lines))
    shipping_price = _round(_to_float(shipping_price))

    return {
        "lines": lines,
        "listed_subtotal": _round(listed_subtotal),
        "items_price": items_price,
        "tax_price": tax_price,
        "shipping_price": shipping_price,
        "total_price": _round(items_price + shipping_price + tax_price),
    }


def amounts_match(expected: float, submitted: float, tolerance: float = 0.01) -> bool:
    """Whether an amount submitted by a client reconciles with the server total"""
    return abs(_to_float(expected) - _to_float(submitted)) <= tolerance


def validate_gst_rate(rate) -> Dict:
    """
    Validate a GST rate entered for a product

    Returns:
        {"valid": bool} plus "error" or "warning" where applicable
    """
    try:
        value = Decimal(str(rate).strip())
    except (InvalidOperation, ValueError):
        return {"valid": False, "error": "Please enter a valid number"}

    if not value.is_finite():
        return {"valid": False, "error": "Please enter a valid number"}

    if value < 0:
        return {"valid": False, "error": "GST rate cannot be negative"}

    if value > MAX_GST_RATE:
        return {"valid": False, "error": f"GST rate cannot exceed {MAX_GST_RATE}%"}

    if value.normalize().as_tuple().exponent < -2:
        return {"valid": False, "error": "GST rate can have maximum 2 decimal places"}

    if value == value.to_integral_value() and int(value) not in STANDARD_GST_RATES:
        return {
            "valid": True,
            "warning": (
                f"{int(value)}% is not a standard GST rate. "
                "Common rates are 0%, 3%, 5%, 12%, 18%, 28%"
            ),
        }

    return {"valid": True}


def is_standard_gst_rate(rate) -> bool:
    return _to_float(rate) in STANDARD_GST_RATES


def get_gst_suggestion(category_name: Optional[str]) -> Optional[Dict]:
    """Suggest a GST rate and HSN code from a category name"""
    if not category_name:
        return None

    name = category_name.lower().strip()

    if name in GST_CATEGORY_SUGGESTIONS:
        return GST_CATEGORY_SUGGESTIONS[name]

    for key, suggestion in GST_CATEGORY_SUGGESTIONS.items():
        if key in name or name in key:
            return suggestion

    return None


def format_gst_calculation(calculation: Dict) -> Dict:
    """Human-readable strings for a calculate_gst() result"""
    base = calculation["base_price"]
    gst_amount = calculation["gst_amount"]
    total = calculation["total_price"]
    rate = calculation["gst_rate"]

    if calculation["gst_inclusive"]:
        breakdown = f"Total: {format_inr(total)} (incl. {format_inr(gst_amount)} GST)"
    else:
        breakdown = f"Base: {format_inr(base)} + GST: {format_inr(gst_amount)} = Total: {format_inr(total)}"

    return {
        "base_price": format_inr(base),
        "gst_amount": format_inr(gst_amount),
        "total_price": format_inr(total),
        "gst_rate": f"{rate:g}%",
        "breakdown": breakdown,
    }
