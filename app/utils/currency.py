"""Indian Rupee formatting and paise conversion"""

import re

CURRENCY_CODE = "INR"
CURRENCY_SYMBOL = "₹"


def _group_indian(integer_part: str) -> str:
    """Group digits the Indian way: last three, then pairs (12,34,567)"""
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_inr(amount, show_symbol: bool = True, decimals: int = 2) -> str:
    """
    Format a number as Indian Rupees

    Args:
        amount: Amount in rupees (None or non-numeric formats as zero)
        show_symbol: Prefix the rupee symbol
        decimals: Number of decimal places

    Returns:
        Formatted string such as "₹1,23,456.78"
    """
    try:
        value = float(amount)
    except (TypeError, ValueError):
        value = 0.0

    sign = "-" if value < 0 else ""
    text = f"{abs(value):.{decimals}f}"
    integer_part, _, fraction = text.partition(".")
    grouped = _group_indian(integer_part)
    if fraction:
        grouped = f"{grouped}.{fraction}"

    symbol = CURRENCY_SYMBOL if show_symbol else ""
    return f"{sign}{symbol}{grouped}"


def parse_inr(text) -> float:
    """Parse a currency string like "₹1,234.56" back into a number"""
    if not text or not isinstance(text, str):
        return 0.0
    cleaned = re.sub(r"[₹,\s]", "", text)
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def to_paise(amount: float) -> int:
    """Rupees to paise, the unit Razorpay expects"""
    return int(round(float(amount) * 100))


def to_rupees(paise: int) -> float:
    """Paise to rupees"""
    return paise / 100
