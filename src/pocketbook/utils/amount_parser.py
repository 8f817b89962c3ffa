"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

CURRENCY_PATTERN = re.compile(r"^(rs\.?|lkr|usd|eur|gbp)\s*|\s*(rs\.?|lkr|usd|eur|gbp)$|[$€£¥₹]", re.I)


def parse_amount(amount_str: str) -> Decimal:
    """Parse a money amount into a positive Decimal.

    Accepts thousands separators and a currency symbol or code, e.g.
    "1,234.56", "$12", "Rs. 2,500" or "LKR 100".

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If the string isn't a number, or is zero or negative
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = CURRENCY_PATTERN.sub("", amount_str.strip()).replace(",", "").strip()
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Amount must be a positive number, got '{amount_str}'")
    return amount
