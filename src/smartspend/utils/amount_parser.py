"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Any

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥₹]")

# Amount columns are Numeric(12, 2): at most ten digits before the point.
MAX_INTEGER_DIGITS = 10


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45" / "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    text = str(amount_str).strip()

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    text = _CURRENCY_SYMBOLS.sub("", text).replace(",", "").strip()

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if amount and amount.adjusted() >= MAX_INTEGER_DIGITS:
        raise ValueError(f"Amount '{amount_str}' is out of range")
    return -amount if is_negative else amount


def to_decimal(value: Any) -> Decimal:
    """Coerce an int, float, string or Decimal to Decimal.

    Floats go through str() so 0.1 stays 0.1 rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Could not parse amount '{value}'")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    return parse_amount(value)
