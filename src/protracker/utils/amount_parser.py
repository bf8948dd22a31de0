"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Any


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"
    - "₹1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = re.sub(r"[$€£¥₹]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}': not a finite number")
    return -amount if is_negative else amount


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """Convert a stored numeric value (JSON number or string) to Decimal.

    ``None`` yields ``default``. Floats go through ``str`` so that ``40.1``
    becomes ``Decimal("40.1")`` rather than its binary expansion.

    Raises:
        ValueError: If the value is not numeric
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"Could not parse amount {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return parse_amount(str(value))
    if isinstance(value, str):
        return parse_amount(value)
    raise ValueError(f"Could not parse amount {value!r}")


def decimal_to_json(value: Decimal) -> int | Decimal:
    """Render a Decimal as a JSON number value.

    Integral amounts become ints. Other amounts stay Decimal and are written
    with their exact digits by ``simplejson`` (``use_decimal=True``).
    """
    if value == value.to_integral_value():
        return int(value)
    return value
