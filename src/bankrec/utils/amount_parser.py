"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
from typing import Optional
import re

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def parse_statement_amount(amount_str: Optional[str], default: Optional[Decimal] = None) -> Decimal:
    """Parse a statement amount, fee or balance column.

    Everything except digits, the minus sign and the decimal point is
    stripped before conversion, so "£1,234.50" and "1234.50 GBP" both parse.

    Args:
        amount_str: Raw column value
        default: Value returned for an empty column; None makes it an error

    Returns:
        Decimal amount

    Raises:
        ValueError: If the column is empty without a default, or not a number
    """
    if amount_str is None or not amount_str.strip():
        if default is not None:
            return default
        raise ValueError("Empty amount string")

    cleaned = _NON_NUMERIC.sub("", amount_str)
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount


def parse_amount(amount_str: str) -> Decimal:
    """Parse a user-supplied amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45" / "£123.45"
    - "-123.45"
    - "1,234.56"
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

    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount
