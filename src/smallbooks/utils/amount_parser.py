"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from smallbooks.domain.errors import InvalidAmount


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        InvalidAmount: If amount string cannot be parsed
    """
    if amount_str is None or not str(amount_str).strip():
        raise InvalidAmount("Invalid amount: empty value")

    original = str(amount_str)
    amount_str = original.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = re.sub(r"[$€£¥]", "", amount_str)

    # Remove thousands separators
    amount_str = amount_str.replace(",", "")

    amount_str = amount_str.strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise InvalidAmount(f"Invalid amount: {original}")

    if not amount.is_finite():
        raise InvalidAmount(f"Invalid amount: {original}")

    return -amount if is_negative else amount
