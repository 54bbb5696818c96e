"""
Amount Handling Module

Fixed-point Decimal amounts for balances and transactions.
NEVER uses float arithmetic for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Union

from .config import get_config
from .errors import InvalidAmount

# Set global decimal context for financial precision
getcontext().prec = 28

AmountLike = Union[Decimal, int, str, float]

ZERO = Decimal('0')


def quantum() -> Decimal:
    """Smallest representable amount at the configured precision"""
    return Decimal('0.1') ** get_config().amount_precision


def to_amount(value: AmountLike) -> Decimal:
    """
    Convert a caller-supplied value to a Decimal rounded to amount precision

    Args:
        value: Decimal, int, numeric string, or float (converted via str)

    Returns:
        Quantized Decimal

    Raises:
        InvalidAmount: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"Amount must be a number, got {value!r}")

    if not isinstance(value, Decimal):
        if not isinstance(value, (int, float, str)):
            raise InvalidAmount(f"Amount must be a number, got {value!r}")
        try:
            value = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmount(f"Cannot convert {value!r} to an amount")

    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value}")

    try:
        return value.quantize(quantum(), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(f"Amount {value} exceeds supported precision")


def format_amount(amount: Decimal) -> str:
    """Format an amount for display, e.g. $1,100.00"""
    settings = get_config()
    return f"{settings.currency_symbol}{amount:,.{settings.amount_precision}f}"
