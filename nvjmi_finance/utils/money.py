"""Currency helpers: amounts live as integer cents, Decimal only at the edges"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")


def to_cents(value: Any) -> int:
    """
    Convert a display amount (Decimal, float, int, numeric string) to integer cents.

    Rounds half-up to the nearest cent. Missing or unparseable values become 0
    so partially populated records still produce a sane (zeroed) figure.

    Example:
        to_cents("10.005") -> 1001
        to_cents(None) -> 0
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return 0
    if not amount.is_finite():
        return 0
    return int((amount.quantize(CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def cents_to_decimal(cents: int | None) -> Decimal:
    """Convert integer cents back to a 2-place Decimal"""
    return (Decimal(cents or 0) / 100).quantize(CENT)


def divide_cents(total_cents: int, parts: int) -> int:
    """Average of total_cents over parts, rounded half-up to a whole cent"""
    if parts <= 0:
        return total_cents
    return int((Decimal(total_cents) / parts).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_money(cents: int | None, symbol: str = "RM") -> str:
    """Render cents for display, e.g. 123456 -> 'RM 1,234.56', -500 -> '-RM 5.00'"""
    amount = cents_to_decimal(cents)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol} {abs(amount):,.2f}"
