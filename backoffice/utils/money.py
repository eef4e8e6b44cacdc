"""
Money helpers.

All commission arithmetic runs on Decimal and is settled to cents here.
"""

from decimal import Decimal

from backoffice.config.commission_constants import (
    MONEY_QUANTUM,
    MONEY_ROUNDING,
    PERCENT_SCALE,
    ZERO,
)


def quantize_money(amount: Decimal) -> Decimal:
    """Round amount to cents (half-up)."""
    return amount.quantize(MONEY_QUANTUM, rounding=MONEY_ROUNDING)


def percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    """
    Apply a 0-100 percent rate to an amount.

    Formula: amount * rate / 100, rounded to cents

    Example:
        >>> percent_of(Decimal("100"), Decimal("12.5"))
        Decimal('12.50')
    """
    return quantize_money(amount * rate / PERCENT_SCALE)


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a column value to Decimal (None becomes zero)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
