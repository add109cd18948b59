# store_core/common/money.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rest_framework.exceptions import ValidationError

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

CENTS = Decimal("0.01")
PRECISION = Decimal("0.0001")


def q2(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def q4(value: Decimal) -> Decimal:
    return value.quantize(PRECISION, rounding=ROUND_HALF_UP)


def to_decimal(value, field_name: str) -> Decimal:
    """
    Accepts Decimal / str / int / float and converts to Decimal safely.
    Raises ValidationError for invalid values.
    """
    if isinstance(value, Decimal):
        return value
    try:
        # str() handles int/float/str uniformly
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError({field_name: "Invalid decimal value."})


def total(values) -> Decimal:
    return q2(sum(values, ZERO))


def divide(amount: Decimal, parts: int) -> Decimal:
    """Split an amount into `parts`, rounded to cents."""
    if not parts:
        return ZERO
    return q2(amount / Decimal(parts))


def percentage(part: Decimal, whole: Decimal | None) -> Decimal:
    """
    part / whole * 100, dividing at 4 decimals and rounding to 2.
    A zero or missing whole yields 0.
    """
    if whole is None or whole == 0:
        return ZERO
    return q2(q4(part / whole) * HUNDRED)


def evolution(current: Decimal, previous: Decimal | None) -> Decimal:
    if previous is None or previous == 0:
        return ZERO
    return percentage(current - previous, previous)
