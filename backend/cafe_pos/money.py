# Overview: Fixed-point currency helpers (OMR, 3 decimal places).

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

MONEY_PLACES = Decimal("0.001")

# Numeric(10, 3) upper bound
MAX_PRICE_OMR = Decimal("9999999.999")


def quantize_money(value) -> Decimal:
    """
    Round to 3 decimal places, half-up.

    Floats go through str() first so their binary representation never
    reaches the total (0.1 + 0.2 stays 0.300).
    """
    if isinstance(value, float):
        value = str(value)
    if not isinstance(value, Decimal):
        value = Decimal(value)
    return value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def money_str(value) -> str | None:
    if value is None:
        return None
    return str(quantize_money(value))


def to_decimal(value) -> Decimal | None:
    """Parse a price-like input without rounding. None on garbage."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        parsed = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not parsed.is_finite():
        return None
    return parsed
