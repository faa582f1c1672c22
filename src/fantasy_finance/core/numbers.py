"""Decimal helpers shared by storage and API layers."""

from decimal import Decimal, InvalidOperation
from typing import Union

DECIMAL_SCALE = 8
# Integer digits that survive quantize() in the default 28-digit context
MAX_INTEGER_DIGITS = 20
_QUANTUM = Decimal(1).scaleb(-DECIMAL_SCALE)
_LIMIT = Decimal(10) ** MAX_INTEGER_DIGITS


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """Coerce a number to Decimal; floats go through str() to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"not a decimal number: {value!r}") from exc


def quantize(value: Decimal) -> Decimal:
    """Round to the fixed storage scale."""
    return value.quantize(_QUANTUM)


def strip_zeros(value: Decimal) -> Decimal:
    """Drop trailing zeros without switching to exponent notation (10 stays 10)."""
    if value == value.to_integral_value():
        return value.quantize(Decimal(1))
    return value.normalize()


def to_storable(value: Decimal) -> Decimal:
    """
    Return ``value`` exactly as it will read back from a decimal column.

    Raises ValueError if the value is out of range or has more than
    DECIMAL_SCALE fractional digits.
    """
    if not value.is_finite():
        raise ValueError(f"{value} is not finite")
    if abs(value) >= _LIMIT:
        raise ValueError(f"{value} exceeds {MAX_INTEGER_DIGITS} integer digits")
    stored = quantize(value)
    if stored != value:
        raise ValueError(f"{value} has more than {DECIMAL_SCALE} decimal places")
    return strip_zeros(stored)
