# -*- coding: utf-8 -*-
"""
Deterministic Decimal Helpers

All engine arithmetic runs on ``Decimal`` built from the string form of
the input, and every reported figure is rounded with ROUND_HALF_UP. The
same inputs therefore always produce bit-identical floats, independent of
float accumulation order.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Union

Number = Union[int, float, Decimal]

CENTS = Decimal("0.01")
WHOLE = Decimal("1")


def to_decimal(value: Any) -> Decimal:
    """
    Convert an int, float, str or Decimal to Decimal without float noise.

    Converts through ``str`` so that ``0.276`` becomes ``Decimal('0.276')``
    rather than its binary expansion.

    Raises:
        TypeError: If value is not a numeric type or numeric string
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Cannot convert bool to Decimal")
    if isinstance(value, (int, float, str)):
        return Decimal(str(value).strip())
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")


def quantize(value: Number, step: Decimal = CENTS) -> Decimal:
    """Round half-up to the precision of ``step``."""
    return to_decimal(value).quantize(step, rounding=ROUND_HALF_UP)


def round2(value: Number) -> float:
    """Round half-up to 2 decimal places and return a float."""
    return float(quantize(value, CENTS))


def round_whole(value: Number) -> float:
    """Round half-up to a whole number and return a float."""
    return float(quantize(value, WHOLE))


def dsum(values: Iterable[Decimal]) -> Decimal:
    """Sum Decimals starting from ``Decimal('0')``."""
    return sum(values, Decimal("0"))


__all__ = ["to_decimal", "quantize", "round2", "round_whole", "dsum", "CENTS", "WHOLE"]
