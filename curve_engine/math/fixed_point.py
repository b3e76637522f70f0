"""Fixed-point math kernel for curve pricing.

All values are unsigned integers scaled by 10^18 (SCALE). Every product is
range checked through SafeInt, so an intermediate that leaves the uint256
domain raises instead of wrapping.

Integer exponents are evaluated exactly (up to per-step truncation) by
repeated squaring. A fractional remainder of the exponent is evaluated with
Decimal at uint256 precision and floored onto the fixed-point grid.
"""

from __future__ import annotations

import decimal
from decimal import ROUND_FLOOR, Decimal

from curve_engine.constants import SCALE
from curve_engine.safe_int import S

__all__ = [
    "ONE",
    "TWO",
    "mul_div",
    "power",
    "fractional_power",
]

ONE = SCALE
TWO = 2 * SCALE

# 78 digits of precision - enough for uint256 values (up to ~10^77)
_POW_CONTEXT = decimal.Context(prec=78, rounding=ROUND_FLOOR)


def mul_div(a: int, b: int, denominator: int = SCALE) -> int:
    """Compute a * b // denominator, rounding down.

    Raises:
        Uint256Overflow: If a * b exceeds 2^256-1
        DivisionByZero: If denominator is zero
    """
    return ((S(a) * S(b)) // S(denominator)).value


def fractional_power(base: int, fraction: int) -> int:
    """Compute base^fraction for 0 < fraction < SCALE, rounding down.

    Args:
        base: Fixed-point base
        fraction: Fixed-point exponent strictly between 0 and 1

    Returns:
        Fixed-point result floored to the 10^-18 grid
    """
    if not 0 < fraction < SCALE:
        raise ValueError(f"fraction must be in (0, {SCALE}), got {fraction}")
    if base == 0:
        return 0
    with decimal.localcontext(_POW_CONTEXT):
        value = (Decimal(base) / SCALE) ** (Decimal(fraction) / SCALE)
        scaled = (value * SCALE).to_integral_value(rounding=ROUND_FLOOR)
    return S(int(scaled)).value


def power(base: int, exponent: int) -> int:
    """Compute base^exponent where both are fixed-point.

    The integer part of the exponent uses exponentiation by repeated
    squaring: multiply the result by the base when the low bit is set,
    square the base, shift the exponent right. Every multiplication rounds
    down, so the result never exceeds the true power.

    Args:
        base: Fixed-point base (non-negative)
        exponent: Fixed-point exponent (non-negative)

    Returns:
        base^exponent as fixed-point

    Raises:
        Uint256Overflow: If an intermediate product leaves the uint256 domain
    """
    S(base)
    S(exponent)

    if exponent == 0:
        return ONE
    if exponent == ONE:
        return base
    if exponent == TWO:
        return mul_div(base, base)

    whole, fraction = divmod(exponent, SCALE)

    result = ONE
    squared = base
    n = whole
    while n:
        if n & 1:
            result = mul_div(result, squared)
        n >>= 1
        # Squaring past the last set bit can only overflow
        if n:
            squared = mul_div(squared, squared)

    if fraction:
        result = mul_div(result, fractional_power(base, fraction))

    return result
