"""Closed-form curve math.

For the cost function C(s) = c * s^k the cumulative reserve backing a
supply s is the integral

    I(s) = c * s^(k+1) / (k+1)

expressed here directly in reserve base units (fixed-point, SCALE = 10^18).
Selling evaluates the integral forward; buying needs the inverse solver
(see inverse.py).
"""

from curve_engine.constants import SCALE
from curve_engine.math.fixed_point import mul_div, power


def integral(coefficient: int, supply: int, exponent_plus_one: int) -> int:
    """Reserve required to back a given supply.

    Args:
        coefficient: Fixed-point coefficient c
        supply: Circulating supply (fixed-point)
        exponent_plus_one: Fixed-point k + 1

    Returns:
        c * s^(k+1) / (k+1) in reserve base units, rounded down

    Raises:
        Uint256Overflow: If the power or product leaves the uint256 domain
    """
    if supply == 0:
        return 0
    return mul_div(power(supply, exponent_plus_one), coefficient, exponent_plus_one)


def sell_return(coefficient: int, exponent: int, supply: int, asset_amount: int) -> int:
    """Reserve released by burning asset_amount at the given supply.

    Formula:
        reserve_out = I(supply) - I(supply - asset_amount)

    The difference is clamped at zero. Both terms use the same rounding as
    the buy path, so buying and immediately selling never returns more
    than was paid.

    Raises:
        ValueError: If asset_amount exceeds supply
    """
    if asset_amount > supply:
        raise ValueError(f"asset_amount {asset_amount} exceeds supply {supply}")
    exponent_plus_one = exponent + SCALE
    before = integral(coefficient, supply, exponent_plus_one)
    after = integral(coefficient, supply - asset_amount, exponent_plus_one)
    return max(0, before - after)


def marginal_price(coefficient: int, exponent: int, supply: int) -> int:
    """Instantaneous price of the next unit: c * k * s^(k-1).

    At zero supply the price degenerates to c. For k < 1 the price is
    c * k / s^(1-k); if the denominator truncates to zero the boundary
    value c is returned as well.
    """
    if supply == 0:
        return coefficient

    scaled = mul_div(coefficient, exponent)
    if exponent >= SCALE:
        return mul_div(scaled, power(supply, exponent - SCALE))

    denominator = power(supply, SCALE - exponent)
    if denominator == 0:
        return coefficient
    return mul_div(scaled, SCALE, denominator)
