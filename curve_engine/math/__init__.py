"""Mathematical utilities for curve pricing.

This package provides the fixed-point kernel used by the pricing modules:
- 18-decimal scaled multiply/divide with checked intermediates
- Fixed-point exponentiation by repeated squaring
"""

from curve_engine.math.fixed_point import ONE, mul_div, power

__all__ = ["ONE", "mul_div", "power"]
