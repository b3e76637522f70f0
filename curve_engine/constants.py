"""Curve constants.

Centralizes the fixed-point scale and the parameter bounds every curve is
validated against.
"""

# Fixed-point scale: 1.0 is represented as 10^18
SCALE = 10**18

# Smallest accepted coefficient (1e-12 reserve per unit of supply)
MIN_COEFFICIENT = 10**6

# Largest accepted exponent (k = 10)
MAX_EXPONENT = 10 * SCALE

# Default width of the buy-side search range above current supply.
DEFAULT_SEARCH_CEILING = 10**12 * SCALE

# Doubling steps plus bisection steps over the default ceiling stay well below this
DEFAULT_MAX_SEARCH_ITERATIONS = 256

# Custody account the engine holds reserve under, unless configured otherwise
DEFAULT_ENGINE_ADDRESS = "0x00000000000000000000000000000000000c0de5"
