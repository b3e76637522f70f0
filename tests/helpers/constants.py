"""Shared constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import ALICE, SCALE
    # or
    from tests.helpers.constants import ALICE, SCALE
"""

from curve_engine.constants import SCALE

# =============================================================================
# Accounts
# =============================================================================

ADMIN = "0x" + "ad" * 20
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b0" * 20
CAROL = "0x" + "c4" * 20  # Never funded

# =============================================================================
# Tokens
# =============================================================================

RESERVE = "0x" + "5e" * 20  # Reserve asset
ARTIST = "0x" + "a7" * 20  # Default priced asset
OTHER_ARTIST = "0x" + "a8" * 20

# =============================================================================
# Curves
# =============================================================================

# c = 0.001, k = 2 (quadratic price, cubic integral)
QUADRATIC_COEFFICIENT = 10**15
QUADRATIC_EXPONENT = 2 * SCALE

# Starting reserve balance of funded accounts
INITIAL_FUNDS = 10_000 * SCALE

__all__ = [
    "ADMIN",
    "ALICE",
    "ARTIST",
    "BOB",
    "CAROL",
    "INITIAL_FUNDS",
    "OTHER_ARTIST",
    "QUADRATIC_COEFFICIENT",
    "QUADRATIC_EXPONENT",
    "RESERVE",
    "SCALE",
]
