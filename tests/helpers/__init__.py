"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Accounts, token addresses and curve parameters
- factories: Engine and curve factory functions
"""

from tests.helpers.constants import (
    ADMIN,
    ALICE,
    ARTIST,
    BOB,
    CAROL,
    INITIAL_FUNDS,
    OTHER_ARTIST,
    QUADRATIC_COEFFICIENT,
    QUADRATIC_EXPONENT,
    RESERVE,
    SCALE,
)
from tests.helpers.factories import fund, make_curve, make_engine

__all__ = [
    # Constants
    "ADMIN",
    "ALICE",
    "BOB",
    "CAROL",
    "RESERVE",
    "ARTIST",
    "OTHER_ARTIST",
    "QUADRATIC_COEFFICIENT",
    "QUADRATIC_EXPONENT",
    "INITIAL_FUNDS",
    "SCALE",
    # Factories
    "make_engine",
    "make_curve",
    "fund",
]
