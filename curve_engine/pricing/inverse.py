"""Buy-direction inverse solver.

Given a reserve amount to spend, find the supply increase it buys. The
integral c * s^(k+1) / (k+1) has no tractable fixed-point inverse for
general k, so the solver brackets the answer and bisects on the integral
itself. Every candidate it accepts satisfies I(candidate) <= target, which
means the protocol never mints more than the reserve received pays for.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from curve_engine.constants import (
    DEFAULT_MAX_SEARCH_ITERATIONS,
    DEFAULT_SEARCH_CEILING,
    SCALE,
)
from curve_engine.errors import SearchCeilingExceeded, SearchDidNotConverge
from curve_engine.pricing.integral import integral
from curve_engine.safe_int import S, Uint256Overflow

logger = structlog.get_logger()


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a buy-side search."""

    supply_delta: int
    iterations: int


def search_buy(
    coefficient: int,
    exponent: int,
    supply: int,
    reserve_amount: int,
    *,
    search_ceiling: int = DEFAULT_SEARCH_CEILING,
    max_iterations: int = DEFAULT_MAX_SEARCH_ITERATIONS,
) -> SearchResult:
    """Find the largest supply delta that reserve_amount pays for.

    Algorithm:
        1. target = I(supply) + reserve_amount
        2. Seed high from the linear estimate reserve_amount / coefficient,
           clamped to supply + search_ceiling. The estimate undershoots
           whenever the marginal price is below c, so high doubles until
           I(high) > target.
        3. Bisect [low, high] keeping I(low) <= target < I(high) until
           high - low <= 1.

    An integral that overflows uint256 compares as greater than target,
    since target itself fits.

    Args:
        coefficient: Fixed-point coefficient c
        exponent: Fixed-point exponent k
        supply: Current supply s0
        reserve_amount: Reserve to spend
        search_ceiling: Maximum supply increase considered
        max_iterations: Combined cap on doubling and bisection steps

    Returns:
        SearchResult with supply_delta >= 0 and the iteration count

    Raises:
        SearchCeilingExceeded: If I(supply + search_ceiling) <= target
        SearchDidNotConverge: If the iteration cap is hit
        Uint256Overflow: If I(supply) + reserve_amount itself overflows
    """
    if reserve_amount == 0:
        return SearchResult(supply_delta=0, iterations=0)

    exponent_plus_one = exponent + SCALE
    target = (S(integral(coefficient, supply, exponent_plus_one)) + reserve_amount).value
    ceiling = supply + search_ceiling

    def above_target(candidate: int) -> bool:
        try:
            return integral(coefficient, candidate, exponent_plus_one) > target
        except Uint256Overflow:
            return True

    step = min(max(reserve_amount * SCALE // coefficient, 1), search_ceiling)
    low = supply
    high = supply + step
    iterations = 0

    while not above_target(high):
        if high >= ceiling:
            raise SearchCeilingExceeded(
                f"Reserve {reserve_amount} buys more than {search_ceiling} supply "
                f"above {supply}"
            )
        iterations += 1
        if iterations > max_iterations:
            raise SearchDidNotConverge(f"Bracketing exceeded {max_iterations} iterations")
        low = high
        step *= 2
        high = min(supply + step, ceiling)

    while high - low > 1:
        iterations += 1
        if iterations > max_iterations:
            raise SearchDidNotConverge(f"Bisection exceeded {max_iterations} iterations")
        mid = (low + high) // 2
        if above_target(mid):
            high = mid
        else:
            low = mid

    logger.debug(
        "search_converged",
        supply=supply,
        reserve_amount=reserve_amount,
        supply_delta=low - supply,
        iterations=iterations,
    )
    return SearchResult(supply_delta=low - supply, iterations=iterations)


def solve_buy(
    coefficient: int,
    exponent: int,
    supply: int,
    reserve_amount: int,
    *,
    search_ceiling: int = DEFAULT_SEARCH_CEILING,
    max_iterations: int = DEFAULT_MAX_SEARCH_ITERATIONS,
) -> int:
    """Supply delta bought by reserve_amount (see search_buy)."""
    return search_buy(
        coefficient,
        exponent,
        supply,
        reserve_amount,
        search_ceiling=search_ceiling,
        max_iterations=max_iterations,
    ).supply_delta
