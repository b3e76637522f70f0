"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from curve_engine.constants import (
    DEFAULT_MAX_SEARCH_ITERATIONS,
    DEFAULT_SEARCH_CEILING,
    MAX_EXPONENT,
    MIN_COEFFICIENT,
)


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for curve validation and the buy search.

    Attributes:
        min_coefficient: Smallest coefficient accepted at initialization
        max_exponent: Largest exponent accepted at initialization
        search_ceiling: Width of the buy search range above current supply
            (default: 1e12 units). Buys needing more supply are rejected.
        max_search_iterations: Hard cap on solver iterations (doubling plus
            bisection steps)
    """

    min_coefficient: int = MIN_COEFFICIENT
    max_exponent: int = MAX_EXPONENT
    search_ceiling: int = DEFAULT_SEARCH_CEILING
    max_search_iterations: int = DEFAULT_MAX_SEARCH_ITERATIONS

    def __post_init__(self) -> None:
        if self.min_coefficient <= 0:
            raise ValueError("min_coefficient must be positive")
        if self.max_exponent <= 0:
            raise ValueError("max_exponent must be positive")
        if self.search_ceiling <= 0:
            raise ValueError("search_ceiling must be positive")
        if self.max_search_iterations <= 0:
            raise ValueError("max_search_iterations must be positive")

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from environment variables, falling back to defaults.

        Reads CURVE_SEARCH_CEILING and CURVE_MAX_SEARCH_ITERATIONS.
        """
        return cls(
            search_ceiling=int(os.environ.get("CURVE_SEARCH_CEILING", DEFAULT_SEARCH_CEILING)),
            max_search_iterations=int(
                os.environ.get("CURVE_MAX_SEARCH_ITERATIONS", DEFAULT_MAX_SEARCH_ITERATIONS)
            ),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
