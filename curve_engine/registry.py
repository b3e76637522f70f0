"""Curve parameter registry.

Stores one immutable CurveParams per priced asset, keyed by the asset's
address. Parameters are set exactly once; there is no update path.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from curve_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from curve_engine.constants import SCALE
from curve_engine.errors import CurveAlreadyInitialized, CurveNotInitialized, InvalidCurveParameter
from curve_engine.tokens import normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class CurveParams:
    """Parameters of C(s) = c * s^k for one priced asset.

    Attributes:
        coefficient: Fixed-point c (scaled by 10^18)
        exponent: Fixed-point k (scaled by 10^18)
        initialized: Always True for stored params
    """

    coefficient: int
    exponent: int
    initialized: bool = True

    @property
    def exponent_plus_one(self) -> int:
        return self.exponent + SCALE


class CurveRegistry:
    """Initialize-once store of curve parameters.

    The registry does not lock; CurveEngine serializes access per asset.
    """

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> None:
        self._config = config
        self._params: dict[str, CurveParams] = {}

    def validate(self, coefficient: int, exponent: int) -> None:
        """Check parameter bounds.

        Raises:
            InvalidCurveParameter: If coefficient < min_coefficient or
                exponent is outside (0, max_exponent]
        """
        if coefficient < self._config.min_coefficient:
            raise InvalidCurveParameter(
                f"coefficient {coefficient} below minimum {self._config.min_coefficient}"
            )
        if not 0 < exponent <= self._config.max_exponent:
            raise InvalidCurveParameter(
                f"exponent {exponent} outside (0, {self._config.max_exponent}]"
            )

    def initialize(self, asset: str, coefficient: int, exponent: int) -> CurveParams:
        """Register parameters for an asset.

        Raises:
            CurveAlreadyInitialized: If the asset already has parameters
            InvalidCurveParameter: If the parameters are out of bounds
        """
        key = normalize_address(asset)
        if key in self._params:
            raise CurveAlreadyInitialized(f"Curve for {key} is already initialized")
        self.validate(coefficient, exponent)

        params = CurveParams(coefficient=coefficient, exponent=exponent)
        self._params[key] = params
        logger.debug("curve_params_stored", asset=key, coefficient=coefficient, exponent=exponent)
        return params

    def get(self, asset: str) -> CurveParams:
        """Return parameters for an asset.

        Raises:
            CurveNotInitialized: If the asset has no curve
        """
        params = self._params.get(normalize_address(asset))
        if params is None:
            raise CurveNotInitialized(f"No curve initialized for {asset}")
        return params

    def is_initialized(self, asset: str) -> bool:
        return normalize_address(asset) in self._params

    def assets(self) -> list[str]:
        """Assets with an initialized curve, in initialization order."""
        return list(self._params)

    def __len__(self) -> int:
        return len(self._params)
