"""Bonding curve pricing and settlement engine."""

from curve_engine.engine import CurveEngine, ReserveSnapshot
from curve_engine.registry import CurveParams

__version__ = "0.1.0"
__all__ = ["CurveEngine", "CurveParams", "ReserveSnapshot", "__version__"]
