"""Pydantic wire models for the quote service."""

from curve_engine.models.api import (
    BuyQuoteResponse,
    CurveListResponse,
    CurveParamsModel,
    CurveStateResponse,
    ErrorResponse,
    EventModel,
    EventsResponse,
    InvariantModel,
    LeaderboardResponse,
    PriceResponse,
    SellQuoteResponse,
    TraderStatsModel,
)
from curve_engine.models.types import Address, Uint256, validate_uint256

__all__ = [
    "Address",
    "BuyQuoteResponse",
    "CurveListResponse",
    "CurveParamsModel",
    "CurveStateResponse",
    "ErrorResponse",
    "EventModel",
    "EventsResponse",
    "InvariantModel",
    "LeaderboardResponse",
    "PriceResponse",
    "SellQuoteResponse",
    "TraderStatsModel",
    "Uint256",
    "validate_uint256",
]
