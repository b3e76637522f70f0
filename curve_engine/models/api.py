"""Pydantic response models for the quote service."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from curve_engine.engine import ReserveSnapshot
from curve_engine.events import (
    CurveEvent,
    CurveInitialized,
    EmergencyWithdrawal,
    TokensBought,
    TokensSold,
    TraderStats,
)
from curve_engine.models.types import Address, Int256, Uint256
from curve_engine.registry import CurveParams


class CurveParamsModel(BaseModel):
    """Curve parameters as fixed-point integers (scaled by 10^18)."""

    coefficient: Uint256
    exponent: Uint256

    @classmethod
    def from_params(cls, params: CurveParams) -> CurveParamsModel:
        return cls(coefficient=params.coefficient, exponent=params.exponent)


class InvariantModel(BaseModel):
    """Reserve backing snapshot."""

    supply: Uint256
    reserve: Uint256
    required: Uint256
    surplus: Int256 = Field(description="reserve - required; negative means under-backed")
    backed: bool

    @classmethod
    def from_snapshot(cls, snapshot: ReserveSnapshot) -> InvariantModel:
        return cls(
            supply=snapshot.supply,
            reserve=snapshot.reserve,
            required=snapshot.required,
            surplus=snapshot.surplus,
            backed=snapshot.is_backed,
        )


class CurveStateResponse(BaseModel):
    """Full state of one curve."""

    asset: Address
    params: CurveParamsModel
    price: Uint256
    invariant: InvariantModel


class CurveListResponse(BaseModel):
    """Assets with an initialized curve."""

    count: int
    assets: list[Address]
    total_reserve: Uint256 = Field(description="Reserve escrowed across all curves")


class PriceResponse(BaseModel):
    asset: Address
    price: Uint256
    supply: Uint256


class BuyQuoteResponse(BaseModel):
    asset: Address
    reserve_amount: Uint256
    asset_amount: Uint256
    iterations: int = Field(description="Solver iterations spent on the quote")


class SellQuoteResponse(BaseModel):
    asset: Address
    asset_amount: Uint256
    reserve_amount: Uint256


class EventModel(BaseModel):
    """One audit event, flattened for the wire."""

    sequence: int
    kind: Literal["curve_initialized", "tokens_bought", "tokens_sold", "emergency_withdrawal"]
    asset: str
    account: str
    reserve_amount: Uint256 | None = None
    asset_amount: Uint256 | None = None
    new_supply: Uint256 | None = None
    coefficient: Uint256 | None = None
    exponent: Uint256 | None = None

    @classmethod
    def from_event(cls, event: CurveEvent) -> EventModel:
        if isinstance(event, TokensBought):
            return cls(
                sequence=event.sequence,
                kind="tokens_bought",
                asset=event.asset,
                account=event.buyer,
                reserve_amount=event.reserve_amount,
                asset_amount=event.asset_amount,
                new_supply=event.new_supply,
            )
        if isinstance(event, TokensSold):
            return cls(
                sequence=event.sequence,
                kind="tokens_sold",
                asset=event.asset,
                account=event.seller,
                reserve_amount=event.reserve_amount,
                asset_amount=event.asset_amount,
                new_supply=event.new_supply,
            )
        if isinstance(event, CurveInitialized):
            return cls(
                sequence=event.sequence,
                kind="curve_initialized",
                asset=event.asset,
                account=event.initializer,
                coefficient=event.coefficient,
                exponent=event.exponent,
            )
        if isinstance(event, EmergencyWithdrawal):
            return cls(
                sequence=event.sequence,
                kind="emergency_withdrawal",
                asset=event.token,
                account=event.recipient,
                reserve_amount=event.amount,
            )
        raise TypeError(f"Unknown event type {type(event).__name__}")


class EventsResponse(BaseModel):
    events: list[EventModel]


class TraderStatsModel(BaseModel):
    account: str
    total_bought: Uint256
    total_sold: Uint256
    net_position: Int256
    trade_count: int

    @classmethod
    def from_stats(cls, stats: TraderStats) -> TraderStatsModel:
        return cls(
            account=stats.account,
            total_bought=stats.total_bought,
            total_sold=stats.total_sold,
            net_position=stats.net_position,
            trade_count=stats.trade_count,
        )


class LeaderboardResponse(BaseModel):
    traders: list[TraderStatsModel]


class ErrorResponse(BaseModel):
    error: str
    detail: str
