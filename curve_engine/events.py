"""Audit events and trade history.

Every initialize, buy, sell and emergency withdrawal is recorded with its
full parameters and a monotonically increasing sequence number, so the
state of each curve can be reconstructed off-line by replaying the log.
The log also aggregates per-trader statistics for leaderboards.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, TypeVar

from curve_engine.tokens import normalize_address


@dataclass(frozen=True)
class CurveInitialized:
    """A curve was configured for an asset."""

    sequence: int
    asset: str
    coefficient: int
    exponent: int
    initializer: str


@dataclass(frozen=True)
class TokensBought:
    """Reserve was exchanged for newly minted priced tokens."""

    sequence: int
    buyer: str
    asset: str
    reserve_amount: int
    asset_amount: int
    new_supply: int


@dataclass(frozen=True)
class TokensSold:
    """Priced tokens were burned for reserve."""

    sequence: int
    seller: str
    asset: str
    asset_amount: int
    reserve_amount: int
    new_supply: int


@dataclass(frozen=True)
class EmergencyWithdrawal:
    """Custody tokens were moved out by the administrator."""

    sequence: int
    token: str
    amount: int
    recipient: str


CurveEvent = CurveInitialized | TokensBought | TokensSold | EmergencyWithdrawal
TradeEvent = TokensBought | TokensSold

E = TypeVar("E", CurveInitialized, TokensBought, TokensSold, EmergencyWithdrawal)


@dataclass
class TraderStats:
    """Aggregated trading activity of one account.

    Attributes:
        account: Trader address
        total_bought: Reserve spent on buys
        total_sold: Reserve received from sells
        net_position: Priced tokens bought minus priced tokens sold
        trade_count: Number of buys and sells
        last_sequence: Sequence number of the latest trade
    """

    account: str
    total_bought: int = 0
    total_sold: int = 0
    net_position: int = 0
    trade_count: int = 0
    last_sequence: int = field(default=-1)

    @property
    def volume(self) -> int:
        """Reserve volume traded in both directions."""
        return self.total_bought + self.total_sold

    def apply(self, event: TradeEvent) -> None:
        if isinstance(event, TokensBought):
            self.total_bought += event.reserve_amount
            self.net_position += event.asset_amount
        else:
            self.total_sold += event.reserve_amount
            self.net_position -= event.asset_amount
        self.trade_count += 1
        self.last_sequence = event.sequence


def _trader(event: TradeEvent) -> str:
    return event.buyer if isinstance(event, TokensBought) else event.seller


class EventLog:
    """Append-only, thread-safe record of engine events."""

    def __init__(self) -> None:
        self._events: list[CurveEvent] = []
        self._lock = threading.Lock()

    def emit(self, event_type: type[E], **fields: Any) -> E:
        """Create an event with the next sequence number and append it."""
        with self._lock:
            event = event_type(sequence=len(self._events), **fields)
            self._events.append(event)
        return event

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[CurveEvent]:
        return iter(self.snapshot())

    def snapshot(self) -> list[CurveEvent]:
        with self._lock:
            return list(self._events)

    def events(
        self,
        *,
        asset: str | None = None,
        account: str | None = None,
    ) -> list[CurveEvent]:
        """Events filtered by asset and/or participating account.

        An event matches an account if it is the buyer, seller, initializer
        or withdrawal recipient.
        """
        asset_key = normalize_address(asset) if asset else None
        account_key = normalize_address(account) if account else None

        result = []
        for event in self.snapshot():
            if asset_key is not None:
                event_asset = event.token if isinstance(event, EmergencyWithdrawal) else event.asset
                if event_asset != asset_key:
                    continue
            if account_key is not None and account_key not in _participants(event):
                continue
            result.append(event)
        return result

    def trades(self, asset: str | None = None) -> list[TradeEvent]:
        return [
            event
            for event in self.events(asset=asset)
            if isinstance(event, TokensBought | TokensSold)
        ]

    def trader_stats(self, account: str) -> TraderStats:
        """Aggregate the buys and sells of one account."""
        key = normalize_address(account)
        stats = TraderStats(account=key)
        for event in self.trades():
            if _trader(event) == key:
                stats.apply(event)
        return stats

    def leaderboard(self, limit: int = 10, asset: str | None = None) -> list[TraderStats]:
        """Traders ranked by reserve volume, highest first."""
        by_account: dict[str, TraderStats] = {}
        for event in self.trades(asset):
            trader = _trader(event)
            stats = by_account.setdefault(trader, TraderStats(account=trader))
            stats.apply(event)
        ranked = sorted(by_account.values(), key=lambda s: (-s.volume, s.account))
        return ranked[:limit]


def _participants(event: CurveEvent) -> set[str]:
    if isinstance(event, TokensBought):
        return {event.buyer}
    if isinstance(event, TokensSold):
        return {event.seller}
    if isinstance(event, CurveInitialized):
        return {event.initializer}
    return {event.recipient}
