"""Curve trade executor.

CurveEngine issues and redeems priced assets against a reserve token along
C(s) = c * s^k. It owns the curve parameters and the reserve ledger; supply
and balances stay with the token collaborators.

Every mutating operation runs as one critical section:
    validate -> mutate ledger -> external token effects -> audit event
Any precondition failure raises before the ledger is touched. A failure in
the external phase rolls back what was already applied and re-raises, so a
trade either fully executes or leaves no trace.

Concurrency: one lock per priced asset serializes trades (and quotes) on
that asset. Only initialize_curve creates locks; a call naming an asset
without a curve fails before any lock is taken. A thread-local flag
rejects any engine call made from inside a critical section, e.g. from a
token hook, with ReentrantCall.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from curve_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from curve_engine.constants import DEFAULT_ENGINE_ADDRESS
from curve_engine.errors import (
    CurveError,
    CurveNotInitialized,
    InsufficientBalance,
    InsufficientReserves,
    InsufficientSupply,
    InvalidCurveParameter,
    ReentrantCall,
    SlippageExceeded,
    Unauthorized,
    ZeroAmount,
    ZeroOutput,
)
from curve_engine.events import (
    CurveInitialized,
    EmergencyWithdrawal,
    EventLog,
    TokensBought,
    TokensSold,
)
from curve_engine.ledger import ReserveLedger
from curve_engine.pricing import integral, marginal_price, search_buy, sell_return
from curve_engine.pricing.inverse import SearchResult
from curve_engine.registry import CurveParams, CurveRegistry
from curve_engine.safe_int import S
from curve_engine.tokens import PricedAsset, ReserveToken, normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class ReserveSnapshot:
    """Reserve backing of one asset at an observation point.

    Attributes:
        asset: Priced asset address
        supply: Circulating supply
        reserve: Reserve escrowed in the ledger
        required: Integral of the curve from 0 to supply
        price: Marginal price at supply
    """

    asset: str
    supply: int
    reserve: int
    required: int
    price: int

    @property
    def surplus(self) -> int:
        """Accumulated buy rounding residue (negative means under-backed)."""
        return self.reserve - self.required

    @property
    def is_backed(self) -> bool:
        return self.reserve >= self.required


class CurveEngine:
    """Bonding curve pricing and settlement engine.

    Args:
        reserve_token: Token escrowed as backing for every curve
        admin: Account allowed to initialize curves and withdraw in emergencies
        address: Custody account the engine holds reserve under
        config: Parameter bounds and search limits
        events: Audit log (a fresh one by default)
    """

    def __init__(
        self,
        reserve_token: ReserveToken,
        admin: str,
        *,
        address: str = DEFAULT_ENGINE_ADDRESS,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        events: EventLog | None = None,
    ) -> None:
        self.reserve_token = reserve_token
        self.admin = normalize_address(admin)
        self.address = normalize_address(address)
        self.config = config
        self.events = events if events is not None else EventLog()

        self._registry = CurveRegistry(config)
        self._ledger = ReserveLedger()
        self._assets: dict[str, PricedAsset] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._custody_lock = threading.Lock()
        self._local = threading.local()

    # --- Concurrency ---

    def _lock_for(self, key: str, *, create: bool = False) -> threading.Lock:
        """Look up the asset's lock, adding it only when create is set.

        Raises:
            CurveNotInitialized: If the asset has no lock and create is False
        """
        with self._locks_guard:
            if create:
                return self._locks.setdefault(key, threading.Lock())
            lock = self._locks.get(key)
        if lock is None:
            raise CurveNotInitialized(f"No curve initialized for {key}")
        return lock

    @contextmanager
    def _guarded(self, lock: threading.Lock, key: str) -> Iterator[None]:
        if getattr(self._local, "active", False):
            raise ReentrantCall(f"Engine re-entered while operating on {key}")
        with lock:
            self._local.active = True
            try:
                yield
            finally:
                self._local.active = False

    @contextmanager
    def _critical_section(self, key: str, *, create: bool = False) -> Iterator[None]:
        """Hold the asset's lock with the reentrancy flag set.

        Raises:
            ReentrantCall: If this thread is already inside a critical section
            CurveNotInitialized: If the asset has no curve and create is False
        """
        if getattr(self._local, "active", False):
            raise ReentrantCall(f"Engine re-entered while operating on {key}")
        with self._guarded(self._lock_for(key, create=create), key):
            yield

    # --- Helpers ---

    def _require_admin(self, caller: str) -> None:
        if normalize_address(caller) != self.admin:
            raise Unauthorized(f"{caller} is not the engine administrator")

    def _curve(self, key: str) -> tuple[PricedAsset, CurveParams]:
        params = self._registry.get(key)
        return self._assets[key], params

    def _search(self, params: CurveParams, supply: int, reserve_amount: int) -> SearchResult:
        return search_buy(
            params.coefficient,
            params.exponent,
            supply,
            reserve_amount,
            search_ceiling=self.config.search_ceiling,
            max_iterations=self.config.max_search_iterations,
        )

    # --- Administration ---

    def initialize_curve(
        self,
        caller: str,
        asset: PricedAsset,
        coefficient: int,
        exponent: int,
    ) -> CurveParams:
        """Configure the curve for a priced asset. One time, admin only.

        The asset must have no circulating supply yet: reserve backing
        starts at zero, so pre-existing supply would be unbacked.

        Raises:
            Unauthorized: If caller is not the administrator
            CurveAlreadyInitialized: If the asset already has a curve
            InvalidCurveParameter: If parameters are out of bounds or the
                asset already has supply
        """
        self._require_admin(caller)
        key = normalize_address(asset.address)

        with self._critical_section(key, create=True):
            if not self._registry.is_initialized(key) and asset.total_supply() != 0:
                raise InvalidCurveParameter(
                    f"Asset {key} already has supply {asset.total_supply()}"
                )
            params = self._registry.initialize(key, coefficient, exponent)
            self._assets[key] = asset
            self.events.emit(
                CurveInitialized,
                asset=key,
                coefficient=coefficient,
                exponent=exponent,
                initializer=self.admin,
            )

        logger.info("curve_initialized", asset=key, coefficient=coefficient, exponent=exponent)
        return params

    def emergency_withdraw(self, caller: str, token: ReserveToken, amount: int) -> None:
        """Move custody tokens to the administrator.

        Operational escape hatch outside the accounting invariant: the
        reserve ledger is not adjusted, so sells may fail afterwards.

        Raises:
            Unauthorized: If caller is not the administrator
            ZeroAmount: If amount is zero
        """
        self._require_admin(caller)
        if S(amount) == 0:
            raise ZeroAmount("Withdrawal amount must be positive")
        key = normalize_address(token.address)

        with self._guarded(self._custody_lock, key):
            token.transfer(self.address, self.admin, amount)
            self.events.emit(EmergencyWithdrawal, token=key, amount=amount, recipient=self.admin)

        logger.warning("emergency_withdrawal", token=key, amount=amount, recipient=self.admin)

    # --- Trading ---

    def buy(self, caller: str, asset: str, reserve_amount: int, min_asset_out: int = 0) -> int:
        """Spend reserve_amount to mint priced tokens to caller.

        Args:
            caller: Buyer account (pays reserve, receives tokens)
            asset: Priced asset address
            reserve_amount: Reserve to spend
            min_asset_out: Slippage bound on tokens received

        Returns:
            Priced tokens minted

        Raises:
            ZeroAmount, CurveNotInitialized, SlippageExceeded, ZeroOutput,
            InsufficientBalance, ReentrantCall, SearchCeilingExceeded
        """
        caller = normalize_address(caller)
        key = normalize_address(asset)
        if S(reserve_amount) == 0:
            raise ZeroAmount("Reserve amount must be positive")

        try:
            with self._critical_section(key):
                priced, params = self._curve(key)
                supply = priced.total_supply()
                asset_out = self._search(params, supply, reserve_amount).supply_delta

                if asset_out < min_asset_out:
                    raise SlippageExceeded(f"Buy yields {asset_out} < minimum {min_asset_out}")
                if asset_out == 0:
                    raise ZeroOutput(f"Reserve {reserve_amount} buys no supply at {supply}")
                if self.reserve_token.balance_of(caller) < reserve_amount:
                    raise InsufficientBalance(f"{caller} cannot pay {reserve_amount} reserve")

                self._settle_buy(key, priced, caller, reserve_amount, asset_out)
                new_supply = priced.total_supply()
                self.events.emit(
                    TokensBought,
                    buyer=caller,
                    asset=key,
                    reserve_amount=reserve_amount,
                    asset_amount=asset_out,
                    new_supply=new_supply,
                )
        except CurveError as err:
            logger.warning(
                "trade_rejected",
                side="buy",
                asset=key,
                caller=caller,
                error=type(err).__name__,
                detail=str(err),
            )
            raise

        logger.info(
            "curve_buy",
            asset=key,
            buyer=caller,
            reserve_amount=reserve_amount,
            asset_amount=asset_out,
            new_supply=new_supply,
        )
        return asset_out

    def _settle_buy(
        self,
        key: str,
        priced: PricedAsset,
        caller: str,
        reserve_amount: int,
        asset_out: int,
    ) -> None:
        self._ledger.credit(key, reserve_amount)
        try:
            self.reserve_token.transfer_from(caller, self.address, reserve_amount)
        except Exception:
            self._ledger.debit(key, reserve_amount)
            logger.exception("trade_rolled_back", side="buy", asset=key, stage="transfer_from")
            raise
        try:
            priced.mint(caller, asset_out)
        except Exception:
            self._ledger.debit(key, reserve_amount)
            self.reserve_token.transfer(self.address, caller, reserve_amount)
            logger.exception("trade_rolled_back", side="buy", asset=key, stage="mint")
            raise

    def sell(self, caller: str, asset: str, asset_amount: int, min_reserve_out: int = 0) -> int:
        """Burn asset_amount of caller's priced tokens for reserve.

        Args:
            caller: Seller account
            asset: Priced asset address
            asset_amount: Priced tokens to burn
            min_reserve_out: Slippage bound on reserve received

        Returns:
            Reserve paid out

        Raises:
            ZeroAmount, CurveNotInitialized, InsufficientSupply,
            SlippageExceeded, ZeroOutput, InsufficientReserves,
            InsufficientBalance, ReentrantCall
        """
        caller = normalize_address(caller)
        key = normalize_address(asset)
        if S(asset_amount) == 0:
            raise ZeroAmount("Asset amount must be positive")

        try:
            with self._critical_section(key):
                priced, params = self._curve(key)
                supply = priced.total_supply()
                if asset_amount > supply:
                    raise InsufficientSupply(f"Sell of {asset_amount} exceeds supply {supply}")

                reserve_out = sell_return(params.coefficient, params.exponent, supply, asset_amount)

                if reserve_out < min_reserve_out:
                    raise SlippageExceeded(
                        f"Sell yields {reserve_out} < minimum {min_reserve_out}"
                    )
                if reserve_out == 0:
                    raise ZeroOutput(f"Selling {asset_amount} at {supply} pays nothing")
                if self._ledger.balance(key) < reserve_out:
                    raise InsufficientReserves(
                        f"Reserve {self._ledger.balance(key)} cannot cover {reserve_out}"
                    )
                if priced.balance_of(caller) < asset_amount:
                    raise InsufficientBalance(f"{caller} holds fewer than {asset_amount} tokens")

                self._settle_sell(key, priced, caller, asset_amount, reserve_out)
                new_supply = priced.total_supply()
                self.events.emit(
                    TokensSold,
                    seller=caller,
                    asset=key,
                    asset_amount=asset_amount,
                    reserve_amount=reserve_out,
                    new_supply=new_supply,
                )
        except CurveError as err:
            logger.warning(
                "trade_rejected",
                side="sell",
                asset=key,
                caller=caller,
                error=type(err).__name__,
                detail=str(err),
            )
            raise

        logger.info(
            "curve_sell",
            asset=key,
            seller=caller,
            asset_amount=asset_amount,
            reserve_amount=reserve_out,
            new_supply=new_supply,
        )
        return reserve_out

    def _settle_sell(
        self,
        key: str,
        priced: PricedAsset,
        caller: str,
        asset_amount: int,
        reserve_out: int,
    ) -> None:
        self._ledger.debit(key, reserve_out)
        try:
            priced.burn_from(caller, asset_amount)
        except Exception:
            self._ledger.credit(key, reserve_out)
            logger.exception("trade_rolled_back", side="sell", asset=key, stage="burn_from")
            raise
        try:
            self.reserve_token.transfer(self.address, caller, reserve_out)
        except Exception:
            self._ledger.credit(key, reserve_out)
            priced.mint(caller, asset_amount)
            logger.exception("trade_rolled_back", side="sell", asset=key, stage="transfer")
            raise

    # --- Quotes ---

    def get_buy_quote(self, asset: str, reserve_amount: int) -> int:
        """Priced tokens reserve_amount would mint right now."""
        return self.get_buy_search(asset, reserve_amount).supply_delta

    def get_buy_search(self, asset: str, reserve_amount: int) -> SearchResult:
        """Buy quote together with the solver's iteration count."""
        key = normalize_address(asset)
        with self._critical_section(key):
            priced, params = self._curve(key)
            if S(reserve_amount) == 0:
                return SearchResult(supply_delta=0, iterations=0)
            return self._search(params, priced.total_supply(), reserve_amount)

    def get_sell_quote(self, asset: str, asset_amount: int) -> int:
        """Reserve that burning asset_amount would pay right now.

        Raises:
            InsufficientSupply: If asset_amount exceeds circulating supply
        """
        key = normalize_address(asset)
        with self._critical_section(key):
            priced, params = self._curve(key)
            supply = priced.total_supply()
            if asset_amount > supply:
                raise InsufficientSupply(f"Sell of {asset_amount} exceeds supply {supply}")
            if S(asset_amount) == 0:
                return 0
            return sell_return(params.coefficient, params.exponent, supply, asset_amount)

    def get_current_price(self, asset: str) -> int:
        """Marginal price c * k * s^(k-1) at current supply."""
        key = normalize_address(asset)
        with self._critical_section(key):
            priced, params = self._curve(key)
            return marginal_price(params.coefficient, params.exponent, priced.total_supply())

    # --- Introspection ---

    def is_curve_initialized(self, asset: str) -> bool:
        return self._registry.is_initialized(asset)

    def get_curve(self, asset: str) -> CurveParams:
        return self._registry.get(asset)

    def list_curves(self) -> list[str]:
        """Addresses of all priced assets with a curve."""
        return self._registry.assets()

    def curve_count(self) -> int:
        return len(self._registry)

    def get_priced_asset(self, asset: str) -> PricedAsset:
        key = normalize_address(asset)
        self._registry.get(key)
        return self._assets[key]

    def get_reserve_balance(self, asset: str) -> int:
        return self._ledger.balance(asset)

    def get_total_reserve(self) -> int:
        """Reserve escrowed across all curves."""
        return self._ledger.total()

    def check_invariant(self, asset: str) -> ReserveSnapshot:
        """Compare the ledger against the integral at current supply.

        Supply, reserve and price are read under one hold of the asset lock,
        so they describe the same state.
        """
        key = normalize_address(asset)
        with self._critical_section(key):
            priced, params = self._curve(key)
            supply = priced.total_supply()
            required = integral(params.coefficient, supply, params.exponent_plus_one)
            return ReserveSnapshot(
                asset=key,
                supply=supply,
                reserve=self._ledger.balance(key),
                required=required,
                price=marginal_price(params.coefficient, params.exponent, supply),
            )
