"""API endpoints for the curve quote service.

All endpoints are read-only: they quote and introspect curves without
mutating state. Trades go through CurveEngine directly.
"""

import os
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from curve_engine.config import EngineConfig
from curve_engine.engine import CurveEngine
from curve_engine.models.api import (
    BuyQuoteResponse,
    CurveListResponse,
    CurveParamsModel,
    CurveStateResponse,
    EventModel,
    EventsResponse,
    InvariantModel,
    LeaderboardResponse,
    PriceResponse,
    SellQuoteResponse,
    TraderStatsModel,
)
from curve_engine.models.types import validate_uint256
from curve_engine.tokens import InMemoryToken, is_valid_address, normalize_address

logger = structlog.get_logger()

router = APIRouter()

# Admin account and reserve token of the default engine
ADMIN_ADDRESS = os.environ.get("CURVE_ADMIN", "0x" + "ad" * 20)
RESERVE_TOKEN_ADDRESS = os.environ.get("CURVE_RESERVE_TOKEN", "0x" + "5e" * 20)

# Demo curve seeded when CURVE_DEMO is set (c = 0.001, k = 2)
DEMO_ASSET_ADDRESS = "0x" + "a5" * 20
DEMO_COEFFICIENT = 10**15
DEMO_EXPONENT = 2 * 10**18


def _create_default_engine() -> CurveEngine:
    """Create the service's engine over an in-memory reserve token.

    With CURVE_DEMO=true a quadratic demo curve is initialized so the
    quote endpoints have something to price.
    """
    reserve = InMemoryToken(RESERVE_TOKEN_ADDRESS, symbol="RSV")
    engine = CurveEngine(reserve, admin=ADMIN_ADDRESS, config=EngineConfig.from_env())

    if os.environ.get("CURVE_DEMO", "false").lower() in ("true", "1", "yes"):
        demo = InMemoryToken(DEMO_ASSET_ADDRESS, symbol="DEMO")
        engine.initialize_curve(ADMIN_ADDRESS, demo, DEMO_COEFFICIENT, DEMO_EXPONENT)
        logger.info("demo_curve_enabled", asset=demo.address)

    return engine


@lru_cache(maxsize=1)
def get_default_engine() -> CurveEngine:
    return _create_default_engine()


def get_engine() -> CurveEngine:
    """Dependency provider for the engine instance.

    Override this in tests to inject a prepared engine:
        app.dependency_overrides[get_engine] = lambda: engine
    """
    return get_default_engine()


def _parse_amount(name: str, raw: str) -> int:
    try:
        return validate_uint256(raw)
    except ValueError as err:
        raise HTTPException(status_code=422, detail=f"{name}: {err}") from err


def _parse_asset(raw: str) -> str:
    asset = normalize_address(raw)
    if not is_valid_address(asset):
        raise HTTPException(status_code=422, detail=f"asset: malformed address '{raw}'")
    return asset


@router.get("/curves")
async def list_curves(engine: CurveEngine = Depends(get_engine)) -> CurveListResponse:
    """Assets with an initialized curve."""
    assets = engine.list_curves()
    return CurveListResponse(
        count=len(assets), assets=assets, total_reserve=engine.get_total_reserve()
    )


@router.get("/curves/{asset}")
async def curve_state(asset: str, engine: CurveEngine = Depends(get_engine)) -> CurveStateResponse:
    """Parameters, price and reserve backing of one curve."""
    key = _parse_asset(asset)
    params = engine.get_curve(key)
    snapshot = engine.check_invariant(key)
    return CurveStateResponse(
        asset=key,
        params=CurveParamsModel.from_params(params),
        price=snapshot.price,
        invariant=InvariantModel.from_snapshot(snapshot),
    )


@router.get("/curves/{asset}/price")
async def current_price(asset: str, engine: CurveEngine = Depends(get_engine)) -> PriceResponse:
    """Marginal price at current supply."""
    key = _parse_asset(asset)
    snapshot = engine.check_invariant(key)
    return PriceResponse(asset=key, price=snapshot.price, supply=snapshot.supply)


@router.get("/curves/{asset}/quote/buy")
async def buy_quote(
    asset: str,
    reserve_amount: str = Query(..., description="Reserve to spend, decimal string"),
    engine: CurveEngine = Depends(get_engine),
) -> BuyQuoteResponse:
    """Priced tokens a buy of reserve_amount would mint."""
    key = _parse_asset(asset)
    amount = _parse_amount("reserve_amount", reserve_amount)
    result = engine.get_buy_search(key, amount)
    logger.debug("buy_quote", asset=key, reserve_amount=amount, asset_amount=result.supply_delta)
    return BuyQuoteResponse(
        asset=key,
        reserve_amount=amount,
        asset_amount=result.supply_delta,
        iterations=result.iterations,
    )


@router.get("/curves/{asset}/quote/sell")
async def sell_quote(
    asset: str,
    asset_amount: str = Query(..., description="Priced tokens to burn, decimal string"),
    engine: CurveEngine = Depends(get_engine),
) -> SellQuoteResponse:
    """Reserve a sell of asset_amount would pay out."""
    key = _parse_asset(asset)
    amount = _parse_amount("asset_amount", asset_amount)
    reserve_out = engine.get_sell_quote(key, amount)
    return SellQuoteResponse(asset=key, asset_amount=amount, reserve_amount=reserve_out)


@router.get("/events", response_model_exclude_none=True)
async def events(
    asset: str | None = None,
    account: str | None = None,
    engine: CurveEngine = Depends(get_engine),
) -> EventsResponse:
    """Audit events, optionally filtered by asset and account."""
    selected = engine.events.events(asset=asset, account=account)
    return EventsResponse(events=[EventModel.from_event(event) for event in selected])


@router.get("/leaderboard")
async def leaderboard(
    limit: int = Query(10, ge=1, le=100),
    asset: str | None = None,
    engine: CurveEngine = Depends(get_engine),
) -> LeaderboardResponse:
    """Traders ranked by reserve volume."""
    ranked = engine.events.leaderboard(limit=limit, asset=asset)
    return LeaderboardResponse(traders=[TraderStatsModel.from_stats(s) for s in ranked])
