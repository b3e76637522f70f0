"""Tests for curve initialization, emergency withdrawal and introspection."""

import pytest

from curve_engine.constants import MAX_EXPONENT, MIN_COEFFICIENT
from curve_engine.errors import (
    CurveAlreadyInitialized,
    CurveNotInitialized,
    InvalidCurveParameter,
    Unauthorized,
    ZeroAmount,
)
from curve_engine.events import CurveInitialized, EmergencyWithdrawal
from curve_engine.registry import CurveParams
from curve_engine.tokens import InMemoryToken
from tests.helpers import (
    ADMIN,
    ALICE,
    ARTIST,
    OTHER_ARTIST,
    QUADRATIC_COEFFICIENT,
    QUADRATIC_EXPONENT,
    SCALE,
    make_curve,
)


class TestInitializeCurve:
    """Tests for CurveEngine.initialize_curve."""

    def test_initialize(self, engine):
        asset = InMemoryToken(ARTIST)
        params = engine.initialize_curve(ADMIN, asset, QUADRATIC_COEFFICIENT, QUADRATIC_EXPONENT)

        assert params == CurveParams(QUADRATIC_COEFFICIENT, QUADRATIC_EXPONENT)
        assert engine.is_curve_initialized(ARTIST)
        assert engine.get_curve(ARTIST) == params
        assert engine.get_priced_asset(ARTIST) is asset
        assert engine.events.snapshot() == [
            CurveInitialized(
                sequence=0,
                asset=ARTIST,
                coefficient=QUADRATIC_COEFFICIENT,
                exponent=QUADRATIC_EXPONENT,
                initializer=ADMIN,
            )
        ]

    def test_non_admin_rejected(self, engine):
        with pytest.raises(Unauthorized):
            engine.initialize_curve(ALICE, InMemoryToken(ARTIST), QUADRATIC_COEFFICIENT, SCALE)
        assert not engine.is_curve_initialized(ARTIST)
        assert len(engine.events) == 0

    def test_second_initialize_rejected(self, engine, asset):
        with pytest.raises(CurveAlreadyInitialized):
            engine.initialize_curve(ADMIN, asset, 2 * QUADRATIC_COEFFICIENT, SCALE)
        assert engine.get_curve(ARTIST).coefficient == QUADRATIC_COEFFICIENT

    @pytest.mark.parametrize(
        "coefficient,exponent",
        [
            (MIN_COEFFICIENT - 1, SCALE),
            (QUADRATIC_COEFFICIENT, 0),
            (QUADRATIC_COEFFICIENT, MAX_EXPONENT + 1),
        ],
    )
    def test_bounds(self, engine, coefficient: int, exponent: int):
        with pytest.raises(InvalidCurveParameter):
            engine.initialize_curve(ADMIN, InMemoryToken(ARTIST), coefficient, exponent)
        assert not engine.is_curve_initialized(ARTIST)

    def test_asset_with_supply_rejected(self, engine):
        """Pre-existing supply would have no reserve behind it."""
        asset = InMemoryToken(ARTIST)
        asset.mint(ALICE, SCALE)
        with pytest.raises(InvalidCurveParameter):
            engine.initialize_curve(ADMIN, asset, QUADRATIC_COEFFICIENT, QUADRATIC_EXPONENT)

    def test_independent_curves(self, engine):
        make_curve(engine)
        make_curve(engine, coefficient=MIN_COEFFICIENT, exponent=SCALE, address=OTHER_ARTIST)

        assert engine.list_curves() == [ARTIST, OTHER_ARTIST]
        assert engine.curve_count() == 2
        assert engine.get_curve(OTHER_ARTIST).coefficient == MIN_COEFFICIENT

    def test_introspecting_unknown_asset(self, engine):
        assert not engine.is_curve_initialized(ARTIST)
        with pytest.raises(CurveNotInitialized):
            engine.get_curve(ARTIST)
        with pytest.raises(CurveNotInitialized):
            engine.get_priced_asset(ARTIST)
        assert engine.get_reserve_balance(ARTIST) == 0


class TestEmergencyWithdraw:
    """Tests for CurveEngine.emergency_withdraw."""

    def test_withdraw_moves_custody_to_admin(self, engine, reserve, asset):
        engine.buy(ALICE, ARTIST, 10 * SCALE)

        engine.emergency_withdraw(ADMIN, reserve, 4 * SCALE)

        assert reserve.balance_of(ADMIN) == 4 * SCALE
        assert reserve.balance_of(engine.address) == 6 * SCALE
        assert engine.events.snapshot()[-1] == EmergencyWithdrawal(
            sequence=2,
            token=reserve.address,
            amount=4 * SCALE,
            recipient=ADMIN,
        )

    def test_ledger_is_not_adjusted(self, engine, reserve, asset):
        engine.buy(ALICE, ARTIST, 10 * SCALE)
        engine.emergency_withdraw(ADMIN, reserve, 10 * SCALE)
        assert engine.get_reserve_balance(ARTIST) == 10 * SCALE
        assert engine.check_invariant(ARTIST).is_backed

    def test_non_admin_rejected(self, engine, reserve, asset):
        engine.buy(ALICE, ARTIST, 10 * SCALE)
        with pytest.raises(Unauthorized):
            engine.emergency_withdraw(ALICE, reserve, SCALE)
        assert reserve.balance_of(engine.address) == 10 * SCALE

    def test_zero_amount_rejected(self, engine, reserve):
        with pytest.raises(ZeroAmount):
            engine.emergency_withdraw(ADMIN, reserve, 0)

    def test_can_rescue_stray_tokens(self, engine):
        stray = InMemoryToken(OTHER_ARTIST, symbol="STRAY")
        stray.mint(engine.address, 7)
        engine.emergency_withdraw(ADMIN, stray, 7)
        assert stray.balance_of(ADMIN) == 7


class TestInvariantSnapshot:
    def test_fresh_curve(self, engine, asset):
        snapshot = engine.check_invariant(ARTIST)
        assert snapshot.supply == 0
        assert snapshot.reserve == 0
        assert snapshot.surplus == 0
        assert snapshot.is_backed
        assert snapshot.price == QUADRATIC_COEFFICIENT

    def test_after_buy(self, engine, asset):
        engine.buy(ALICE, ARTIST, 1000 * SCALE)
        snapshot = engine.check_invariant(ARTIST)
        assert snapshot.supply == asset.total_supply()
        assert snapshot.reserve == 1000 * SCALE
        assert 0 <= snapshot.surplus < 100

    def test_price_at_snapshot_supply(self, engine, asset):
        engine.buy(ALICE, ARTIST, 1000 * SCALE)
        snapshot = engine.check_invariant(ARTIST)
        assert snapshot.price == 2 * QUADRATIC_COEFFICIENT * snapshot.supply // SCALE
        assert snapshot.price == engine.get_current_price(ARTIST)

    def test_total_reserve_spans_curves(self, engine, asset):
        other = make_curve(engine, address=OTHER_ARTIST)
        engine.buy(ALICE, ARTIST, 1000 * SCALE)
        engine.buy(ALICE, other.address, 5 * SCALE)
        assert engine.get_total_reserve() == 1005 * SCALE
