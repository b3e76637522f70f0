"""Pytest configuration and fixtures."""

import pytest

from curve_engine.engine import CurveEngine
from curve_engine.tokens import InMemoryToken
from tests.helpers import (
    ALICE,
    BOB,
    INITIAL_FUNDS,
    fund,
    make_curve,
    make_engine,
)


@pytest.fixture
def engine_and_reserve() -> tuple[CurveEngine, InMemoryToken]:
    """A fresh engine and its reserve token, with ALICE and BOB funded."""
    engine, reserve = make_engine()
    fund(reserve, ALICE, BOB, amount=INITIAL_FUNDS)
    return engine, reserve


@pytest.fixture
def engine(engine_and_reserve: tuple[CurveEngine, InMemoryToken]) -> CurveEngine:
    """The engine with no curves initialized."""
    return engine_and_reserve[0]


@pytest.fixture
def reserve(engine_and_reserve: tuple[CurveEngine, InMemoryToken]) -> InMemoryToken:
    """The engine's reserve token."""
    return engine_and_reserve[1]


@pytest.fixture
def asset(engine: CurveEngine) -> InMemoryToken:
    """A priced asset on the default quadratic curve (c=0.001, k=2), zero supply."""
    return make_curve(engine)
