"""Tests for the in-memory token collaborator."""

import pytest

from curve_engine.safe_int import Underflow
from curve_engine.tokens import (
    InMemoryToken,
    InsufficientAllowance,
    InsufficientTokenBalance,
    PricedAsset,
    ReserveToken,
    is_valid_address,
    normalize_address,
)
from tests.helpers import ALICE, BOB, RESERVE


class TestAddresses:
    def test_normalize_lowercases_and_prefixes(self):
        assert normalize_address("0xABCD") == "0xabcd"
        assert normalize_address("ABCD") == "0xabcd"

    def test_is_valid_address(self):
        assert is_valid_address(ALICE)
        assert not is_valid_address("0x1234")
        assert not is_valid_address("a1" * 21)
        assert not is_valid_address("0x" + "zz" * 20)
        assert not is_valid_address(None)  # type: ignore


class TestInMemoryToken:
    """Tests for balances, supply and transfers."""

    def test_satisfies_both_protocols(self):
        token = InMemoryToken(RESERVE)
        assert isinstance(token, ReserveToken)
        assert isinstance(token, PricedAsset)

    def test_mint_and_burn_track_supply(self):
        token = InMemoryToken(RESERVE)
        token.mint(ALICE, 100)
        token.mint(BOB, 50)
        token.burn_from(ALICE, 30)

        assert token.total_supply() == 120
        assert token.balance_of(ALICE) == 70
        assert token.balance_of(BOB) == 50

    def test_burn_more_than_balance_raises(self):
        token = InMemoryToken(RESERVE)
        token.mint(ALICE, 10)
        with pytest.raises(InsufficientTokenBalance):
            token.burn_from(ALICE, 11)
        assert token.balance_of(ALICE) == 10
        assert token.total_supply() == 10

    def test_transfer(self):
        token = InMemoryToken(RESERVE)
        token.mint(ALICE, 10)
        token.transfer(ALICE, BOB, 4)
        assert token.balance_of(ALICE) == 6
        assert token.balance_of(BOB) == 4
        assert token.total_supply() == 10

    def test_transfer_overdraw_raises(self):
        token = InMemoryToken(RESERVE)
        with pytest.raises(InsufficientTokenBalance):
            token.transfer(ALICE, BOB, 1)

    def test_negative_amounts_rejected(self):
        token = InMemoryToken(RESERVE)
        with pytest.raises(Underflow):
            token.mint(ALICE, -1)

    def test_mixed_case_accounts_share_a_balance(self):
        token = InMemoryToken(RESERVE)
        token.mint(ALICE.upper().replace("0X", "0x"), 5)
        assert token.balance_of(ALICE) == 5


class TestAllowances:
    """Tests for transfer_from with approval enforcement."""

    def test_transfer_from_without_approval_mode(self):
        token = InMemoryToken(RESERVE)
        token.mint(ALICE, 10)
        token.transfer_from(ALICE, BOB, 10)
        assert token.balance_of(BOB) == 10

    def test_transfer_from_requires_allowance(self):
        token = InMemoryToken(RESERVE, require_approval=True)
        token.mint(ALICE, 10)
        with pytest.raises(InsufficientAllowance):
            token.transfer_from(ALICE, BOB, 10)
        assert token.balance_of(ALICE) == 10

    def test_transfer_from_spends_allowance(self):
        token = InMemoryToken(RESERVE, require_approval=True)
        token.mint(ALICE, 10)
        token.approve(ALICE, BOB, 7)

        token.transfer_from(ALICE, BOB, 5)

        assert token.balance_of(BOB) == 5
        assert token.allowance(ALICE, BOB) == 2

    def test_failed_transfer_keeps_allowance(self):
        """The allowance is only spent when the transfer succeeds."""
        token = InMemoryToken(RESERVE, require_approval=True)
        token.mint(ALICE, 1)
        token.approve(ALICE, BOB, 5)
        with pytest.raises(InsufficientTokenBalance):
            token.transfer_from(ALICE, BOB, 5)
        assert token.allowance(ALICE, BOB) == 5

    def test_explicit_spender(self):
        token = InMemoryToken(RESERVE, require_approval=True)
        token.mint(ALICE, 10)
        token.approve(ALICE, RESERVE, 10)
        token.transfer_from(ALICE, BOB, 10, spender=RESERVE)
        assert token.balance_of(BOB) == 10
        assert token.allowance(ALICE, RESERVE) == 0
