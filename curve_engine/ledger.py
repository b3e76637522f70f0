"""Reserve ledger: reserve escrowed per priced asset."""

from __future__ import annotations

from curve_engine.errors import InsufficientReserves
from curve_engine.safe_int import S
from curve_engine.tokens import normalize_address


class ReserveLedger:
    """Per-asset reserve balances.

    Balances only move through credit (buy) and debit (sell). A debit is
    checked before subtraction, so a balance can never go negative.
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}

    def balance(self, asset: str) -> int:
        return self._balances.get(normalize_address(asset), 0)

    def credit(self, asset: str, amount: int) -> int:
        """Add amount to the asset's reserve and return the new balance.

        Raises:
            Uint256Overflow: If the balance would exceed 2^256-1
        """
        key = normalize_address(asset)
        new_balance = (S(self.balance(key)) + amount).value
        self._balances[key] = new_balance
        return new_balance

    def debit(self, asset: str, amount: int) -> int:
        """Remove amount from the asset's reserve and return the new balance.

        Raises:
            InsufficientReserves: If the balance is below amount
        """
        key = normalize_address(asset)
        remaining = S(self.balance(key)).checked_sub(amount)
        if remaining is None:
            raise InsufficientReserves(
                f"Reserve {self.balance(key)} for {key} cannot cover {amount}"
            )
        self._balances[key] = remaining.value
        return remaining.value

    def total(self) -> int:
        """Reserve escrowed across all assets."""
        return sum(list(self._balances.values()))
