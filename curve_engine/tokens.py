"""Token collaborators consumed by the curve engine.

The engine never owns balances or supply itself. It talks to:
- a ReserveToken: the fungible asset escrowed as backing
- a PricedAsset per curve: the token minted on buy and burned on sell

InMemoryToken implements both protocols with ERC-20 style bookkeeping and
is what the tests and the demo quote service run against.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from curve_engine.safe_int import S, SafeIntError


def normalize_address(address: str) -> str:
    """Normalize an account or token address to lowercase with 0x prefix.

    Note:
        This does NOT check that the input is a well-formed address. Use
        is_valid_address() for that.
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a 0x-prefixed, 40 hex character address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x") or len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


class TokenError(Exception):
    """Base error raised by token collaborators."""

    pass


class InsufficientTokenBalance(TokenError):
    """Account balance is below the transfer or burn amount."""

    pass


class InsufficientAllowance(TokenError):
    """Spender has not been approved for the transfer amount."""

    pass


@runtime_checkable
class ReserveToken(Protocol):
    """Transfer capability of the reserve asset."""

    address: str

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> None: ...

    def transfer_from(self, sender: str, recipient: str, amount: int) -> None: ...


@runtime_checkable
class PricedAsset(Protocol):
    """Mintable/burnable capability of a curve-priced asset."""

    address: str

    def total_supply(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    def mint(self, to: str, amount: int) -> None: ...

    def burn_from(self, account: str, amount: int) -> None: ...


class InMemoryToken:
    """Fungible token with balances, allowances and a total supply.

    Satisfies both ReserveToken and PricedAsset. When require_approval is
    set, transfer_from only succeeds if the owner approved the spender
    (which defaults to the recipient, as with a contract pulling funds
    into its own custody).
    """

    def __init__(
        self,
        address: str,
        symbol: str = "TKN",
        *,
        decimals: int = 18,
        require_approval: bool = False,
    ) -> None:
        self.address = normalize_address(address)
        self.symbol = symbol
        self.decimals = decimals
        self.require_approval = require_approval
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"InMemoryToken({self.symbol}, {self.address})"

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        key = (normalize_address(owner), normalize_address(spender))
        with self._lock:
            self._allowances[key] = S(amount).value

    def mint(self, to: str, amount: int) -> None:
        to = normalize_address(to)
        amount = S(amount).value
        with self._lock:
            self._total_supply = (S(self._total_supply) + amount).value
            self._balances[to] = self.balance_of(to) + amount

    def burn_from(self, account: str, amount: int) -> None:
        account = normalize_address(account)
        with self._lock:
            self._debit(account, amount)
            self._total_supply = (S(self._total_supply) - amount).value

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        with self._lock:
            self._debit(sender, amount)
            self._balances[recipient] = self.balance_of(recipient) + amount

    def transfer_from(
        self,
        sender: str,
        recipient: str,
        amount: int,
        spender: str | None = None,
    ) -> None:
        spender = normalize_address(spender or recipient)
        with self._lock:
            if self.require_approval:
                allowed = self.allowance(sender, spender)
                if allowed < amount:
                    raise InsufficientAllowance(
                        f"{self.symbol}: allowance {allowed} < {amount} for spender {spender}"
                    )
            self.transfer(sender, recipient, amount)
            if self.require_approval:
                self._allowances[(normalize_address(sender), spender)] -= amount

    def _debit(self, account: str, amount: int) -> None:
        amount = S(amount).value
        balance = self.balance_of(account)
        try:
            self._balances[account] = (S(balance) - amount).value
        except SafeIntError as err:
            raise InsufficientTokenBalance(
                f"{self.symbol}: balance {balance} of {account} < {amount}"
            ) from err
