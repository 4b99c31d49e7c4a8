"""Wrapped native currency token (1:1 deposit and withdraw)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ammkernel.errors import InsufficientBalance
from ammkernel.models.types import normalize_address
from ammkernel.tokens.token import FungibleToken

if TYPE_CHECKING:
    from ammkernel.ledger import Ledger


class WrappedNative(FungibleToken):
    """Token backed 1:1 by native currency held at the token's own identity."""

    def __init__(
        self,
        ledger: Ledger,
        deployer: str,
        name: str = "Wrapped Ether",
        symbol: str = "WETH",
        address: str | None = None,
    ) -> None:
        super().__init__(ledger, deployer, name, symbol, address=address)

    def deposit(self, sender: str, value: int) -> None:
        """Lock `value` native currency from the sender and mint the same amount."""
        sender = normalize_address(sender)
        self.ledger.transfer_native(sender, self.address, value)
        self._mint(sender, value)
        self.emit("Deposit", holder=sender, amount=value)

    def withdraw(self, sender: str, amount: int) -> None:
        """Burn `amount` of the sender's tokens and release the native currency."""
        sender = normalize_address(sender)
        if self.balance_of(sender) < amount:
            raise InsufficientBalance(
                f"{self.symbol}: cannot withdraw {amount}, {sender[-8:]} holds "
                f"{self.balance_of(sender)}"
            )
        self._burn(sender, amount)
        self.ledger.transfer_native(self.address, sender, amount)
        self.emit("Withdrawal", holder=sender, amount=amount)
