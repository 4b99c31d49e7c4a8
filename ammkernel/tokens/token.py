"""Fungible token collaborator.

A plain balance ledger with delegated transfers. Tokens either raise on
failure (strict, the default) or report failure by returning False, so the
kernel can be exercised against both token policies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ammkernel.errors import InsufficientAllowance, InsufficientBalance, TokenError
from ammkernel.ledger import Contract
from ammkernel.models.types import normalize_address

if TYPE_CHECKING:
    from ammkernel.ledger import Ledger

logger = structlog.get_logger()

# Allowance value treated as unlimited (never decremented)
MAX_ALLOWANCE = 2**256 - 1


class FungibleToken(Contract):
    """Fungible balance ledger with approve / transfer_from delegation.

    Allowances are keyed by (owner, spender) so the state stays flat.

    Args:
        ledger: Ledger to deploy on
        deployer: Deploying identity, receives the initial supply
        name: Human readable name
        symbol: Ticker symbol
        initial_supply: Amount minted to the deployer
        decimals: Display decimals
        strict: If True failures raise TokenError, otherwise they return False
        address: Explicit identity (derived from the deployer if None)
    """

    _state_fields = ("_balances", "_allowances", "_total_supply")

    def __init__(
        self,
        ledger: Ledger,
        deployer: str,
        name: str,
        symbol: str,
        initial_supply: int = 0,
        decimals: int = 18,
        strict: bool = True,
        address: str | None = None,
    ) -> None:
        super().__init__(ledger, deployer, address)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.strict = strict
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0
        if initial_supply:
            self._mint(self.deployer, initial_supply)

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(normalize_address(holder), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def approve(self, sender: str, spender: str, amount: int) -> bool:
        """Allow `spender` to move up to `amount` of the sender's tokens."""
        if amount < 0:
            return self._fail(ValueError(f"Cannot approve a negative amount: {amount}"))
        sender = normalize_address(sender)
        spender = normalize_address(spender)
        self._allowances[(sender, spender)] = amount
        self.emit("Approval", owner=sender, spender=spender, amount=amount)
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move `amount` from the sender to `to`."""
        return self._move(normalize_address(sender), normalize_address(to), amount)

    def transfer_from(self, sender: str, owner: str, to: str, amount: int) -> bool:
        """Move `amount` from `owner` to `to`, spending the sender's allowance."""
        sender = normalize_address(sender)
        owner = normalize_address(owner)
        allowed = self._allowances.get((owner, sender), 0)
        if allowed < amount:
            return self._fail(
                InsufficientAllowance(
                    f"{self.symbol}: allowance of {sender[-8:]} over {owner[-8:]} "
                    f"is {allowed}, needs {amount}"
                )
            )
        if self.balance_of(owner) < amount:
            return self._fail(
                InsufficientBalance(
                    f"{self.symbol}: balance of {owner[-8:]} is {self.balance_of(owner)}, "
                    f"needs {amount}"
                )
            )
        if allowed != MAX_ALLOWANCE:
            self._allowances[(owner, sender)] = allowed - amount
        return self._move(owner, normalize_address(to), amount)

    def _move(self, holder: str, to: str, amount: int) -> bool:
        if amount < 0:
            return self._fail(ValueError(f"Cannot transfer a negative amount: {amount}"))
        balance = self._balances.get(holder, 0)
        if balance < amount:
            return self._fail(
                InsufficientBalance(
                    f"{self.symbol}: balance of {holder[-8:]} is {balance}, needs {amount}"
                )
            )
        self._balances[holder] = balance - amount
        self._balances[to] = self._balances.get(to, 0) + amount
        self.emit("Transfer", sender=holder, to=to, amount=amount)
        return True

    def _mint(self, to: str, amount: int) -> None:
        to = normalize_address(to)
        self._balances[to] = self._balances.get(to, 0) + amount
        self._total_supply += amount
        self.emit("Transfer", sender=None, to=to, amount=amount)

    def _burn(self, holder: str, amount: int) -> None:
        holder = normalize_address(holder)
        balance = self._balances.get(holder, 0)
        if balance < amount:
            raise InsufficientBalance(
                f"{self.symbol}: cannot burn {amount}, {holder[-8:]} holds {balance}"
            )
        self._balances[holder] = balance - amount
        self._total_supply -= amount
        self.emit("Transfer", sender=holder, to=None, amount=amount)

    def _fail(self, error: Exception) -> bool:
        if self.strict:
            if isinstance(error, TokenError):
                raise error
            raise TokenError(str(error)) from error
        logger.debug("token_call_failed", token=self.symbol, reason=str(error))
        return False
