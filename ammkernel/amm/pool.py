"""Pool engine: reserves and liquidity shares for one token pair.

The pool is itself a fungible token whose units are liquidity shares. Tokens
are moved into the pool before mint or swap is called; the pool measures the
inflow as the difference between its token balances and its reserves, then
updates the reserves to the balances it observed.

Only the registry's trusted router may mint, burn or swap. Anyone may skim
donated surplus or sync the reserves to the balances.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ammkernel.amm.math import constant_product
from ammkernel.constants import BPS_DENOMINATOR, MAX_RESERVE, ZERO_ADDRESS
from ammkernel.errors import (
    Forbidden,
    InsufficientInputAmount,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidRecipient,
    InvalidSwapInput,
    InvariantViolation,
    ReserveOverflow,
)
from ammkernel.models.types import normalize_address
from ammkernel.tokens import FungibleToken, safe_transfer

if TYPE_CHECKING:
    from ammkernel.ledger import Ledger
    from ammkernel.pools.registry import Registry
    from ammkernel.pools.types import PairKey

logger = structlog.get_logger()


class PoolEngine(FungibleToken):
    """Constant product pool for one canonical token pair.

    Args:
        ledger: Ledger the pool lives on
        registry: Registry that created the pool (source of the trusted router)
        key: Canonical token pair
        address: Deterministic pool identity
        fee_bps: Trading fee in basis points, retained in reserves
        minimum_liquidity: Shares locked to the zero address on first deposit
    """

    _state_fields = FungibleToken._state_fields + ("_reserve0", "_reserve1")

    def __init__(
        self,
        ledger: Ledger,
        registry: Registry,
        key: PairKey,
        address: str,
        fee_bps: int,
        minimum_liquidity: int,
    ) -> None:
        super().__init__(
            ledger,
            registry.address,
            name="AMM Liquidity Share",
            symbol="AMM-LP",
            address=address,
        )
        self.registry = registry
        self.key = key
        self.fee_bps = fee_bps
        self.minimum_liquidity = minimum_liquidity
        self._reserve0 = 0
        self._reserve1 = 0

    @property
    def token0(self) -> str:
        return self.key.token0

    @property
    def token1(self) -> str:
        return self.key.token1

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for AMM math (10000 - fee_bps)."""
        return BPS_DENOMINATOR - self.fee_bps

    def reserves_snapshot(self) -> tuple[int, int]:
        """Current (reserve0, reserve1)."""
        return self._reserve0, self._reserve1

    def get_reserves(self, token_in: str) -> tuple[int, int]:
        """Reserves ordered as (reserve_in, reserve_out)."""
        if token_in not in self.key:
            raise ValueError(f"Token {token_in} not in pool")
        if normalize_address(token_in) == self.token0:
            return self._reserve0, self._reserve1
        return self._reserve1, self._reserve0

    @property
    def k(self) -> int:
        """Current reserve product."""
        return self._reserve0 * self._reserve1

    # --- Router-only entry points ---

    def mint(self, sender: str, to: str) -> int:
        """Issue shares for the tokens deposited since the last reserve update.

        Returns:
            Shares minted to `to`

        Raises:
            Forbidden: If the sender is not the trusted router
            InsufficientLiquidityMinted: If the deposit is worth zero shares
        """
        self._require_router(sender)
        reserve0, reserve1 = self.reserves_snapshot()
        balance0, balance1 = self._token_balances()
        amount0 = balance0 - reserve0
        amount1 = balance1 - reserve1

        if self.total_supply == 0:
            shares = constant_product.initial_shares(amount0, amount1, self.minimum_liquidity)
            if shares <= 0:
                raise InsufficientLiquidityMinted(
                    f"First deposit of {amount0}/{amount1} does not clear the "
                    f"{self.minimum_liquidity} share floor"
                )
            self._mint(ZERO_ADDRESS, self.minimum_liquidity)
        else:
            shares = constant_product.proportional_shares(
                amount0, amount1, reserve0, reserve1, self.total_supply
            )
            if shares <= 0:
                raise InsufficientLiquidityMinted(
                    f"Deposit of {amount0}/{amount1} is worth zero shares"
                )

        self._mint(to, shares)
        self._update(balance0, balance1)
        self.emit(
            "LiquidityMinted",
            sender=sender,
            to=normalize_address(to),
            amount0=amount0,
            amount1=amount1,
            shares=shares,
        )
        logger.debug(
            "liquidity_minted",
            pool=self.address[-8:],
            amount0=amount0,
            amount1=amount1,
            shares=shares,
        )
        return shares

    def burn(self, sender: str, to: str) -> tuple[int, int]:
        """Redeem the shares held by the pool itself, paying out pro rata to `to`.

        Returns:
            (amount0, amount1) sent to `to`

        Raises:
            Forbidden: If the sender is not the trusted router
            InsufficientLiquidityBurned: If either payout would be zero
        """
        self._require_router(sender)
        balance0, balance1 = self._token_balances()
        shares = self.balance_of(self.address)
        supply = self.total_supply
        if supply == 0:
            raise InsufficientLiquidityBurned("Pool has no outstanding shares")

        amount0 = constant_product.redeem(shares, balance0, supply)
        amount1 = constant_product.redeem(shares, balance1, supply)
        if amount0 <= 0 or amount1 <= 0:
            raise InsufficientLiquidityBurned(
                f"Burning {shares} shares pays out {amount0}/{amount1}"
            )

        self._burn(self.address, shares)
        safe_transfer(self._token(self.token0), self.address, to, amount0)
        safe_transfer(self._token(self.token1), self.address, to, amount1)
        balance0, balance1 = self._token_balances()
        self._update(balance0, balance1)
        self.emit(
            "LiquidityBurned",
            sender=sender,
            to=normalize_address(to),
            amount0=amount0,
            amount1=amount1,
            shares=shares,
        )
        logger.debug(
            "liquidity_burned",
            pool=self.address[-8:],
            amount0=amount0,
            amount1=amount1,
            shares=shares,
        )
        return amount0, amount1

    def swap(self, sender: str, amount0_in: int, amount1_in: int, to: str) -> int:
        """Price a one-sided input and send the output to `to`.

        The declared input must already be held by the pool in excess of its
        reserve. Exactly one of amount0_in / amount1_in is positive.

        Returns:
            Output amount sent to `to`

        Raises:
            Forbidden: If the sender is not the trusted router
            InsufficientInputAmount: If no input is declared or it never arrived
            InvalidSwapInput: If both sides declare input
            InsufficientOutputAmount: If the output is zero or would empty a reserve
            InvariantViolation: If the fee-adjusted reserve product would shrink
        """
        self._require_router(sender)
        if amount0_in <= 0 and amount1_in <= 0:
            raise InsufficientInputAmount("Swap needs input on one side")
        if amount0_in > 0 and amount1_in > 0:
            raise InvalidSwapInput("Swap takes input on one side only")
        to = normalize_address(to)
        if to in (self.token0, self.token1):
            raise InvalidRecipient(f"Cannot send swap output to token {to}")

        reserve0, reserve1 = self.reserves_snapshot()
        balance0, balance1 = self._token_balances()
        if balance0 - reserve0 < amount0_in or balance1 - reserve1 < amount1_in:
            raise InsufficientInputAmount(
                f"Declared input {amount0_in}/{amount1_in} not received by pool"
            )

        zero_for_one = amount0_in > 0
        if zero_for_one:
            amount_in, reserve_in, reserve_out, token_out = (
                amount0_in, reserve0, reserve1, self.token1,
            )
        else:
            amount_in, reserve_in, reserve_out, token_out = (
                amount1_in, reserve1, reserve0, self.token0,
            )

        amount_out = constant_product.get_amount_out(
            amount_in, reserve_in, reserve_out, self.fee_multiplier
        )
        if amount_out <= 0 or amount_out >= reserve_out:
            raise InsufficientOutputAmount(
                f"Pool cannot pay {amount_out} out of reserve {reserve_out}"
            )

        safe_transfer(self._token(token_out), self.address, to, amount_out)

        balance0, balance1 = self._token_balances()
        amount0_out, amount1_out = (0, amount_out) if zero_for_one else (amount_out, 0)
        actual0_in = max(balance0 - (reserve0 - amount0_out), 0)
        actual1_in = max(balance1 - (reserve1 - amount1_out), 0)
        adjusted0 = balance0 * BPS_DENOMINATOR - actual0_in * self.fee_bps
        adjusted1 = balance1 * BPS_DENOMINATOR - actual1_in * self.fee_bps
        if adjusted0 * adjusted1 < reserve0 * reserve1 * BPS_DENOMINATOR**2:
            raise InvariantViolation(
                f"Reserve product would fall below {reserve0 * reserve1}"
            )

        self._update(balance0, balance1)
        self.emit(
            "SwapExecuted",
            sender=sender,
            to=to,
            amount0_in=actual0_in,
            amount1_in=actual1_in,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
        )
        logger.debug(
            "swap_executed",
            pool=self.address[-8:],
            zero_for_one=zero_for_one,
            amount_in=amount_in,
            amount_out=amount_out,
        )
        return amount_out

    # --- Open maintenance entry points ---

    def skim(self, sender: str, to: str) -> tuple[int, int]:
        """Send token balances in excess of the reserves to `to`.

        Open to any caller: only donated surplus leaves the pool, never the
        reserves.
        """
        balance0, balance1 = self._token_balances()
        excess0 = max(balance0 - self._reserve0, 0)
        excess1 = max(balance1 - self._reserve1, 0)
        with self.ledger.atomic():
            if excess0:
                safe_transfer(self._token(self.token0), self.address, to, excess0)
            if excess1:
                safe_transfer(self._token(self.token1), self.address, to, excess1)
            self.emit(
                "ExcessSkimmed",
                sender=normalize_address(sender),
                to=normalize_address(to),
                amount0=excess0,
                amount1=excess1,
            )
        return excess0, excess1

    def sync(self, sender: str) -> None:
        """Set the reserves to the current token balances. Open to any caller."""
        with self.ledger.atomic():
            self._update(*self._token_balances())
            self.emit(
                "ReservesSynced",
                sender=normalize_address(sender),
                reserve0=self._reserve0,
                reserve1=self._reserve1,
            )

    # --- Internals ---

    def _require_router(self, sender: str) -> None:
        router = self.registry.router_address
        if router is None or normalize_address(sender) != router:
            raise Forbidden(f"Only the trusted router may move pool funds, not {sender}")

    def _token(self, address: str) -> FungibleToken:
        return self.ledger.get_contract(address, FungibleToken)

    def _token_balances(self) -> tuple[int, int]:
        return (
            self._token(self.token0).balance_of(self.address),
            self._token(self.token1).balance_of(self.address),
        )

    def _update(self, balance0: int, balance1: int) -> None:
        if balance0 > MAX_RESERVE or balance1 > MAX_RESERVE:
            raise ReserveOverflow(f"Balances {balance0}/{balance1} exceed the reserve width")
        self._reserve0 = balance0
        self._reserve1 = balance1
