"""Router: liquidity and swap orchestration over the registry's pools.

The router holds no state of its own. Every operation checks the caller's
deadline, stages its amounts against fresh reserves, checks the caller's
bounds and then moves tokens, all inside one ledger transaction. A failure
at any step leaves every pool, token and native balance as it was.

Swaps skim a protocol fee in the path's first token to the registry's
treasury (see ammkernel.fees.protocol for the rule).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from ammkernel.amm.math import constant_product
from ammkernel.amm.pool import PoolEngine
from ammkernel.errors import (
    ExcessiveInputAmount,
    Expired,
    InsufficientAAmount,
    InsufficientBAmount,
    InsufficientOutputAmount,
    InvalidPath,
)
from ammkernel.ledger import Contract
from ammkernel.models.types import normalize_address
from ammkernel.pools.registry import Registry
from ammkernel.routing import planning
from ammkernel.routing.types import SwapPlan
from ammkernel.tokens import (
    FungibleToken,
    WrappedNative,
    safe_transfer,
    safe_transfer_from,
    safe_transfer_native,
)

if TYPE_CHECKING:
    from ammkernel.ledger import Ledger

logger = structlog.get_logger()


class Router(Contract):
    """Entry point for liquidity providers and traders.

    Args:
        ledger: Ledger to deploy on
        deployer: Deploying identity
        registry_address: Registry whose pools this router operates
        wrapped_native_address: Wrapped native token used by the native variants
    """

    def __init__(
        self,
        ledger: Ledger,
        deployer: str,
        registry_address: str,
        wrapped_native_address: str,
    ) -> None:
        super().__init__(ledger, deployer)
        self.registry = ledger.get_contract(registry_address, Registry)
        self.wrapped_native = ledger.get_contract(wrapped_native_address, WrappedNative)

    @property
    def protocol_fee_bps(self) -> int:
        return self.registry.config.protocol_fee_bps

    @property
    def treasury(self) -> str:
        return self.registry.treasury_address

    # --- Liquidity ---

    def add_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> tuple[int, int, int]:
        """Deposit a token pair at the pool's current ratio.

        The pool is created if the pair has none. An empty pool takes the
        desired amounts as they are; otherwise one side is scaled down to
        match the reserve ratio.

        Returns:
            (amount_a, amount_b, shares) actually deposited and minted

        Raises:
            Expired: If the deadline has passed
            InsufficientAAmount: If the scaled amount of A is below amount_a_min
            InsufficientBAmount: If the scaled amount of B is below amount_b_min
            TransferFailed: If pulling either token from the sender failed
        """
        self._ensure(deadline)
        with self.ledger.atomic():
            amount_a, amount_b, pool = self._add_liquidity(
                token_a, token_b, amount_a_desired, amount_b_desired, amount_a_min, amount_b_min
            )
            safe_transfer_from(self._token(token_a), self.address, sender, pool.address, amount_a)
            safe_transfer_from(self._token(token_b), self.address, sender, pool.address, amount_b)
            shares = pool.mint(self.address, to)

        logger.info(
            "liquidity_added",
            pool=pool.address[-8:],
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )
        return amount_a, amount_b, shares

    def add_liquidity_native(
        self,
        sender: str,
        token: str,
        amount_token_desired: int,
        amount_token_min: int,
        amount_native_min: int,
        to: str,
        deadline: int,
        value: int,
    ) -> tuple[int, int, int]:
        """Deposit a token paired with attached native currency.

        The native side is wrapped before it reaches the pool. Native value
        not needed at the pool's ratio is refunded to the sender.

        Returns:
            (amount_token, amount_native, shares)
        """
        self._ensure(deadline)
        weth = self.wrapped_native
        with self.ledger.atomic():
            safe_transfer_native(self.ledger, sender, self.address, value)
            amount_token, amount_native, pool = self._add_liquidity(
                token,
                weth.address,
                amount_token_desired,
                value,
                amount_token_min,
                amount_native_min,
            )
            safe_transfer_from(self._token(token), self.address, sender, pool.address, amount_token)
            weth.deposit(self.address, amount_native)
            safe_transfer(weth, self.address, pool.address, amount_native)
            shares = pool.mint(self.address, to)
            if value > amount_native:
                safe_transfer_native(self.ledger, self.address, sender, value - amount_native)

        logger.info(
            "liquidity_added",
            pool=pool.address[-8:],
            amount_token=amount_token,
            amount_native=amount_native,
            shares=shares,
            refunded=value - amount_native,
        )
        return amount_token, amount_native, shares

    def remove_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        shares: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> tuple[int, int]:
        """Redeem shares for the underlying pair.

        The sender must have approved the router to move its shares.

        Returns:
            (amount_a, amount_b) paid to `to`

        Raises:
            Expired: If the deadline has passed
            PoolNotFound: If the pair has no pool
            InsufficientAAmount: If the payout of A is below amount_a_min
            InsufficientBAmount: If the payout of B is below amount_b_min
        """
        self._ensure(deadline)
        with self.ledger.atomic():
            amounts = self._remove_liquidity(
                sender, token_a, token_b, shares, amount_a_min, amount_b_min, to
            )
        logger.info(
            "liquidity_removed",
            token_a=normalize_address(token_a)[-8:],
            token_b=normalize_address(token_b)[-8:],
            shares=shares,
            amount_a=amounts[0],
            amount_b=amounts[1],
        )
        return amounts

    def remove_liquidity_native(
        self,
        sender: str,
        token: str,
        shares: int,
        amount_token_min: int,
        amount_native_min: int,
        to: str,
        deadline: int,
    ) -> tuple[int, int]:
        """Redeem shares of a token/wrapped-native pool, paying the native side unwrapped.

        Returns:
            (amount_token, amount_native) paid to `to`
        """
        self._ensure(deadline)
        weth = self.wrapped_native
        with self.ledger.atomic():
            amount_token, amount_native = self._remove_liquidity(
                sender,
                token,
                weth.address,
                shares,
                amount_token_min,
                amount_native_min,
                self.address,
            )
            safe_transfer(self._token(token), self.address, to, amount_token)
            weth.withdraw(self.address, amount_native)
            safe_transfer_native(self.ledger, self.address, to, amount_native)

        logger.info(
            "liquidity_removed",
            token=normalize_address(token)[-8:],
            shares=shares,
            amount_token=amount_token,
            amount_native=amount_native,
        )
        return amount_token, amount_native

    # --- Swaps ---

    def swap_exact_tokens_for_tokens(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> SwapPlan:
        """Swap exactly `amount_in` of path[0] (protocol fee included) along the path.

        Returns:
            The executed plan

        Raises:
            Expired: If the deadline has passed
            InvalidPath: If the path is malformed
            PoolNotFound: If a hop has no pool
            InsufficientOutputAmount: If the output is below amount_out_min
        """
        self._ensure(deadline)
        with self.ledger.atomic():
            plan = self._stage_exact_input(amount_in, amount_out_min, path)
            self._execute(plan, sender, to)
        return plan

    def swap_tokens_for_exact_tokens(
        self,
        sender: str,
        amount_out: int,
        amount_in_max: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> SwapPlan:
        """Swap as little of path[0] as needed to receive `amount_out` of path[-1].

        The pools price forward from the rounded-up input, so the recipient can
        get slightly more than `amount_out`. The returned plan's amount_out is
        what was actually delivered.

        Raises:
            Expired: If the deadline has passed
            ExcessiveInputAmount: If the input plus protocol fee exceeds amount_in_max
        """
        self._ensure(deadline)
        with self.ledger.atomic():
            plan = self._stage_exact_output(amount_out, amount_in_max, path)
            self._execute(plan, sender, to)
        return plan

    def swap_exact_native_for_tokens(
        self,
        sender: str,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
        value: int,
    ) -> SwapPlan:
        """Swap all attached native currency along a path starting at the wrapped token."""
        self._ensure(deadline)
        self._require_native_start(path)
        with self.ledger.atomic():
            plan = self._stage_exact_input(value, amount_out_min, path)
            safe_transfer_native(self.ledger, sender, self.address, value)
            self.wrapped_native.deposit(self.address, value)
            self._execute(plan, self.address, to)
        return plan

    def swap_native_for_exact_tokens(
        self,
        sender: str,
        amount_out: int,
        path: Sequence[str],
        to: str,
        deadline: int,
        value: int,
    ) -> SwapPlan:
        """Receive at least `amount_out`, paying in attached native currency.

        As with swap_tokens_for_exact_tokens, rounding can deliver a little more
        than asked; plan.amount_out is the delivered amount.

        Native value beyond the required input and fee is refunded.

        Raises:
            ExcessiveInputAmount: If the attached value does not cover input plus fee
        """
        self._ensure(deadline)
        self._require_native_start(path)
        with self.ledger.atomic():
            plan = self._stage_exact_output(amount_out, value, path)
            safe_transfer_native(self.ledger, sender, self.address, value)
            self.wrapped_native.deposit(self.address, plan.amount_in)
            self._execute(plan, self.address, to)
            if value > plan.amount_in:
                safe_transfer_native(self.ledger, self.address, sender, value - plan.amount_in)
        return plan

    def swap_exact_tokens_for_native(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> SwapPlan:
        """Swap exactly `amount_in` of path[0] into native currency paid to `to`."""
        self._ensure(deadline)
        self._require_native_end(path)
        with self.ledger.atomic():
            plan = self._stage_exact_input(amount_in, amount_out_min, path)
            self._execute(plan, sender, self.address)
            self._unwrap_to(to, plan.amount_out)
        return plan

    def swap_tokens_for_exact_native(
        self,
        sender: str,
        amount_out: int,
        amount_in_max: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> SwapPlan:
        """Receive at least `amount_out` native currency for as little of path[0] as needed.

        Rounding can unwrap a little more than asked; plan.amount_out is the
        delivered amount.
        """
        self._ensure(deadline)
        self._require_native_end(path)
        with self.ledger.atomic():
            plan = self._stage_exact_output(amount_out, amount_in_max, path)
            self._execute(plan, sender, self.address)
            self._unwrap_to(to, plan.amount_out)
        return plan

    # --- Read helpers ---

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Equivalent amount of B at the given reserve ratio, no fee."""
        return constant_product.quote(amount_a, reserve_a, reserve_b)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Output of one pool hop at the configured trading fee."""
        return constant_product.get_amount_out(
            amount_in, reserve_in, reserve_out, self.registry.config.fee_multiplier
        )

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Input one pool hop needs for `amount_out` at the configured trading fee."""
        return constant_product.get_amount_in(
            amount_out, reserve_in, reserve_out, self.registry.config.fee_multiplier
        )

    def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int]:
        """Pool-side amounts along the path for an input reaching the first pool.

        The protocol fee is not included; use quote_exact_input for the full picture.
        """
        return planning.get_amounts_out(self.registry, amount_in, planning.validate_path(path))

    def get_amounts_in(self, amount_out: int, path: Sequence[str]) -> list[int]:
        """Pool-side amounts along the path required for `amount_out`, fee excluded."""
        return planning.get_amounts_in(self.registry, amount_out, planning.validate_path(path))

    def quote_exact_input(self, amount_in: int, path: Sequence[str]) -> SwapPlan:
        """Stage an exact-input swap without executing it."""
        return planning.plan_exact_input(self.registry, amount_in, path, self.protocol_fee_bps)

    def quote_exact_output(self, amount_out: int, path: Sequence[str]) -> SwapPlan:
        """Stage an exact-output swap without executing it."""
        return planning.plan_exact_output(self.registry, amount_out, path, self.protocol_fee_bps)

    # --- Internals ---

    def _ensure(self, deadline: int) -> None:
        if self.ledger.timestamp > deadline:
            raise Expired(f"Deadline {deadline} passed at {self.ledger.timestamp}")

    def _token(self, address: str) -> FungibleToken:
        return self.ledger.get_contract(address, FungibleToken)

    def _require_native_start(self, path: Sequence[str]) -> None:
        tokens = planning.validate_path(path)
        if tokens[0] != self.wrapped_native.address:
            raise InvalidPath(f"Path must start with the wrapped native token, got {tokens[0]}")

    def _require_native_end(self, path: Sequence[str]) -> None:
        tokens = planning.validate_path(path)
        if tokens[-1] != self.wrapped_native.address:
            raise InvalidPath(f"Path must end with the wrapped native token, got {tokens[-1]}")

    def _add_liquidity(
        self,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
    ) -> tuple[int, int, PoolEngine]:
        pool = self.registry.get_or_create_pool(token_a, token_b)
        reserve_a, reserve_b = pool.get_reserves(token_a)
        if reserve_a == 0 and reserve_b == 0:
            return amount_a_desired, amount_b_desired, pool

        amount_b_optimal = constant_product.quote(amount_a_desired, reserve_a, reserve_b)
        if amount_b_optimal <= amount_b_desired:
            if amount_b_optimal < amount_b_min:
                raise InsufficientBAmount(
                    f"Optimal B amount {amount_b_optimal} is below minimum {amount_b_min}"
                )
            return amount_a_desired, amount_b_optimal, pool

        amount_a_optimal = constant_product.quote(amount_b_desired, reserve_b, reserve_a)
        if amount_a_optimal > amount_a_desired or amount_a_optimal < amount_a_min:
            raise InsufficientAAmount(
                f"Optimal A amount {amount_a_optimal} is outside "
                f"[{amount_a_min}, {amount_a_desired}]"
            )
        return amount_a_optimal, amount_b_desired, pool

    def _remove_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        shares: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
    ) -> tuple[int, int]:
        pool = self.registry.require_pool(token_a, token_b)
        safe_transfer_from(pool, self.address, sender, pool.address, shares)
        amount0, amount1 = pool.burn(self.address, to)
        if normalize_address(token_a) == pool.token0:
            amount_a, amount_b = amount0, amount1
        else:
            amount_a, amount_b = amount1, amount0
        if amount_a < amount_a_min:
            raise InsufficientAAmount(f"Received {amount_a} of A, minimum is {amount_a_min}")
        if amount_b < amount_b_min:
            raise InsufficientBAmount(f"Received {amount_b} of B, minimum is {amount_b_min}")
        return amount_a, amount_b

    def _stage_exact_input(
        self, amount_in: int, amount_out_min: int, path: Sequence[str]
    ) -> SwapPlan:
        plan = planning.plan_exact_input(self.registry, amount_in, path, self.protocol_fee_bps)
        if plan.amount_out < amount_out_min:
            raise InsufficientOutputAmount(
                f"Output {plan.amount_out} is below minimum {amount_out_min}"
            )
        return plan

    def _stage_exact_output(
        self, amount_out: int, amount_in_max: int, path: Sequence[str]
    ) -> SwapPlan:
        plan = planning.plan_exact_output(self.registry, amount_out, path, self.protocol_fee_bps)
        if plan.amount_in > amount_in_max:
            raise ExcessiveInputAmount(
                f"Input {plan.pool_amount_in} plus fee {plan.protocol_fee} exceeds "
                f"maximum {amount_in_max}"
            )
        return plan

    def _pay(self, token: FungibleToken, payer: str, to: str, amount: int) -> None:
        if normalize_address(payer) == self.address:
            safe_transfer(token, self.address, to, amount)
        else:
            safe_transfer_from(token, self.address, payer, to, amount)

    def _execute(self, plan: SwapPlan, payer: str, to: str) -> None:
        """Move the fee and input, then swap hop by hop.

        Each hop's output goes straight to the next hop's pool, the last to `to`.
        """
        token_in = self._token(plan.path[0])
        if plan.protocol_fee > 0:
            self._pay(token_in, payer, self.treasury, plan.protocol_fee)
        self._pay(token_in, payer, plan.hops[0].pool.address, plan.pool_amount_in)

        for i, hop in enumerate(plan.hops):
            recipient = plan.hops[i + 1].pool.address if i + 1 < len(plan.hops) else to
            amount0_in, amount1_in = hop.pool_amounts_in
            hop.pool.swap(self.address, amount0_in, amount1_in, recipient)

        logger.info(
            "swap_routed",
            kind=plan.kind.value,
            hops=len(plan.hops),
            amount_in=plan.amount_in,
            amount_out=plan.amount_out,
            protocol_fee=plan.protocol_fee,
        )

    def _unwrap_to(self, to: str, amount: int) -> None:
        self.wrapped_native.withdraw(self.address, amount)
        safe_transfer_native(self.ledger, self.address, to, amount)
