"""Constant product pricing.

Pools price swaps with the constant product formula: x * y = k, with a
trading fee deducted from the input before pricing. The fee stays in the
reserves, so k grows with every swap.
"""

from __future__ import annotations

from ammkernel.constants import BPS_DENOMINATOR
from ammkernel.errors import (
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
)
from ammkernel.safe_int import S

# 30 bps trading fee
DEFAULT_FEE_MULTIPLIER = 9970


class ConstantProduct:
    """Constant product math for a single pool.

    Formula: amount_out = (amount_in * fee * reserve_out) / (reserve_in * 10000 + amount_in * fee)

    where fee is the fee multiplier (10000 - fee_bps), 9970 for 0.3%.
    """

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Amount of B worth `amount_a` at the current reserve ratio (no fee).

        Raises:
            InsufficientAmount: If amount_a is zero
            InsufficientLiquidity: If either reserve is empty
        """
        if amount_a <= 0:
            raise InsufficientAmount("Quote amount must be positive")
        if reserve_a <= 0 or reserve_b <= 0:
            raise InsufficientLiquidity("Cannot quote against empty reserves")
        return (S(amount_a) * S(reserve_b) // S(reserve_a)).value

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Calculate output amount for an exact input.

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool
            fee_multiplier: Fee multiplier (default 9970 for 0.3% fee)

        Returns:
            Output token amount (rounded down)

        Raises:
            InsufficientInputAmount: If amount_in is zero
            InsufficientLiquidity: If either reserve is empty
        """
        if amount_in <= 0:
            raise InsufficientInputAmount("Input amount must be positive")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity("Pool reserves are empty")

        amount_in_with_fee = S(amount_in) * S(fee_multiplier)
        numerator = amount_in_with_fee * S(reserve_out)
        denominator = S(reserve_in) * S(BPS_DENOMINATOR) + amount_in_with_fee

        return (numerator // denominator).value

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Calculate required input for an exact output.

        Formula: amount_in = (res_in * out * 10000) / ((res_out - out) * fee) + 1

        Returns:
            Required input token amount (rounded up)

        Raises:
            InsufficientOutputAmount: If amount_out is zero
            InsufficientLiquidity: If reserves are empty or cannot cover amount_out
        """
        if amount_out <= 0:
            raise InsufficientOutputAmount("Output amount must be positive")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity("Pool reserves are empty")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Output {amount_out} would drain reserve {reserve_out}"
            )

        numerator = S(reserve_in) * S(amount_out) * S(BPS_DENOMINATOR)
        denominator = (S(reserve_out) - S(amount_out)) * S(fee_multiplier)

        return ((numerator // denominator) + S(1)).value

    def initial_shares(self, amount0: int, amount1: int, minimum_liquidity: int) -> int:
        """Shares for the first deposit: geometric mean minus the locked floor.

        May be zero or negative; the caller rejects that.
        """
        return (S(amount0) * S(amount1)).isqrt().value - minimum_liquidity

    def proportional_shares(
        self,
        amount0: int,
        amount1: int,
        reserve0: int,
        reserve1: int,
        total_supply: int,
    ) -> int:
        """Shares for a later deposit, limited by the smaller deposit ratio."""
        shares0 = S(amount0) * S(total_supply) // S(reserve0)
        shares1 = S(amount1) * S(total_supply) // S(reserve1)
        return shares0.min(shares1).value

    def redeem(self, shares: int, balance: int, total_supply: int) -> int:
        """Pro rata token amount for burning `shares`."""
        return (S(shares) * S(balance) // S(total_supply)).value


# Singleton instance
constant_product = ConstantProduct()
