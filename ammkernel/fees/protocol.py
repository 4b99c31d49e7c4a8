"""Protocol fee skimmed to the treasury on every swap.

Rule: the fee is charged once per swap call, in the path's first token,
and never compounded per hop.

- Exact input: fee = amount_in * bps // 10000, and the pools price
  amount_in - fee.
- Exact output: the pools price the required input r, and the caller pays
  r + r * bps // 10000.

Liquidity providers never see the fee; it is moved straight from the
payer to the treasury.
"""

from dataclasses import dataclass

from ammkernel.constants import BPS_DENOMINATOR
from ammkernel.errors import InsufficientInputAmount
from ammkernel.safe_int import S


@dataclass(frozen=True)
class ProtocolFee:
    """Split of a swap's gross input between the treasury and the pools.

    Attributes:
        fee: Amount sent to the treasury
        pool_amount_in: Amount priced by the first pool
    """

    fee: int
    pool_amount_in: int

    @property
    def gross_amount_in(self) -> int:
        """Total the payer parts with."""
        return self.fee + self.pool_amount_in


def fee_on(amount: int, fee_bps: int) -> int:
    """Fee owed on `amount` at `fee_bps` (rounded down)."""
    return (S(amount) * S(fee_bps) // S(BPS_DENOMINATOR)).value


def split_exact_input(amount_in: int, fee_bps: int) -> ProtocolFee:
    """Deduct the fee from a gross input.

    Raises:
        InsufficientInputAmount: If amount_in is not positive
    """
    if amount_in <= 0:
        raise InsufficientInputAmount("Input amount must be positive")
    fee = fee_on(amount_in, fee_bps)
    return ProtocolFee(fee=fee, pool_amount_in=amount_in - fee)


def gross_up_exact_output(pool_amount_in: int, fee_bps: int) -> ProtocolFee:
    """Add the fee on top of the input the pools require."""
    return ProtocolFee(fee=fee_on(pool_amount_in, fee_bps), pool_amount_in=pool_amount_in)
