"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ammkernel.amm.pool import PoolEngine


class SwapKind(str, Enum):
    """Which side of the swap the caller fixed."""

    EXACT_INPUT = "exact_input"
    EXACT_OUTPUT = "exact_output"


@dataclass(frozen=True)
class HopPlan:
    """One priced hop of a staged swap."""

    pool: PoolEngine
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int

    @property
    def pool_amounts_in(self) -> tuple[int, int]:
        """(amount0_in, amount1_in) as the pool's swap entry point takes them."""
        if self.token_in == self.pool.token0:
            return self.amount_in, 0
        return 0, self.amount_in


@dataclass(frozen=True)
class SwapPlan:
    """Fully priced swap, computed before any token moves.

    Attributes:
        kind: Whether the input or the output was fixed by the caller
        path: Token path (first token in, last token out)
        hops: Priced hops, one per consecutive token pair
        protocol_fee: Amount of path[0] sent to the treasury
    """

    kind: SwapKind
    path: tuple[str, ...]
    hops: tuple[HopPlan, ...]
    protocol_fee: int

    @property
    def pool_amount_in(self) -> int:
        """Input priced by the first pool."""
        return self.hops[0].amount_in

    @property
    def amount_in(self) -> int:
        """Total input the payer parts with (pool input plus protocol fee)."""
        return self.pool_amount_in + self.protocol_fee

    @property
    def amount_out(self) -> int:
        """Output delivered by the last pool."""
        return self.hops[-1].amount_out

    @property
    def is_multihop(self) -> bool:
        return len(self.hops) > 1


__all__ = ["HopPlan", "SwapKind", "SwapPlan"]
