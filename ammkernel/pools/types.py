"""Pool key definitions.

Provides PairKey, the canonical identity of an unordered token pair.
"""

from __future__ import annotations

from dataclasses import dataclass

from ammkernel.errors import IdenticalAddresses, ZeroAddress
from ammkernel.models.types import normalize_address


@dataclass(frozen=True, order=True)
class PairKey:
    """Canonically ordered token pair (token0 < token1 by address magnitude).

    Build with PairKey.of(), which sorts and validates. Direct construction
    validates the ordering too, so an out-of-order key cannot exist.
    """

    token0: str
    token1: str

    def __post_init__(self) -> None:
        if int(self.token0, 16) >= int(self.token1, 16):
            raise ValueError(f"PairKey tokens out of order: {self.token0}, {self.token1}")

    @classmethod
    def of(cls, token_x: str, token_y: str) -> PairKey:
        """Canonical key for a pair given in any order.

        Raises:
            IdenticalAddresses: If both tokens are the same
            ZeroAddress: If either token is the zero identity
        """
        x = normalize_address(token_x, validate=True)
        y = normalize_address(token_y, validate=True)
        if x == y:
            raise IdenticalAddresses(f"Pair needs two different tokens, got {x} twice")
        if int(x, 16) > int(y, 16):
            x, y = y, x
        if int(x, 16) == 0:
            raise ZeroAddress("Pair token cannot be the zero address")
        return cls(x, y)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and normalize_address(token) in (self.token0, self.token1)


__all__ = ["PairKey"]
