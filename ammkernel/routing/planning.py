"""Path pricing and swap staging.

Everything here is read-only: reserves are read fresh from the pools and the
result is an immutable SwapPlan. The router validates a plan against the
caller's bounds and only then moves tokens.
"""

from __future__ import annotations

from collections.abc import Sequence

from ammkernel.amm.math import constant_product
from ammkernel.amm.pool import PoolEngine
from ammkernel.errors import InvalidPath
from ammkernel.fees import gross_up_exact_output, split_exact_input
from ammkernel.models.types import is_valid_address, normalize_address
from ammkernel.pools.registry import Registry
from ammkernel.routing.types import HopPlan, SwapKind, SwapPlan


def validate_path(path: Sequence[str]) -> tuple[str, ...]:
    """Normalize a swap path and reject malformed ones.

    Raises:
        InvalidPath: If the path has fewer than two tokens, a malformed or zero
            identity, or any token appearing more than once
    """
    if len(path) < 2:
        raise InvalidPath(f"Path needs at least two tokens, got {len(path)}")
    normalized: list[str] = []
    for i, token in enumerate(path):
        if not isinstance(token, str) or not is_valid_address(normalize_address(token)):
            raise InvalidPath(f"Invalid address in path[{i}]: {token}")
        token = normalize_address(token)
        if int(token, 16) == 0:
            raise InvalidPath(f"Zero address in path[{i}]")
        if token in normalized:
            raise InvalidPath(f"Token {token} appears more than once in path")
        normalized.append(token)
    return tuple(normalized)


def pools_on_path(registry: Registry, path: Sequence[str]) -> list[PoolEngine]:
    """The pool for each hop of the path.

    Raises:
        PoolNotFound: If any hop has no pool
    """
    return [registry.require_pool(path[i], path[i + 1]) for i in range(len(path) - 1)]


def get_amounts_out(registry: Registry, amount_in: int, path: Sequence[str]) -> list[int]:
    """Chain exact-input pricing forward along the path.

    Returns:
        Amounts at each token of the path, amount_in first
    """
    amounts = [amount_in]
    for i, pool in enumerate(pools_on_path(registry, path)):
        reserve_in, reserve_out = pool.get_reserves(path[i])
        amounts.append(
            constant_product.get_amount_out(
                amounts[-1], reserve_in, reserve_out, pool.fee_multiplier
            )
        )
    return amounts


def get_amounts_in(registry: Registry, amount_out: int, path: Sequence[str]) -> list[int]:
    """Chain exact-output pricing backward along the path.

    Returns:
        Amounts at each token of the path, required input first
    """
    pools = pools_on_path(registry, path)
    amounts = [0] * len(path)
    amounts[-1] = amount_out
    for i in range(len(path) - 1, 0, -1):
        pool = pools[i - 1]
        reserve_in, reserve_out = pool.get_reserves(path[i - 1])
        amounts[i - 1] = constant_product.get_amount_in(
            amounts[i], reserve_in, reserve_out, pool.fee_multiplier
        )
    return amounts


def _forward_hops(
    registry: Registry, pool_amount_in: int, path: tuple[str, ...]
) -> tuple[HopPlan, ...]:
    pools = pools_on_path(registry, path)
    amounts = get_amounts_out(registry, pool_amount_in, path)
    return tuple(
        HopPlan(
            pool=pool,
            token_in=path[i],
            token_out=path[i + 1],
            amount_in=amounts[i],
            amount_out=amounts[i + 1],
        )
        for i, pool in enumerate(pools)
    )


def plan_exact_input(
    registry: Registry, amount_in: int, path: Sequence[str], protocol_fee_bps: int
) -> SwapPlan:
    """Stage a swap of exactly `amount_in` of path[0] (fee included)."""
    tokens = validate_path(path)
    split = split_exact_input(amount_in, protocol_fee_bps)
    return SwapPlan(
        kind=SwapKind.EXACT_INPUT,
        path=tokens,
        hops=_forward_hops(registry, split.pool_amount_in, tokens),
        protocol_fee=split.fee,
    )


def plan_exact_output(
    registry: Registry, amount_out: int, path: Sequence[str], protocol_fee_bps: int
) -> SwapPlan:
    """Stage a swap delivering at least `amount_out` of path[-1].

    The required input is chained backward, then the hops are priced forward
    from it so each hop's input is exactly what the previous pool delivers.
    Rounding makes the final output greater than or equal to `amount_out`.
    """
    tokens = validate_path(path)
    required = get_amounts_in(registry, amount_out, tokens)[0]
    split = gross_up_exact_output(required, protocol_fee_bps)
    return SwapPlan(
        kind=SwapKind.EXACT_OUTPUT,
        path=tokens,
        hops=_forward_hops(registry, split.pool_amount_in, tokens),
        protocol_fee=split.fee,
    )
