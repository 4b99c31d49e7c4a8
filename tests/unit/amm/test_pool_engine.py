"""Tests for the pool engine entry points, called as the trusted router."""

import pytest

from ammkernel.constants import MAX_RESERVE, MINIMUM_LIQUIDITY, ZERO_ADDRESS
from ammkernel.errors import (
    Forbidden,
    InsufficientInputAmount,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InvalidRecipient,
    InvalidSwapInput,
    ReserveOverflow,
)
from ammkernel.tokens import FungibleToken
from tests.helpers import E18, POOL_DEPOSIT


@pytest.fixture
def pool(kernel, token1, token2):
    return kernel.registry.get_or_create_pool(token1.address, token2.address)


@pytest.fixture
def router(kernel):
    """Identity of the trusted router."""
    return kernel.router.address


def deposit(pool, owner, token_a, token_b, amount_a, amount_b):
    token_a.transfer(owner, pool.address, amount_a)
    token_b.transfer(owner, pool.address, amount_b)


class TestMint:
    """Tests for share issuance."""

    def test_first_deposit_locks_minimum_liquidity(self, pool, router, owner, token1, token2):
        deposit(pool, owner, token1, token2, POOL_DEPOSIT, POOL_DEPOSIT)

        shares = pool.mint(router, owner)

        assert shares == POOL_DEPOSIT - MINIMUM_LIQUIDITY
        assert pool.balance_of(ZERO_ADDRESS) == MINIMUM_LIQUIDITY
        assert pool.total_supply == POOL_DEPOSIT
        assert pool.reserves_snapshot() == (POOL_DEPOSIT, POOL_DEPOSIT)

    def test_later_deposit_uses_smaller_ratio(self, pool, router, owner, token1, token2):
        deposit(pool, owner, token1, token2, 10 * E18, 10 * E18)
        pool.mint(router, owner)
        supply = pool.total_supply

        # Unbalanced: the excess of one side is donated to the pool
        deposit(pool, owner, token1, token2, 5 * E18, 1 * E18)
        shares = pool.mint(router, owner)

        assert shares == supply // 10

    def test_first_deposit_below_floor_raises(self, pool, router, owner, token1, token2):
        deposit(pool, owner, token1, token2, MINIMUM_LIQUIDITY, MINIMUM_LIQUIDITY)

        with pytest.raises(InsufficientLiquidityMinted):
            pool.mint(router, owner)

    def test_reserves_zero_iff_supply_zero(self, pool):
        assert pool.total_supply == 0
        assert pool.reserves_snapshot() == (0, 0)

    def test_mint_emits_event(self, kernel, pool, router, owner, token1, token2):
        deposit(pool, owner, token1, token2, POOL_DEPOSIT, POOL_DEPOSIT)
        pool.mint(router, owner)

        event = kernel.ledger.events_named("LiquidityMinted")[-1]
        assert event.emitter == pool.address
        assert event.args["shares"] == POOL_DEPOSIT - MINIMUM_LIQUIDITY

    def test_reserve_overflow_raises(self, kernel, pool, router, owner, token1):
        whale = FungibleToken(kernel.ledger, owner, "WHALE", "WHALE", MAX_RESERVE + 10)
        big_pool = kernel.registry.get_or_create_pool(whale.address, token1.address)
        whale.transfer(owner, big_pool.address, MAX_RESERVE + 1)
        token1.transfer(owner, big_pool.address, E18)

        with pytest.raises(ReserveOverflow):
            big_pool.mint(router, owner)


class TestBurn:
    """Tests for share redemption."""

    def test_burn_pays_pro_rata(self, pool, router, owner, token1, token2):
        deposit(pool, owner, token1, token2, POOL_DEPOSIT, 2 * POOL_DEPOSIT)
        pool.mint(router, owner)
        shares = pool.balance_of(owner)
        before1, before2 = token1.balance_of(owner), token2.balance_of(owner)

        pool.transfer(owner, pool.address, shares)
        amount0, amount1 = pool.burn(router, owner)

        received = {
            token1.address: token1.balance_of(owner) - before1,
            token2.address: token2.balance_of(owner) - before2,
        }
        assert received[pool.token0] == amount0
        assert received[pool.token1] == amount1
        assert pool.total_supply == MINIMUM_LIQUIDITY
        # Locked shares keep a sliver of each reserve in the pool
        assert all(reserve > 0 for reserve in pool.reserves_snapshot())

    def test_burn_without_shares_raises(self, pool, router, owner, token1, token2):
        deposit(pool, owner, token1, token2, POOL_DEPOSIT, POOL_DEPOSIT)
        pool.mint(router, owner)

        with pytest.raises(InsufficientLiquidityBurned):
            pool.burn(router, owner)


class TestSwap:
    """Tests for the low-level swap entry point."""

    @pytest.fixture
    def seeded(self, pool, router, owner, token1, token2):
        deposit(pool, owner, token1, token2, POOL_DEPOSIT, POOL_DEPOSIT)
        pool.mint(router, owner)
        return pool

    def test_swap_prices_declared_input(self, seeded, router, owner, token1, token2, trader):
        token_in = token1 if seeded.token0 == token1.address else token2
        token_out = token2 if token_in is token1 else token1
        token_in.transfer(owner, seeded.address, E18)

        amount_out = seeded.swap(router, E18, 0, trader)

        assert token_out.balance_of(trader) == amount_out
        assert seeded.get_reserves(token_in.address) == (
            POOL_DEPOSIT + E18,
            POOL_DEPOSIT - amount_out,
        )

    def test_k_never_decreases(self, seeded, router, owner, token1, token2):
        k = seeded.k
        for i in range(6):
            token = token1 if i % 2 == 0 else token2
            token.transfer(owner, seeded.address, (i + 1) * E18)
            if token.address == seeded.token0:
                seeded.swap(router, (i + 1) * E18, 0, owner)
            else:
                seeded.swap(router, 0, (i + 1) * E18, owner)
            assert seeded.k >= k
            k = seeded.k

    def test_both_sides_raises(self, seeded, router, owner):
        with pytest.raises(InvalidSwapInput):
            seeded.swap(router, 1, 1, owner)

    def test_no_input_raises(self, seeded, router, owner):
        with pytest.raises(InsufficientInputAmount):
            seeded.swap(router, 0, 0, owner)

    def test_undelivered_input_raises(self, seeded, router, owner):
        with pytest.raises(InsufficientInputAmount):
            seeded.swap(router, E18, 0, owner)

    def test_output_to_pool_token_raises(self, seeded, router, owner, token1):
        token1.transfer(owner, seeded.address, E18)
        amount0_in, amount1_in = (E18, 0) if seeded.token0 == token1.address else (0, E18)

        with pytest.raises(InvalidRecipient):
            seeded.swap(router, amount0_in, amount1_in, seeded.token0)


class TestAccessControl:
    """Only the trusted router may move pool funds."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda pool, who: pool.mint(who, who),
            lambda pool, who: pool.burn(who, who),
            lambda pool, who: pool.swap(who, 1, 0, who),
        ],
        ids=["mint", "burn", "swap"],
    )
    def test_non_router_is_forbidden(self, pool, owner, call):
        with pytest.raises(Forbidden):
            call(pool, owner)


class TestSkimSync:
    """Maintenance calls anyone may make."""

    def test_skim_sends_excess(self, pool, router, owner, trader, token1, token2):
        deposit(pool, owner, token1, token2, POOL_DEPOSIT, POOL_DEPOSIT)
        pool.mint(router, owner)
        token1.transfer(owner, pool.address, 7)

        excess = pool.skim(trader, trader)

        assert token1.balance_of(trader) == 7
        assert sorted(excess) == [0, 7]
        assert pool.reserves_snapshot() == (POOL_DEPOSIT, POOL_DEPOSIT)
        assert pool.ledger.events_named("ExcessSkimmed")[-1].args["sender"] == trader

    def test_skim_without_excess_moves_nothing(self, pool, router, owner, trader, token1, token2):
        deposit(pool, owner, token1, token2, POOL_DEPOSIT, POOL_DEPOSIT)
        pool.mint(router, owner)

        assert pool.skim(trader, trader) == (0, 0)
        assert token1.balance_of(trader) == 0

    def test_sync_absorbs_excess(self, pool, router, owner, trader, token1, token2):
        deposit(pool, owner, token1, token2, POOL_DEPOSIT, POOL_DEPOSIT)
        pool.mint(router, owner)
        token1.transfer(owner, pool.address, 7)

        pool.sync(trader)

        assert pool.get_reserves(token1.address) == (POOL_DEPOSIT + 7, POOL_DEPOSIT)
