"""Pool registry: pair-to-pool table plus the router and treasury pointers.

The registry is the single source of truth for which router is trusted to
move pooled funds. That pointer changes only through a two-step protocol:
the governance authority records a request, then a separate activation call
consumes it here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ammkernel.amm.pool import PoolEngine
from ammkernel.config import DEFAULT_KERNEL_CONFIG, KernelConfig
from ammkernel.errors import (
    AlreadySet,
    Forbidden,
    GovernanceAuthorityUnset,
    NotAContract,
    PoolExists,
    PoolNotFound,
    SameAddress,
    ZeroAddress,
)
from ammkernel.governance import GovernanceController
from ammkernel.ledger import Contract, pool_address
from ammkernel.models.types import normalize_address
from ammkernel.pools.types import PairKey

if TYPE_CHECKING:
    from ammkernel.ledger import Ledger

logger = structlog.get_logger()


class Registry(Contract):
    """Directory of pools and the authoritative router/treasury pointers.

    Args:
        ledger: Ledger to deploy on
        deployer: Deploying identity
        governance_setter: Identity allowed to set the governance authority once
        treasury_address: Recipient of protocol fees (fixed for the registry's lifetime)
        config: Economics handed to every pool and to the router
    """

    _state_fields = ("_pools", "_all_pools", "_router_address", "_governance_authority")

    def __init__(
        self,
        ledger: Ledger,
        deployer: str,
        governance_setter: str,
        treasury_address: str,
        config: KernelConfig = DEFAULT_KERNEL_CONFIG,
    ) -> None:
        super().__init__(ledger, deployer)
        self.governance_setter = normalize_address(governance_setter, validate=True)
        self.treasury_address = normalize_address(treasury_address, validate=True)
        if int(self.treasury_address, 16) == 0:
            raise ZeroAddress("Treasury cannot be the zero address")
        self.config = config
        self._pools: dict[PairKey, PoolEngine] = {}
        self._all_pools: list[PoolEngine] = []
        self._router_address: str | None = None
        self._governance_authority: str | None = None

    @property
    def router_address(self) -> str | None:
        """The trusted router, or None before the first activation."""
        return self._router_address

    @property
    def governance_authority(self) -> str | None:
        return self._governance_authority

    # --- Pools ---

    def get_pool(self, token_a: str, token_b: str) -> PoolEngine | None:
        """Get the pool for a token pair (order independent)."""
        return self._pools.get(PairKey.of(token_a, token_b))

    def require_pool(self, token_a: str, token_b: str) -> PoolEngine:
        """Get the pool for a token pair.

        Raises:
            PoolNotFound: If the pair has no pool
        """
        pool = self.get_pool(token_a, token_b)
        if pool is None:
            raise PoolNotFound(f"No pool for {token_a}/{token_b}")
        return pool

    def get_or_create_pool(self, token_x: str, token_y: str) -> PoolEngine:
        """Return the pair's pool, creating it on first use.

        Raises:
            IdenticalAddresses: If both tokens are the same
            ZeroAddress: If either token is the zero identity
        """
        pool = self._pools.get(PairKey.of(token_x, token_y))
        if pool is not None:
            return pool
        return self.create_pool(token_x, token_y)

    def create_pool(self, token_x: str, token_y: str) -> PoolEngine:
        """Create the pool for a new pair.

        Raises:
            IdenticalAddresses: If both tokens are the same
            ZeroAddress: If either token is the zero identity
            PoolExists: If the pair already has a pool
        """
        key = PairKey.of(token_x, token_y)
        if key in self._pools:
            raise PoolExists(f"Pool for {key.token0}/{key.token1} already exists")

        with self.ledger.atomic():
            pool = PoolEngine(
                self.ledger,
                registry=self,
                key=key,
                address=pool_address(self.address, key.token0, key.token1),
                fee_bps=self.config.trading_fee_bps,
                minimum_liquidity=self.config.minimum_liquidity,
            )
            self._pools[key] = pool
            self._all_pools.append(pool)
            self.emit(
                "PoolCreated",
                token0=key.token0,
                token1=key.token1,
                pool=pool.address,
                pool_count=len(self._all_pools),
            )

        logger.info(
            "pool_created",
            pool=pool.address[-8:],
            token0=key.token0[-8:],
            token1=key.token1[-8:],
        )
        return pool

    @property
    def all_pools(self) -> list[PoolEngine]:
        """All pools in creation order."""
        return list(self._all_pools)

    @property
    def pool_count(self) -> int:
        return len(self._all_pools)

    # --- Governance ---

    def set_governance_authority_initial(self, sender: str, authority: str) -> None:
        """Set the governance authority. Allowed once, by the governance setter.

        Raises:
            Forbidden: If the sender is not the governance setter
            AlreadySet: If an authority was already set
            ZeroAddress: If the authority is the zero identity
            NotAContract: If the authority is an individually held key
        """
        if normalize_address(sender) != self.governance_setter:
            raise Forbidden(f"{sender} is not the governance setter")
        if self._governance_authority is not None:
            raise AlreadySet("Governance authority is already set")
        authority = normalize_address(authority, validate=True)
        if int(authority, 16) == 0:
            raise ZeroAddress("Governance authority cannot be the zero address")
        if not self.ledger.is_contract(authority):
            raise NotAContract(f"Governance authority {authority} is not a contract")

        with self.ledger.atomic():
            self._governance_authority = authority
            self.emit("GovernanceAuthoritySet", authority=authority)
        logger.info("governance_authority_set", authority=authority[-8:])

    def set_router_address(self, sender: str, request_id: int) -> str:
        """Activate a router change request, making its router the trusted one.

        Returns:
            The newly trusted router

        Raises:
            GovernanceAuthorityUnset: If no governance authority is set
            UnknownRequest: If the authority has no request with that id
            RequestAlreadyConsumed: If the request was already activated
            SameAddress: If the proposed router is already the trusted router
        """
        if self._governance_authority is None:
            raise GovernanceAuthorityUnset("Set the governance authority before rotating routers")
        controller = self.ledger.get_contract(self._governance_authority, GovernanceController)
        request = controller.get_request(request_id)
        consumed = request.consume(self.ledger.timestamp)
        if request.proposed_router == self._router_address:
            raise SameAddress(f"Router is already {request.proposed_router}")

        previous = self._router_address
        with self.ledger.atomic():
            self._router_address = request.proposed_router
            controller.record_consumption(self.address, consumed)
            self.emit(
                "RouterRotationActivated",
                request_id=request.id,
                previous_router=previous,
                router=request.proposed_router,
                activated_by=normalize_address(sender),
            )

        logger.info(
            "router_rotated",
            request_id=request.id,
            previous_router=previous[-8:] if previous else None,
            router=request.proposed_router[-8:],
        )
        return request.proposed_router
