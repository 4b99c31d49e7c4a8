"""Deployment wiring for a complete kernel."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from ammkernel.config import DEFAULT_KERNEL_CONFIG, KernelConfig
from ammkernel.governance import GovernanceController
from ammkernel.ledger import Ledger
from ammkernel.pools import Registry
from ammkernel.routing import Router
from ammkernel.tokens import WrappedNative

logger = structlog.get_logger()


@dataclass
class Kernel:
    """Handles to every contract of one deployment.

    Attributes:
        ledger: Ledger the kernel is deployed on
        deployer: Identity that deployed everything and holds the setter roles
        treasury: Protocol fee recipient
        wrapped_native: Wrapped native token bound to the router
        registry: Pool registry
        governance: Governance controller set as the registry's authority
        router: Router activated by the first rotation request
    """

    ledger: Ledger
    deployer: str
    treasury: str
    wrapped_native: WrappedNative
    registry: Registry
    governance: GovernanceController
    router: Router

    def deploy_router(self) -> Router:
        """Deploy a fresh router bound to this kernel's registry (not yet trusted)."""
        return Router(
            self.ledger,
            self.deployer,
            self.registry.address,
            self.wrapped_native.address,
        )

    def rotate_router(self, new_router: str) -> int:
        """File and activate a rotation to `new_router` as the deployer.

        Returns:
            The consumed request id
        """
        with self.ledger.atomic():
            request_id = self.governance.new_router_change_request(self.deployer, new_router)
            self.registry.set_router_address(self.deployer, request_id)
        self.router = self.ledger.get_contract(new_router, Router)
        return request_id


def deploy_kernel(
    ledger: Ledger,
    deployer: str,
    treasury: str,
    wrapped_native: WrappedNative | None = None,
    config: KernelConfig = DEFAULT_KERNEL_CONFIG,
) -> Kernel:
    """Deploy and wire a registry, governance controller and router.

    Order: registry, controller, governance authority, router, then one
    request/activation cycle that makes the router trusted. The deployer is
    the governance setter and the controller's owner.

    Args:
        ledger: Ledger to deploy on
        deployer: Deploying identity
        treasury: Protocol fee recipient
        wrapped_native: Existing wrapped native token (one is deployed if None)
        config: Pool and fee economics

    Returns:
        The deployed kernel
    """
    with ledger.atomic():
        if wrapped_native is None:
            wrapped_native = WrappedNative(ledger, deployer)
        registry = Registry(ledger, deployer, deployer, treasury, config)
        governance = GovernanceController(ledger, deployer, registry.address)
        registry.set_governance_authority_initial(deployer, governance.address)
        router = Router(ledger, deployer, registry.address, wrapped_native.address)
        request_id = governance.new_router_change_request(deployer, router.address)
        registry.set_router_address(deployer, request_id)

    logger.info(
        "kernel_deployed",
        registry=registry.address[-8:],
        governance=governance.address[-8:],
        router=router.address[-8:],
        trading_fee_bps=config.trading_fee_bps,
        protocol_fee_bps=config.protocol_fee_bps,
    )
    return Kernel(
        ledger=ledger,
        deployer=registry.deployer,
        treasury=registry.treasury_address,
        wrapped_native=wrapped_native,
        registry=registry,
        governance=governance,
        router=router,
    )


def _create_default_kernel() -> Kernel:
    """Deploy a kernel on a fresh ledger using environment configuration.

    See KernelConfig.from_env for the variables read.
    """
    ledger = Ledger()
    return deploy_kernel(
        ledger,
        deployer=ledger.create_account("deployer"),
        treasury=ledger.create_account("treasury"),
        config=KernelConfig.from_env(),
    )


_default_kernel: Kernel | None = None


def get_default_kernel() -> Kernel:
    """The process-wide kernel, deployed on first use."""
    global _default_kernel
    if _default_kernel is None:
        _default_kernel = _create_default_kernel()
    return _default_kernel
