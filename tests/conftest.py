"""Pytest configuration and fixtures."""

import pytest

from ammkernel import Kernel, Ledger, deploy_kernel
from ammkernel.tokens import MAX_ALLOWANCE, FungibleToken
from tests.helpers import DEADLINE_WINDOW, NATIVE_FUNDING, START_TIME, make_token


@pytest.fixture
def ledger() -> Ledger:
    """Fresh ledger with a fixed clock."""
    return Ledger(timestamp=START_TIME)


@pytest.fixture
def owner(ledger: Ledger) -> str:
    """Deployer, governance setter and liquidity provider, funded with native currency."""
    return ledger.create_account("owner", native_balance=NATIVE_FUNDING)


@pytest.fixture
def treasury(ledger: Ledger) -> str:
    """Protocol fee recipient."""
    return ledger.create_account("treasury")


@pytest.fixture
def trader(ledger: Ledger) -> str:
    """Second funded account."""
    return ledger.create_account("trader", native_balance=NATIVE_FUNDING)


@pytest.fixture
def kernel(ledger: Ledger, owner: str, treasury: str) -> Kernel:
    """Kernel deployed with default economics and its router activated."""
    return deploy_kernel(ledger, owner, treasury)


@pytest.fixture
def token1(kernel: Kernel, owner: str) -> FungibleToken:
    return make_token(kernel, owner, "MYT1")


@pytest.fixture
def token2(kernel: Kernel, owner: str) -> FungibleToken:
    return make_token(kernel, owner, "MYT2")


@pytest.fixture
def token3(kernel: Kernel, owner: str) -> FungibleToken:
    return make_token(kernel, owner, "MYT3")


@pytest.fixture
def weth(kernel: Kernel, owner: str) -> FungibleToken:
    """The kernel's wrapped native token, with the router approved for the owner."""
    kernel.wrapped_native.approve(owner, kernel.router.address, MAX_ALLOWANCE)
    return kernel.wrapped_native


@pytest.fixture
def deadline(ledger: Ledger) -> int:
    return ledger.timestamp + DEADLINE_WINDOW
