"""Read-only API endpoints over a deployed kernel."""

import threading
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Path

from ammkernel.kernel import Kernel, get_default_kernel
from ammkernel.models.api import (
    ErrorResponse,
    ExactInQuoteRequest,
    ExactOutQuoteRequest,
    PoolInfo,
    PoolList,
    QuoteResponse,
    RouterChangeRequestInfo,
    RouterInfo,
)

logger = structlog.get_logger()

router = APIRouter()

# The ledger is single-threaded; FastAPI runs sync endpoints in a thread pool
kernel_lock = threading.Lock()

# Kernel rejections, rendered by the application's error handler
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}

TokenPath = Annotated[str, Path(pattern=r"^0x[a-fA-F0-9]{40}$")]


def get_kernel() -> Kernel:
    """Dependency provider for the kernel instance.

    Override this in tests to inject a prepared kernel:
        app.dependency_overrides[get_kernel] = lambda: kernel
    """
    return get_default_kernel()


@router.get("/pools")
def list_pools(kernel: Kernel = Depends(get_kernel)) -> PoolList:
    """All pools in creation order."""
    with kernel_lock:
        pools = [PoolInfo.from_pool(pool) for pool in kernel.registry.all_pools]
    return PoolList(pools=pools, count=len(pools))


@router.get("/pools/{token_a}/{token_b}", responses=ERROR_RESPONSES)
def get_pool(
    token_a: TokenPath,
    token_b: TokenPath,
    kernel: Kernel = Depends(get_kernel),
) -> PoolInfo:
    """Pool for a token pair, in either order."""
    with kernel_lock:
        return PoolInfo.from_pool(kernel.registry.require_pool(token_a, token_b))


@router.post("/quote/exact-in", responses=ERROR_RESPONSES)
def quote_exact_in(
    request: ExactInQuoteRequest,
    kernel: Kernel = Depends(get_kernel),
) -> QuoteResponse:
    """Stage an exact-input swap against current reserves."""
    with kernel_lock:
        plan = kernel.router.quote_exact_input(int(request.amount_in), request.path)
    logger.info(
        "quote_served",
        kind=plan.kind.value,
        hops=len(plan.hops),
        amount_in=plan.amount_in,
        amount_out=plan.amount_out,
    )
    return QuoteResponse.from_plan(plan)


@router.post("/quote/exact-out", responses=ERROR_RESPONSES)
def quote_exact_out(
    request: ExactOutQuoteRequest,
    kernel: Kernel = Depends(get_kernel),
) -> QuoteResponse:
    """Stage an exact-output swap against current reserves."""
    with kernel_lock:
        plan = kernel.router.quote_exact_output(int(request.amount_out), request.path)
    logger.info(
        "quote_served",
        kind=plan.kind.value,
        hops=len(plan.hops),
        amount_in=plan.amount_in,
        amount_out=plan.amount_out,
    )
    return QuoteResponse.from_plan(plan)


@router.get("/governance/router")
def get_router(kernel: Kernel = Depends(get_kernel)) -> RouterInfo:
    """The trusted router and its governance authority."""
    with kernel_lock:
        return RouterInfo(
            router=kernel.registry.router_address,
            governance_authority=kernel.registry.governance_authority,
            treasury=kernel.registry.treasury_address,
            request_count=kernel.governance.request_count,
        )


@router.get("/governance/requests/{request_id}", responses=ERROR_RESPONSES)
def get_request(request_id: int, kernel: Kernel = Depends(get_kernel)) -> RouterChangeRequestInfo:
    """One router change request by id."""
    with kernel_lock:
        return RouterChangeRequestInfo.from_request(kernel.governance.get_request(request_id))
