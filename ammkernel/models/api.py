"""Pydantic models for the query API.

Field names are snake_case in Python and camelCase on the wire. Amounts are
decimal strings so 256-bit values survive JSON.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from ammkernel.models.types import Address, Uint256

if TYPE_CHECKING:
    from ammkernel.amm.pool import PoolEngine
    from ammkernel.governance.requests import RouterChangeRequest
    from ammkernel.routing.types import HopPlan, SwapPlan


class PoolInfo(BaseModel):
    """Reserves and share supply of one pool."""

    address: Address
    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    total_supply: Uint256 = Field(alias="totalSupply")
    fee_bps: int = Field(alias="feeBps", description="Trading fee retained in reserves")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pool(cls, pool: PoolEngine) -> PoolInfo:
        reserve0, reserve1 = pool.reserves_snapshot()
        return cls(
            address=pool.address,
            token0=pool.token0,
            token1=pool.token1,
            reserve0=str(reserve0),
            reserve1=str(reserve1),
            total_supply=str(pool.total_supply),
            fee_bps=pool.fee_bps,
        )


class PoolList(BaseModel):
    pools: list[PoolInfo]
    count: int


class ExactInQuoteRequest(BaseModel):
    """Quote for spending exactly `amountIn` of path[0], protocol fee included."""

    amount_in: Uint256 = Field(alias="amountIn")
    path: list[Address] = Field(min_length=2)

    model_config = {"populate_by_name": True}


class ExactOutQuoteRequest(BaseModel):
    """Quote for receiving `amountOut` of path[-1]."""

    amount_out: Uint256 = Field(alias="amountOut")
    path: list[Address] = Field(min_length=2)

    model_config = {"populate_by_name": True}


class HopQuote(BaseModel):
    pool: Address
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_hop(cls, hop: HopPlan) -> HopQuote:
        return cls(
            pool=hop.pool.address,
            token_in=hop.token_in,
            token_out=hop.token_out,
            amount_in=str(hop.amount_in),
            amount_out=str(hop.amount_out),
        )


class QuoteResponse(BaseModel):
    """A staged swap as the router would execute it right now.

    Attributes:
        kind: "exact_input" or "exact_output"
        amount_in: Total the payer parts with (pool input plus protocol fee)
        pool_amount_in: Input priced by the first pool
        protocol_fee: Amount of path[0] sent to the treasury
        amount_out: Output delivered by the last pool
    """

    kind: str
    path: list[Address]
    amount_in: Uint256 = Field(alias="amountIn")
    pool_amount_in: Uint256 = Field(alias="poolAmountIn")
    protocol_fee: Uint256 = Field(alias="protocolFee")
    amount_out: Uint256 = Field(alias="amountOut")
    hops: list[HopQuote]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_plan(cls, plan: SwapPlan) -> QuoteResponse:
        return cls(
            kind=plan.kind.value,
            path=list(plan.path),
            amount_in=str(plan.amount_in),
            pool_amount_in=str(plan.pool_amount_in),
            protocol_fee=str(plan.protocol_fee),
            amount_out=str(plan.amount_out),
            hops=[HopQuote.from_hop(hop) for hop in plan.hops],
        )


class RouterInfo(BaseModel):
    """Current router pointer and the governance that controls it."""

    router: Address | None
    governance_authority: Address | None = Field(alias="governanceAuthority")
    treasury: Address
    request_count: int = Field(alias="requestCount")

    model_config = {"populate_by_name": True}


class RouterChangeRequestInfo(BaseModel):
    id: int
    proposed_router: Address = Field(alias="proposedRouter")
    proposer: Address
    state: str
    created_at: int = Field(alias="createdAt")
    consumed_at: int | None = Field(default=None, alias="consumedAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_request(cls, request: RouterChangeRequest) -> RouterChangeRequestInfo:
        return cls(
            id=request.id,
            proposed_router=request.proposed_router,
            proposer=request.proposer,
            state=request.state.value,
            created_at=request.created_at,
            consumed_at=request.consumed_at,
        )


class ErrorResponse(BaseModel):
    """Body returned for kernel errors."""

    detail: str
    error: str = Field(description="Kernel error class name")
