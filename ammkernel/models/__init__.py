"""Pydantic models and shared identity types."""

from ammkernel.models.api import (
    ErrorResponse,
    ExactInQuoteRequest,
    ExactOutQuoteRequest,
    HopQuote,
    PoolInfo,
    PoolList,
    QuoteResponse,
    RouterChangeRequestInfo,
    RouterInfo,
)
from ammkernel.models.types import Address, Uint256, normalize_address

__all__ = [
    # Types
    "Address",
    "Uint256",
    "normalize_address",
    # API models
    "ErrorResponse",
    "ExactInQuoteRequest",
    "ExactOutQuoteRequest",
    "HopQuote",
    "PoolInfo",
    "PoolList",
    "QuoteResponse",
    "RouterChangeRequestInfo",
    "RouterInfo",
]
