"""Token collaborators and checked transfer helpers."""

from ammkernel.tokens.token import MAX_ALLOWANCE, FungibleToken
from ammkernel.tokens.transfer import safe_transfer, safe_transfer_from, safe_transfer_native
from ammkernel.tokens.wrapped import WrappedNative

__all__ = [
    "MAX_ALLOWANCE",
    "FungibleToken",
    "WrappedNative",
    "safe_transfer",
    "safe_transfer_from",
    "safe_transfer_native",
]
