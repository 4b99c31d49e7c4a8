"""Checked token movements used by pools and the router.

Tokens may signal failure by raising or by returning a falsy result. Both are
turned into TransferFailed so a failed movement always aborts the call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ammkernel.errors import TokenError, TransferFailed

if TYPE_CHECKING:
    from ammkernel.ledger import Ledger
    from ammkernel.tokens.token import FungibleToken


def safe_transfer(token: FungibleToken, sender: str, to: str, amount: int) -> None:
    """Transfer tokens held by `sender`.

    Raises:
        TransferFailed: If the token raised or returned a falsy result
    """
    try:
        ok = token.transfer(sender, to, amount)
    except TokenError as err:
        raise TransferFailed(f"{token.symbol}: transfer of {amount} failed: {err}") from err
    if not ok:
        raise TransferFailed(f"{token.symbol}: transfer of {amount} returned false")


def safe_transfer_from(
    token: FungibleToken,
    spender: str,
    owner: str,
    to: str,
    amount: int,
) -> None:
    """Transfer `owner`'s tokens using `spender`'s allowance.

    Raises:
        TransferFailed: If the token raised or returned a falsy result
    """
    try:
        ok = token.transfer_from(spender, owner, to, amount)
    except TokenError as err:
        raise TransferFailed(f"{token.symbol}: transfer_from of {amount} failed: {err}") from err
    if not ok:
        raise TransferFailed(f"{token.symbol}: transfer_from of {amount} returned false")


def safe_transfer_native(ledger: Ledger, sender: str, to: str, amount: int) -> None:
    """Move native currency.

    Raises:
        TransferFailed: If the ledger rejected the movement
    """
    try:
        ledger.transfer_native(sender, to, amount)
    except TokenError as err:
        raise TransferFailed(f"native transfer of {amount} failed: {err}") from err
