"""Kernel error classes.

Every failure is a synchronous rejection of the current call. The ledger
rolls back all state touched by the call before the error reaches the caller.

Errors are grouped by where they are detected:
- ValidationError: malformed input, rejected before any state is read
- EconomicBoundError: slippage bounds or pool arithmetic, rejected after pricing
- GovernanceError: authorization and router rotation protocol
- CollaboratorError: token or native currency movements that failed
"""


class KernelError(Exception):
    """Base error for all kernel operations."""

    pass


# --- Input validation ---


class ValidationError(KernelError):
    """Malformed input rejected before any state read."""

    pass


class IdenticalAddresses(ValidationError):
    """A token pair must consist of two different tokens."""

    pass


class ZeroAddress(ValidationError):
    """The zero identity is not accepted here."""

    pass


class Expired(ValidationError):
    """The caller supplied deadline is earlier than the current ledger time."""

    pass


class InvalidPath(ValidationError):
    """Swap path is too short, repeats a token, or has the wrong native end."""

    pass


class InvalidRecipient(ValidationError):
    """Output cannot be sent to one of the pool's own tokens."""

    pass


class InsufficientAmount(ValidationError):
    """A quote was requested for a zero amount."""

    pass


class InsufficientLiquidity(ValidationError):
    """Pool reserves are empty or cannot cover the requested output."""

    pass


class InsufficientInputAmount(ValidationError):
    """No input was provided, or the declared input never reached the pool."""

    pass


class InvalidSwapInput(ValidationError):
    """A swap may take input on one side only."""

    pass


class PoolNotFound(ValidationError):
    """No pool exists for the token pair."""

    pass


class PoolExists(ValidationError):
    """A pool for the token pair was already created."""

    pass


class UnknownContract(ValidationError):
    """The identity does not belong to a deployed contract of the expected kind."""

    pass


# --- Economic bounds ---


class EconomicBoundError(KernelError):
    """Pricing produced a result outside the caller's bounds or pool limits."""

    pass


class InsufficientAAmount(EconomicBoundError):
    """Amount of token A is below the caller's minimum."""

    pass


class InsufficientBAmount(EconomicBoundError):
    """Amount of token B is below the caller's minimum."""

    pass


class InsufficientOutputAmount(EconomicBoundError):
    """Output is below the caller's minimum, or the pool cannot supply it."""

    pass


class ExcessiveInputAmount(EconomicBoundError):
    """Required input exceeds the caller's maximum."""

    pass


class InsufficientLiquidityMinted(EconomicBoundError):
    """A deposit would mint zero shares."""

    pass


class InsufficientLiquidityBurned(EconomicBoundError):
    """A redemption would pay out zero of one token."""

    pass


class InvariantViolation(EconomicBoundError):
    """The fee-adjusted reserve product would decrease."""

    pass


class ReserveOverflow(EconomicBoundError):
    """A balance no longer fits in a pool reserve slot."""

    pass


# --- Governance ---


class GovernanceError(KernelError):
    """Authorization or router rotation protocol violation."""

    pass


class Forbidden(GovernanceError):
    """The sender does not hold the role required for this call."""

    pass


class AlreadySet(GovernanceError):
    """The governance authority can only be set once."""

    pass


class NotAContract(GovernanceError):
    """The governance authority must be a contract, not an individually held key."""

    pass


class GovernanceAuthorityUnset(GovernanceError):
    """Router rotation requires a governance authority."""

    pass


class UnknownRequest(GovernanceError):
    """No router change request exists with this id."""

    pass


class RequestAlreadyConsumed(GovernanceError):
    """The router change request has already been activated."""

    pass


class SameAddress(GovernanceError):
    """The proposed router is already the active router."""

    pass


# --- Collaborators ---


class CollaboratorError(KernelError):
    """A token or native currency movement failed."""

    pass


class TransferFailed(CollaboratorError):
    """A transfer returned a falsy result or raised."""

    pass


class TokenError(CollaboratorError):
    """Base error raised by strict tokens."""

    pass


class InsufficientBalance(TokenError):
    """The holder does not own enough tokens."""

    pass


class InsufficientAllowance(TokenError):
    """The spender is not approved for enough tokens."""

    pass
