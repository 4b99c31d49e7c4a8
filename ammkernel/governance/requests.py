"""Router change request state machine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from ammkernel.errors import RequestAlreadyConsumed


class RequestState(str, Enum):
    """Lifecycle of a router change request."""

    PENDING = "pending"
    CONSUMED = "consumed"


@dataclass(frozen=True)
class RouterChangeRequest:
    """A proposed router rotation awaiting activation.

    Immutable: activation produces a new value in the CONSUMED state.
    """

    id: int
    proposed_router: str
    proposer: str
    created_at: int
    state: RequestState = RequestState.PENDING
    consumed_at: int | None = None

    @property
    def consumed(self) -> bool:
        return self.state is RequestState.CONSUMED

    def consume(self, timestamp: int) -> RouterChangeRequest:
        """Transition PENDING -> CONSUMED.

        Raises:
            RequestAlreadyConsumed: If the request was already activated
        """
        if self.consumed:
            raise RequestAlreadyConsumed(f"Router change request {self.id} was already activated")
        return replace(self, state=RequestState.CONSUMED, consumed_at=timestamp)
