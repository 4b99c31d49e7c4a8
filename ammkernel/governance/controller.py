"""Governance controller holding the router change request log.

The controller only records proposals. Validation against the active router
and the PENDING -> CONSUMED transition both happen in the registry when a
request is activated; the registry then hands the consumed request back to
be recorded here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ammkernel.errors import Forbidden, UnknownRequest, ZeroAddress
from ammkernel.governance.requests import RouterChangeRequest
from ammkernel.ledger import Contract
from ammkernel.models.types import normalize_address

if TYPE_CHECKING:
    from ammkernel.ledger import Ledger

logger = structlog.get_logger()


class GovernanceController(Contract):
    """Router change request log.

    Args:
        ledger: Ledger to deploy on
        deployer: Deploying identity, becomes the owner and first proposer
        registry_address: The registry allowed to record request consumption
    """

    _state_fields = ("_requests", "_proposers")

    def __init__(self, ledger: Ledger, deployer: str, registry_address: str) -> None:
        super().__init__(ledger, deployer)
        self.owner = self.deployer
        self.registry_address = normalize_address(registry_address, validate=True)
        self._requests: list[RouterChangeRequest] = []
        self._proposers: set[str] = {self.owner}

    @property
    def request_count(self) -> int:
        return len(self._requests)

    @property
    def proposers(self) -> frozenset[str]:
        return frozenset(self._proposers)

    def is_proposer(self, identity: str) -> bool:
        return normalize_address(identity) in self._proposers

    def add_proposer(self, sender: str, proposer: str) -> None:
        """Authorize `proposer` to file router change requests (owner only)."""
        self._require_owner(sender)
        proposer = normalize_address(proposer, validate=True)
        if int(proposer, 16) == 0:
            raise ZeroAddress("Proposer cannot be the zero address")
        with self.ledger.atomic():
            self._proposers.add(proposer)
        logger.info("proposer_added", proposer=proposer[-8:])

    def remove_proposer(self, sender: str, proposer: str) -> None:
        """Revoke a proposer (owner only)."""
        self._require_owner(sender)
        with self.ledger.atomic():
            self._proposers.discard(normalize_address(proposer))
        logger.info("proposer_removed", proposer=proposer[-8:])

    def new_router_change_request(self, sender: str, proposed_router: str) -> int:
        """File a request to rotate the registry's router.

        No check against the active router is made here; a request naming
        the active router is recorded and rejected on activation.

        Returns:
            The new request id (ids start at 1 and are dense)

        Raises:
            Forbidden: If the sender is not a proposer
            ZeroAddress: If the proposed router is the zero identity
        """
        if not self.is_proposer(sender):
            raise Forbidden(f"{sender} is not allowed to propose router changes")
        proposed_router = normalize_address(proposed_router, validate=True)
        if int(proposed_router, 16) == 0:
            raise ZeroAddress("Proposed router cannot be the zero address")

        with self.ledger.atomic():
            request = RouterChangeRequest(
                id=len(self._requests) + 1,
                proposed_router=proposed_router,
                proposer=normalize_address(sender),
                created_at=self.ledger.timestamp,
            )
            self._requests.append(request)
            self.emit(
                "RouterRotationRequested",
                request_id=request.id,
                proposed_router=proposed_router,
                proposer=request.proposer,
            )

        logger.info(
            "router_change_requested",
            request_id=request.id,
            proposed_router=proposed_router[-8:],
        )
        return request.id

    def get_request(self, request_id: int) -> RouterChangeRequest:
        """Look up a request by id.

        Raises:
            UnknownRequest: If no request has that id
        """
        if not 1 <= request_id <= len(self._requests):
            raise UnknownRequest(f"No router change request with id {request_id}")
        return self._requests[request_id - 1]

    def record_consumption(self, sender: str, request: RouterChangeRequest) -> None:
        """Store a request the registry has consumed (registry only)."""
        if normalize_address(sender) != self.registry_address:
            raise Forbidden("Only the registry may record request consumption")
        current = self.get_request(request.id)
        # Raises if the stored request was already consumed
        current.consume(self.ledger.timestamp)
        if not request.consumed:
            raise ValueError(f"Request {request.id} has not been consumed")
        self._requests[request.id - 1] = request

    def _require_owner(self, sender: str) -> None:
        if normalize_address(sender) != self.owner:
            raise Forbidden(f"{sender} is not the governance owner")
