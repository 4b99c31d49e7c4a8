"""Governance: router change requests and their controller."""

from ammkernel.governance.controller import GovernanceController
from ammkernel.governance.requests import RequestState, RouterChangeRequest

__all__ = [
    "GovernanceController",
    "RequestState",
    "RouterChangeRequest",
]
