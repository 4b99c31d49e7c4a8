"""Host ledger: clock, native currency, contracts, events and transactions."""

from ammkernel.ledger.identity import account_address, contract_address, pool_address
from ammkernel.ledger.ledger import Contract, Event, Ledger

__all__ = [
    "Contract",
    "Event",
    "Ledger",
    "account_address",
    "contract_address",
    "pool_address",
]
