"""In-process host ledger.

The ledger stands in for the host chain: it owns the clock, native currency
balances, the set of deployed contracts and the event log. Every state
transition runs inside `atomic()`, which restores all contract state and
native balances if the transition raises.

The ledger is single-threaded. Callers that share one ledger between threads
must serialize access themselves.
"""

from __future__ import annotations

import copy
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

import structlog

from ammkernel.errors import InsufficientBalance, UnknownContract, ZeroAddress
from ammkernel.ledger.identity import account_address, contract_address
from ammkernel.models.types import normalize_address

logger = structlog.get_logger()

ContractT = TypeVar("ContractT", bound="Contract")


@dataclass(frozen=True)
class Event:
    """An event emitted by a contract during a state transition."""

    name: str
    emitter: str
    args: dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0


class Contract:
    """Base class for anything deployed on the ledger.

    Subclasses list the attributes holding their mutable state in
    `_state_fields`. Those attributes must be flat containers (dicts keyed by
    immutable values, lists or sets of immutable values) or immutable values,
    so a shallow copy is a complete snapshot.
    """

    _state_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, ledger: Ledger, deployer: str, address: str | None = None) -> None:
        self.ledger = ledger
        self.deployer = normalize_address(deployer)
        self.address = ledger.register(self, self.deployer, address)

    def _snapshot(self) -> dict[str, Any]:
        return {name: copy.copy(getattr(self, name)) for name in self._state_fields}

    def _restore(self, snapshot: dict[str, Any]) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)

    def emit(self, name: str, **args: Any) -> None:
        """Append an event attributed to this contract."""
        self.ledger.emit(name, self.address, **args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"


@dataclass
class _Snapshot:
    native: dict[str, int]
    contracts: dict[str, Contract]
    nonces: dict[str, int]
    event_count: int
    states: dict[str, dict[str, Any]]


class Ledger:
    """Totally ordered state host for the kernel.

    Args:
        timestamp: Initial ledger time in seconds. Defaults to wall clock time.
    """

    def __init__(self, timestamp: int | None = None) -> None:
        self.timestamp = int(time.time()) if timestamp is None else timestamp
        self.events: list[Event] = []
        self._native: dict[str, int] = {}
        self._contracts: dict[str, Contract] = {}
        self._nonces: dict[str, int] = {}
        self._depth = 0

    # --- Clock ---

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new timestamp."""
        if seconds < 0:
            raise ValueError(f"Cannot move the clock backwards: {seconds}")
        self.timestamp += seconds
        return self.timestamp

    # --- Identities ---

    def create_account(self, label: str, native_balance: int = 0) -> str:
        """Create an individually held account, optionally funded with native currency."""
        address = account_address(label)
        if native_balance:
            self.mint_native(address, native_balance)
        return address

    def register(self, contract: Contract, deployer: str, address: str | None = None) -> str:
        """Assign an identity to a newly deployed contract."""
        if address is None:
            nonce = self._nonces.get(deployer, 0)
            self._nonces[deployer] = nonce + 1
            address = contract_address(deployer, nonce)
        address = normalize_address(address)
        if address in self._contracts:
            raise ValueError(f"Identity already deployed: {address}")
        self._contracts[address] = contract
        logger.debug(
            "contract_deployed",
            kind=type(contract).__name__,
            address=address[-8:],
            deployer=deployer[-8:],
        )
        return address

    def is_contract(self, address: str) -> bool:
        """True if a contract is deployed at the identity."""
        return normalize_address(address) in self._contracts

    def get_contract(self, address: str, kind: type[ContractT]) -> ContractT:
        """Resolve an identity to a deployed contract of the expected kind.

        Raises:
            UnknownContract: If nothing of that kind is deployed there
        """
        contract = self._contracts.get(normalize_address(address))
        if not isinstance(contract, kind):
            raise UnknownContract(f"No {kind.__name__} deployed at {address}")
        return contract

    # --- Native currency ---

    def native_balance_of(self, address: str) -> int:
        return self._native.get(normalize_address(address), 0)

    def mint_native(self, address: str, amount: int) -> None:
        """Credit native currency out of thin air (genesis allocation)."""
        if amount < 0:
            raise ValueError(f"Cannot mint a negative amount: {amount}")
        address = normalize_address(address)
        self._native[address] = self._native.get(address, 0) + amount

    def transfer_native(self, sender: str, to: str, amount: int) -> None:
        """Move native currency between identities.

        Raises:
            ZeroAddress: If the destination is the zero identity
            InsufficientBalance: If the sender holds less than `amount`
        """
        sender = normalize_address(sender)
        to = normalize_address(to)
        if int(to, 16) == 0:
            raise ZeroAddress("Native transfer to the zero address")
        if amount < 0:
            raise ValueError(f"Cannot transfer a negative amount: {amount}")
        balance = self._native.get(sender, 0)
        if balance < amount:
            raise InsufficientBalance(
                f"Native balance of {sender} is {balance}, needs {amount}"
            )
        self._native[sender] = balance - amount
        self._native[to] = self._native.get(to, 0) + amount

    # --- Events ---

    def emit(self, name: str, emitter: str, **args: Any) -> None:
        self.events.append(Event(name=name, emitter=emitter, args=args, timestamp=self.timestamp))

    def events_named(self, name: str) -> list[Event]:
        """All events with the given name, oldest first."""
        return [event for event in self.events if event.name == name]

    # --- Transactions ---

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run a state transition all-or-nothing.

        Nested scopes join the outermost one; only the outermost scope takes a
        snapshot and only it rolls back.
        """
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = self._take_snapshot()
        self._depth = 1
        try:
            yield
        except Exception as err:
            discarded = len(self.events) - snapshot.event_count
            self._restore_snapshot(snapshot)
            logger.debug(
                "transaction_reverted",
                error=type(err).__name__,
                events_discarded=discarded,
            )
            raise
        finally:
            self._depth = 0

    def _take_snapshot(self) -> _Snapshot:
        return _Snapshot(
            native=dict(self._native),
            contracts=dict(self._contracts),
            nonces=dict(self._nonces),
            event_count=len(self.events),
            states={address: c._snapshot() for address, c in self._contracts.items()},
        )

    def _restore_snapshot(self, snapshot: _Snapshot) -> None:
        self._native = snapshot.native
        self._contracts = snapshot.contracts
        self._nonces = snapshot.nonces
        del self.events[snapshot.event_count :]
        for address, state in snapshot.states.items():
            snapshot.contracts[address]._restore(state)
