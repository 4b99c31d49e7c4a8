"""Test helpers module for shared test utilities.

- constants: Common amounts and times
- factories: Token and pool factory functions
"""

from tests.helpers.constants import (
    DEADLINE_WINDOW,
    E18,
    INITIAL_SUPPLY,
    NATIVE_FUNDING,
    POOL_DEPOSIT,
    START_TIME,
)
from tests.helpers.factories import make_token, seed_native_pool, seed_pool

__all__ = [
    # Constants
    "DEADLINE_WINDOW",
    "E18",
    "INITIAL_SUPPLY",
    "NATIVE_FUNDING",
    "POOL_DEPOSIT",
    "START_TIME",
    # Factories
    "make_token",
    "seed_native_pool",
    "seed_pool",
]
