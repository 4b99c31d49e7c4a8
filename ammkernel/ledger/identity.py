"""Deterministic identities for accounts, contracts and pools.

Identities are the last 20 bytes of a keccak hash, the same derivation the
host chain uses, so a pool's identity is known before it exists.
"""

from eth_abi import encode  # type: ignore[attr-defined]
from eth_utils import keccak

from ammkernel.models.types import address_to_bytes


def _to_address(digest: bytes) -> str:
    return "0x" + digest[-20:].hex()


def account_address(label: str) -> str:
    """Identity of an individually held key, derived from a label."""
    return _to_address(keccak(text=label))


def contract_address(deployer: str, nonce: int) -> str:
    """Identity of a contract deployed by `deployer` as its `nonce`-th deployment."""
    encoded = encode(["address", "uint256"], [address_to_bytes(deployer), nonce])
    return _to_address(keccak(encoded))


def pool_address(registry: str, token0: str, token1: str) -> str:
    """Identity of the pool for a canonically ordered token pair.

    Depends only on the registry and the pair, never on creation order.
    """
    encoded = encode(
        ["address", "address", "address"],
        [address_to_bytes(registry), address_to_bytes(token0), address_to_bytes(token1)],
    )
    return _to_address(keccak(encoded))
