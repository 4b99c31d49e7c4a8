"""Identity and quantity types shared by the kernel and its HTTP models.

Identities travel as lowercase 0x-prefixed 20-byte hex strings. Quantities
cross the API boundary as decimal strings so that full uint256 values
survive JSON.
"""

from typing import Annotated, Any

from eth_utils import decode_hex, is_hex_address
from pydantic import BeforeValidator, Field

UINT256_MAX = 2**256 - 1


def validate_uint256(value: Any) -> str:
    """Coerce an int or decimal string into a uint256 decimal string.

    Raises:
        ValueError: For bools, non-numeric strings and out-of-range values
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"Expected an integer amount, got {type(value).__name__}")
    try:
        amount = int(value)
    except ValueError as err:
        raise ValueError(f"Amount is not a decimal integer: {value!r}") from err
    if not 0 <= amount <= UINT256_MAX:
        raise ValueError(f"Amount {value} is outside the uint256 range")
    return str(amount)


Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="Token amount as a decimal string"),
]


def is_valid_address(address: Any) -> bool:
    """True for a 0x-prefixed 20-byte hex string."""
    return isinstance(address, str) and address.startswith("0x") and is_hex_address(address)


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Lowercase an identity and make sure it carries the 0x prefix.

    With ``validate=True`` a malformed identity raises ValueError instead of
    being passed through.
    """
    normalized = address.lower()
    if not normalized.startswith("0x"):
        normalized = f"0x{normalized}"
    if validate and not is_valid_address(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized


def address_to_bytes(address: str) -> bytes:
    return decode_hex(normalize_address(address, validate=True))
