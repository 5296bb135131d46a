"""
Shared primitive types: addresses and transaction hashes.
"""

from typing import Any, Optional, Union

from eth_utils.address import is_address, to_checksum_address
from hexbytes import HexBytes

Address = str
Hash = str

ZERO_ADDRESS: Address = "0x0000000000000000000000000000000000000000"
ZERO_32_BYTES = bytes(32)


def normalize_address(value: Any) -> Address:
    """
    Checksum-normalize an address.

    Raises:
        ValueError: If value is not an address
    """
    if isinstance(value, (bytes, bytearray)):
        value = HexBytes(value).to_0x_hex()
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Not an address: {value!r}")
    return to_checksum_address(value)


def optional_address(value: Optional[Any]) -> Optional[Address]:
    """Normalize an address, keeping None."""
    if value is None:
        return None
    return normalize_address(value)


def address_equals(a: Optional[Any], b: Optional[Any]) -> bool:
    """Compare two addresses after normalization; None equals nothing."""
    if a is None or b is None:
        return False
    return normalize_address(a) == normalize_address(b)


def to_hash(value: Union[bytes, str]) -> Hash:
    """Render a transaction hash as 0x-prefixed hex."""
    return HexBytes(value).to_0x_hex()
