"""
Ethereum-style 20-byte addresses.

Addresses travel through the engine as plain ints below 2^160. This module
converts them to and from their textual forms and derives them from public
keys (low 20 bytes of keccak256(x32 || y32)).
"""

from __future__ import annotations

from typing import Union

from ..errors import InvalidLength, InvalidRange
from ..hash.keccak import keccak256
from ..utils.bytes import strip0x
from .secp256k1 import Point

ADDRESS_SIZE = 20
ADDRESS_LIMIT = 1 << 160

AddressLike = Union[int, str, bytes, bytearray]


def parse_address(value: AddressLike) -> int:
    """Accept 0x-hex (any case), 20 raw bytes or an int; return the 160-bit int."""
    if isinstance(value, bool):
        raise TypeError("address cannot be a bool")
    if isinstance(value, int):
        if not (0 <= value < ADDRESS_LIMIT):
            raise InvalidRange("address must be a 160-bit unsigned value")
        return value
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_SIZE:
            raise InvalidLength(f"address must be {ADDRESS_SIZE} bytes, got {len(value)}")
        return int.from_bytes(value, "big")
    if isinstance(value, str):
        h = strip0x(value.strip())
        if len(h) != 2 * ADDRESS_SIZE:
            raise InvalidLength(f"address must be 40 hex digits, got {len(h)}", value=value)
        try:
            return int(h, 16)
        except ValueError as e:
            raise InvalidRange("address is not hex", value=value) from e
    raise TypeError(f"unsupported address type: {type(value)!r}")


def address_to_bytes(address: AddressLike) -> bytes:
    return parse_address(address).to_bytes(ADDRESS_SIZE, "big")


def format_address(address: AddressLike) -> str:
    """Lowercase 0x-prefixed form."""
    return "0x" + address_to_bytes(address).hex()


def to_checksum_address(address: AddressLike) -> str:
    """EIP-55 mixed-case checksum encoding."""
    h = address_to_bytes(address).hex()
    digest = keccak256(h.encode("ascii")).hex()
    return "0x" + "".join(
        c.upper() if c.isalpha() and int(digest[i], 16) >= 8 else c
        for i, c in enumerate(h)
    )


def addresses_equal(a: AddressLike, b: AddressLike) -> bool:
    """Case-insensitive comparison of two addresses in any accepted form."""
    return parse_address(a) == parse_address(b)


def public_key_to_address(point: Point) -> int:
    return int.from_bytes(keccak256(point.to_bytes())[-ADDRESS_SIZE:], "big")


__all__ = [
    "ADDRESS_SIZE",
    "AddressLike",
    "parse_address",
    "address_to_bytes",
    "format_address",
    "to_checksum_address",
    "addresses_equal",
    "public_key_to_address",
]
