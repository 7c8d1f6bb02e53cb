"""
testament.utils.bytes
=====================

Dependency-free helpers around byte handling:

- Hex helpers: to_hex/from_hex, 0x-prefix management
- Integer conversion: int_to_be (raises `InvalidRange`)

Examples
--------
>>> to_hex(b"\\x01\\x02")
'0x0102'
>>> from_hex('0xdeadbeef')
b'\\xde\\xad\\xbe\\xef'
>>> int_to_be(258, length=3)
b'\\x00\\x01\\x02'
"""

from __future__ import annotations

from typing import Union

from ..errors import InvalidRange

BytesLike = Union[bytes, bytearray, memoryview]


# -----------------------
# Basic bytes/hex helpers
# -----------------------


def strip0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_hex(data: BytesLike, *, prefix: bool = True) -> str:
    """Return lowercase hex string of data."""
    if isinstance(data, (bytearray, memoryview)):
        data = bytes(data)
    if not isinstance(data, bytes):
        raise TypeError("to_hex expects bytes-like")
    h = data.hex()
    return f"0x{h}" if prefix else h


def from_hex(h: str) -> bytes:
    """Parse hex string with or without 0x prefix; ignores surrounding whitespace."""
    if not isinstance(h, str):
        raise TypeError("from_hex expects str")
    h = strip0x(h.strip().replace(" ", ""))
    if len(h) % 2 == 1:  # pad leading zero if odd length
        h = "0" + h
    try:
        return bytes.fromhex(h)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


# -------------------------
# Integer -> big-endian bytes
# -------------------------


def int_to_be(x: int, *, length: int | None = None, name: str = "value") -> bytes:
    if x < 0:
        raise InvalidRange(f"{name} must be non-negative", field=name)
    if length is None:
        length = max(1, (x.bit_length() + 7) // 8)
    elif x.bit_length() > 8 * length:
        raise InvalidRange(f"{name} does not fit in {length} bytes", field=name, width=length)
    return x.to_bytes(length, "big")


__all__ = [
    "BytesLike",
    "strip0x",
    "to_hex",
    "from_hex",
    "int_to_be",
]
