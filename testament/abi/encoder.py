"""
Static ABI word encoder.

``encode`` lays every value out as one 32-byte big-endian word, left-padded
with zeros, which is all the typed-data hashing in this package needs
(bytes32 type hashes, uint256 amounts/nonces/deadlines, addresses).
``encode_packed`` concatenates raw byte strings with no padding; it is only
used for the ``0x1901 || domainSeparator || structHash`` pre-image.

Accepted values
---------------
- ``int``    uint256, must be in [0, 2^256)
- ``bool``   0 or 1
- ``bytes``  at most 32 bytes, right-aligned in the word
- ``str``    0x-prefixed hex (an address or a bytes32 digest), right-aligned
"""

from __future__ import annotations

from typing import Iterable, Sequence, Union

from ..errors import InvalidLength, InvalidRange
from ..utils.bytes import from_hex

WORD_SIZE = 32
UINT256_LIMIT = 1 << 256

WordValue = Union[int, bool, bytes, bytearray, str]


def word(value: WordValue) -> bytes:
    if isinstance(value, bool):
        return int(value).to_bytes(WORD_SIZE, "big")
    if isinstance(value, int):
        if not (0 <= value < UINT256_LIMIT):
            raise InvalidRange("uint256 out of range")
        return value.to_bytes(WORD_SIZE, "big")
    if isinstance(value, str):
        if not value.startswith(("0x", "0X")):
            raise InvalidRange("string values must be 0x-prefixed hex", value=value)
        value = from_hex(value)
    if isinstance(value, (bytes, bytearray)):
        if len(value) > WORD_SIZE:
            raise InvalidLength(f"value longer than {WORD_SIZE} bytes", got=len(value))
        return bytes(value).rjust(WORD_SIZE, b"\x00")
    raise TypeError(f"cannot encode {type(value)!r} as a word")


def encode(values: Sequence[WordValue]) -> bytes:
    return b"".join(word(v) for v in values)


def encode_packed(parts: Iterable[bytes]) -> bytes:
    return b"".join(bytes(p) for p in parts)


__all__ = ["WORD_SIZE", "WordValue", "word", "encode", "encode_packed"]
