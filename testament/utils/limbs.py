"""
testament.utils.limbs
=====================

Marshalling between native integers/bytes and the shapes the circuit works
with:

- limb-quads: a 256-bit value as 4 x 64-bit limbs, least-significant limb first
- bit arrays: each byte expanded to 8 bits, least-significant bit first
- words: 4-byte groups (round-key words, key words)
- points: (x, y) pairs as two limb-quads

Arithmetic everywhere else in the engine uses Python ints; these helpers run
only at the boundary where witnesses are compared.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from ..errors import InvalidLength, InvalidRange

LIMB_COUNT = 4
LIMB_BITS = 64

Limbs = Tuple[int, ...]


def split_limbs(
    value: int,
    n: int = LIMB_COUNT,
    width: int = LIMB_BITS,
    *,
    modulus: Optional[int] = None,
) -> Limbs:
    """
    Split ``value`` into ``n`` limbs of ``width`` bits, little-limb first.

    With ``modulus`` the value is first reduced into [0, modulus), which is how
    negative intermediates are represented. Without it, negative values and
    values that do not fit in ``n * width`` bits raise `InvalidRange`.
    """
    if modulus is not None:
        value %= modulus
    if value < 0:
        raise InvalidRange("cannot split a negative value into limbs")
    if value.bit_length() > n * width:
        raise InvalidRange(
            f"value does not fit in {n} limbs of {width} bits",
            bits=value.bit_length(),
        )
    mask = (1 << width) - 1
    return tuple((value >> (width * i)) & mask for i in range(n))


def join_limbs(limbs: Sequence[int], width: int = LIMB_BITS) -> int:
    """Inverse of `split_limbs`: ``limbs[0]`` is least significant."""
    out = 0
    for i in range(len(limbs) - 1, -1, -1):
        limb = limbs[i]
        if not (0 <= limb < (1 << width)):
            raise InvalidRange(f"limb {i} out of range for width {width}", index=i)
        out = (out << width) | limb
    return out


def point_to_limbs(point: Tuple[int, int]) -> Tuple[Limbs, Limbs]:
    x, y = point
    return split_limbs(x), split_limbs(y)


def limbs_to_point(limbs: Sequence[Sequence[int]]) -> Tuple[int, int]:
    if len(limbs) != 2:
        raise InvalidLength("a point needs exactly two coordinates", got=len(limbs))
    xs, ys = limbs
    if len(xs) != LIMB_COUNT or len(ys) != LIMB_COUNT:
        raise InvalidLength("each coordinate needs exactly four limbs")
    return join_limbs(xs), join_limbs(ys)


# ---------------------------------------------------------------------------
# Bits & words
# ---------------------------------------------------------------------------


def bytes_to_bits(data: bytes) -> List[int]:
    """Expand bytes into bits, LSB first within each byte."""
    return [(byte >> i) & 1 for byte in data for i in range(8)]


def bits_to_bytes(bits: Sequence[int]) -> bytes:
    if len(bits) % 8:
        raise InvalidLength(f"bit array length must be a multiple of 8, got {len(bits)}")
    out = bytearray()
    for offset in range(0, len(bits), 8):
        value = 0
        for i in range(8):
            bit = bits[offset + i]
            if bit not in (0, 1):
                raise InvalidRange(f"bit at index {offset + i} is not 0 or 1")
            value |= bit << i
        out.append(value)
    return bytes(out)


def bytes_to_words(data: bytes) -> List[bytes]:
    if len(data) % 4:
        raise InvalidLength(f"length must be a multiple of 4, got {len(data)}")
    return [bytes(data[i : i + 4]) for i in range(0, len(data), 4)]


def words_to_bytes(words: Sequence[bytes]) -> bytes:
    return b"".join(words)


def int_to_bits(value: int, nbits: int = 256) -> List[int]:
    """Big-endian byte order, LSB-first bits: the circuit's view of a 256-bit digest."""
    if value < 0 or value.bit_length() > nbits:
        raise InvalidRange(f"value does not fit in {nbits} bits")
    return bytes_to_bits(value.to_bytes(nbits // 8, "big"))


__all__ = [
    "LIMB_COUNT",
    "LIMB_BITS",
    "Limbs",
    "split_limbs",
    "join_limbs",
    "point_to_limbs",
    "limbs_to_point",
    "bytes_to_bits",
    "bits_to_bytes",
    "bytes_to_words",
    "words_to_bytes",
    "int_to_bits",
]
