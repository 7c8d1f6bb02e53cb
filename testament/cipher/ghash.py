"""
GHASH over GF(2^128).

Blocks are 16-byte strings read as big-endian integers, with the GCM bit
reflection: bit 0 of the field element is the most significant bit of byte 0.
Multiplication uses the right-shift algorithm from NIST SP 800-38D with
R = 0xE1 || 0^120, so the one-element is ``80 00 .. 00``.
"""

from __future__ import annotations

from typing import Union

from ..errors import InvalidLength
from .aes import BLOCK_SIZE, RoundKey, encrypt_block

_R = 0xE1 << 120
ZERO_BLOCK = b"\x00" * BLOCK_SIZE
ONE_BLOCK = b"\x80" + b"\x00" * (BLOCK_SIZE - 1)


def _block(data: bytes, name: str) -> int:
    if len(data) != BLOCK_SIZE:
        raise InvalidLength(f"{name} must be 16 bytes, got {len(data)}", field=name)
    return int.from_bytes(data, "big")


def gf128_mul(x: bytes, y: bytes) -> bytes:
    """Product of two field elements (16-byte blocks)."""
    xi, v = _block(x, "x"), _block(y, "y")
    z = 0
    for i in range(127, -1, -1):
        if (xi >> i) & 1:
            z ^= v
        v = (v >> 1) ^ _R if v & 1 else v >> 1
    return z.to_bytes(BLOCK_SIZE, "big")


def hash_subkey(key: Union[RoundKey, bytes]) -> bytes:
    """H = E_K(0^128)."""
    return encrypt_block(ZERO_BLOCK, key)


def pad16(data: bytes) -> bytes:
    return bytes(data) + b"\x00" * (-len(data) % BLOCK_SIZE)


def ghash(h: bytes, data: bytes) -> bytes:
    """Fold block-aligned ``data`` through Y_i = (Y_{i-1} xor X_i) * H."""
    if len(data) % BLOCK_SIZE:
        raise InvalidLength("GHASH input must be block aligned", got=len(data))
    acc = ZERO_BLOCK
    for off in range(0, len(data), BLOCK_SIZE):
        block = data[off : off + BLOCK_SIZE]
        acc = gf128_mul(bytes(a ^ b for a, b in zip(acc, block)), h)
    return acc


def length_block(aad_len: int, ct_len: int) -> bytes:
    """[len(A)]_64 || [len(C)]_64 in bits."""
    return (8 * aad_len).to_bytes(8, "big") + (8 * ct_len).to_bytes(8, "big")


def auth_input(aad: bytes, ciphertext: bytes) -> bytes:
    """A || 0^v || C || 0^u || [len(A)]_64 || [len(C)]_64"""
    return pad16(aad) + pad16(ciphertext) + length_block(len(aad), len(ciphertext))


__all__ = [
    "ZERO_BLOCK",
    "ONE_BLOCK",
    "gf128_mul",
    "hash_subkey",
    "pad16",
    "ghash",
    "length_block",
    "auth_input",
]
