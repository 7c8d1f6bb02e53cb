"""
AES (Rijndael, 128-bit block) forward cipher.

- Key sizes 16/24/32 bytes -> 10/12/14 rounds (`AesVariant`)
- Key schedule produces an immutable `RoundKey` of (rounds + 1) * 4 words
- The state is 16 bytes in column-major order: byte ``r + 4*c`` is row r, column c

Only the forward direction is implemented; CTR and GCM never need the inverse
cipher. Table lookups are not constant-time, so this is a reference/oracle
implementation, not a side-channel hardened one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from ..errors import InvalidLength

BLOCK_SIZE = 16


# ---------------------------------------------------------------------------
# GF(2^8)
# ---------------------------------------------------------------------------


def xtime(a: int) -> int:
    """Multiply by x (0x02) modulo x^8 + x^4 + x^3 + x + 1."""
    a <<= 1
    if a & 0x100:
        a ^= 0x11B
    return a & 0xFF


def gf_mul(a: int, b: int) -> int:
    out = 0
    while b:
        if b & 1:
            out ^= a
        a = xtime(a)
        b >>= 1
    return out


def _build_sbox() -> Tuple[int, ...]:
    # exp/log tables over the generator 0x03
    exp, log = [0] * 255, [0] * 256
    p = 1
    for i in range(255):
        exp[i] = p
        log[p] = i
        p ^= xtime(p)
    sbox = []
    for value in range(256):
        inv = exp[(255 - log[value]) % 255] if value else 0
        s = inv
        for shift in range(1, 5):
            s ^= ((inv << shift) | (inv >> (8 - shift))) & 0xFF
        sbox.append(s ^ 0x63)
    return tuple(sbox)


SBOX: Tuple[int, ...] = _build_sbox()
RCON: Tuple[int, ...] = (0x01, 0x02, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80, 0x1B, 0x36)


class AesVariant(Enum):
    AES128 = (16, 10)
    AES192 = (24, 12)
    AES256 = (32, 14)

    @property
    def key_size(self) -> int:
        return self.value[0]

    @property
    def rounds(self) -> int:
        return self.value[1]

    @property
    def nk(self) -> int:
        return self.key_size // 4

    @classmethod
    def for_key(cls, key: bytes) -> "AesVariant":
        for variant in cls:
            if variant.key_size == len(key):
                return variant
        raise InvalidLength(
            f"AES key must be 16, 24 or 32 bytes, got {len(key)}", got=len(key)
        )


@dataclass(frozen=True)
class RoundKey:
    """Expanded key schedule. ``words`` holds (rounds + 1) * 4 four-byte words."""

    variant: AesVariant
    words: Tuple[bytes, ...]

    @property
    def rounds(self) -> int:
        return self.variant.rounds

    def round_key(self, index: int) -> bytes:
        return b"".join(self.words[4 * index : 4 * index + 4])

    def to_bytes(self) -> bytes:
        return b"".join(self.words)


# ---------------------------------------------------------------------------
# Key schedule
# ---------------------------------------------------------------------------


def sub_word(word: bytes) -> bytes:
    return bytes(SBOX[b] for b in word)


def rot_word(word: bytes) -> bytes:
    return word[1:] + word[:1]


def expand_key(key: bytes) -> RoundKey:
    key = bytes(key)
    variant = AesVariant.for_key(key)
    nk = variant.nk
    words = [key[4 * i : 4 * i + 4] for i in range(nk)]
    for i in range(nk, 4 * (variant.rounds + 1)):
        temp = words[i - 1]
        if i % nk == 0:
            temp = sub_word(rot_word(temp))
            temp = bytes((temp[0] ^ RCON[i // nk - 1],)) + temp[1:]
        elif nk > 6 and i % nk == 4:
            temp = sub_word(temp)
        words.append(bytes(a ^ b for a, b in zip(words[i - nk], temp)))
    return RoundKey(variant=variant, words=tuple(words))


# ---------------------------------------------------------------------------
# Round transform
# ---------------------------------------------------------------------------


def sub_bytes(state: bytes) -> bytes:
    return bytes(SBOX[b] for b in state)


def shift_rows(state: bytes) -> bytes:
    return bytes(state[r + 4 * ((c + r) % 4)] for c in range(4) for r in range(4))


def mix_columns(state: bytes) -> bytes:
    out = bytearray(16)
    for c in range(4):
        a0, a1, a2, a3 = state[4 * c : 4 * c + 4]
        out[4 * c + 0] = xtime(a0) ^ gf_mul(a1, 3) ^ a2 ^ a3
        out[4 * c + 1] = a0 ^ xtime(a1) ^ gf_mul(a2, 3) ^ a3
        out[4 * c + 2] = a0 ^ a1 ^ xtime(a2) ^ gf_mul(a3, 3)
        out[4 * c + 3] = gf_mul(a0, 3) ^ a1 ^ a2 ^ xtime(a3)
    return bytes(out)


def add_round_key(state: bytes, round_key: bytes) -> bytes:
    return bytes(a ^ b for a, b in zip(state, round_key))


def encrypt_block(block: bytes, key: Union[RoundKey, bytes]) -> bytes:
    """
    Encrypt one 16-byte block. ``key`` may be raw key bytes or an already
    expanded `RoundKey` (preferred when encrypting many blocks).
    """
    if len(block) != BLOCK_SIZE:
        raise InvalidLength(f"AES block must be 16 bytes, got {len(block)}", got=len(block))
    schedule = key if isinstance(key, RoundKey) else expand_key(key)
    state = add_round_key(bytes(block), schedule.round_key(0))
    for rnd in range(1, schedule.rounds):
        state = mix_columns(shift_rows(sub_bytes(state)))
        state = add_round_key(state, schedule.round_key(rnd))
    state = shift_rows(sub_bytes(state))
    return add_round_key(state, schedule.round_key(schedule.rounds))


__all__ = [
    "BLOCK_SIZE",
    "SBOX",
    "RCON",
    "AesVariant",
    "RoundKey",
    "xtime",
    "gf_mul",
    "sub_word",
    "rot_word",
    "expand_key",
    "sub_bytes",
    "shift_rows",
    "mix_columns",
    "add_round_key",
    "encrypt_block",
]
