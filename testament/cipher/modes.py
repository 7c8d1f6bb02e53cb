"""
Counter and Galois/counter modes over the AES forward cipher.

J0 (pre-counter block)
----------------------
- 12-byte IV:  J0 = IV || 00 00 00 01
- other sizes: J0 = GHASH_H(IV || 0^s || 0^64 || [len(IV)]_64)

Counter
-------
Only the last four bytes of the counter block count (big-endian, mod 2^32).
The counter is incremented *before* each block is encrypted, so the first
keystream block is E_K(inc32(J0)) and E_K(J0) is reserved for the tag.

Mode dispatch goes through `CipherMode`; `encrypt`/`decrypt` handle every
member and raise `UnsupportedMode` for anything else.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..errors import AuthenticationFailure, InvalidLength, UnsupportedMode
from .aes import BLOCK_SIZE, RoundKey, encrypt_block, expand_key
from .ghash import auth_input, ghash, hash_subkey, pad16

TAG_SIZE = 16
STANDARD_IV_SIZE = 12
MAX_IV_SIZE = 1 << 16

KeyLike = Union[RoundKey, bytes]


class CipherMode(str, Enum):
    CTR = "ctr"
    GCM = "gcm"

    @classmethod
    def parse(cls, value: "str | CipherMode") -> "CipherMode":
        if isinstance(value, CipherMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedMode(value) from None


@dataclass(frozen=True)
class GcmSealed:
    ciphertext: bytes
    tag: bytes


@dataclass(frozen=True)
class Sealed:
    """Output of the mode-generic `encrypt` facade. ``tag`` is None for CTR."""

    mode: CipherMode
    ciphertext: bytes
    tag: Optional[bytes] = None


def _schedule(key: KeyLike) -> RoundKey:
    return key if isinstance(key, RoundKey) else expand_key(bytes(key))


def increment_counter(block: bytes) -> bytes:
    """inc32: bump the last four bytes mod 2^32, leave the first twelve alone."""
    if len(block) != BLOCK_SIZE:
        raise InvalidLength(f"counter block must be 16 bytes, got {len(block)}")
    ctr = (int.from_bytes(block[12:], "big") + 1) & 0xFFFFFFFF
    return bytes(block[:12]) + ctr.to_bytes(4, "big")


def compute_j0(key: KeyLike, iv: bytes) -> bytes:
    iv = bytes(iv)
    if len(iv) > MAX_IV_SIZE:
        raise InvalidLength("IV too long", got=len(iv), limit=MAX_IV_SIZE)
    if len(iv) == STANDARD_IV_SIZE:
        return iv + b"\x00\x00\x00\x01"
    h = hash_subkey(_schedule(key))
    block = pad16(iv) + b"\x00" * 8 + (8 * len(iv)).to_bytes(8, "big")
    return ghash(h, block)


def ctr_encrypt(plaintext: bytes, key: KeyLike, j0: bytes) -> bytes:
    """
    XOR ``plaintext`` with E_K(inc32^i(J0)) for i = 1, 2, ...

    A trailing partial block uses only as many keystream bytes as it needs.
    """
    if len(j0) != BLOCK_SIZE:
        raise InvalidLength(f"J0 must be 16 bytes, got {len(j0)}")
    schedule = _schedule(key)
    out = bytearray()
    counter = bytes(j0)
    for off in range(0, len(plaintext), BLOCK_SIZE):
        counter = increment_counter(counter)
        keystream = encrypt_block(counter, schedule)
        chunk = plaintext[off : off + BLOCK_SIZE]
        out.extend(a ^ b for a, b in zip(chunk, keystream))
    return bytes(out)


ctr_decrypt = ctr_encrypt


def _tag(schedule: RoundKey, j0: bytes, aad: bytes, ciphertext: bytes) -> bytes:
    s = ghash(hash_subkey(schedule), auth_input(aad, ciphertext))
    return bytes(a ^ b for a, b in zip(encrypt_block(j0, schedule), s))


def gcm_encrypt(plaintext: bytes, key: KeyLike, iv: bytes, aad: bytes = b"") -> GcmSealed:
    schedule = _schedule(key)
    j0 = compute_j0(schedule, iv)
    ciphertext = ctr_encrypt(bytes(plaintext), schedule, j0)
    return GcmSealed(ciphertext=ciphertext, tag=_tag(schedule, j0, bytes(aad), ciphertext))


def gcm_decrypt(
    ciphertext: bytes, key: KeyLike, iv: bytes, tag: bytes, aad: bytes = b""
) -> bytes:
    """
    Verify the tag first, then decrypt. On mismatch `AuthenticationFailure`
    is raised and no plaintext is produced.
    """
    if len(tag) != TAG_SIZE:
        raise InvalidLength(f"GCM tag must be {TAG_SIZE} bytes, got {len(tag)}")
    schedule = _schedule(key)
    j0 = compute_j0(schedule, iv)
    expected = _tag(schedule, j0, bytes(aad), bytes(ciphertext))
    if not hmac.compare_digest(expected, bytes(tag)):
        raise AuthenticationFailure()
    return ctr_encrypt(bytes(ciphertext), schedule, j0)


# ---------------------------------------------------------------------------
# Mode-generic facade
# ---------------------------------------------------------------------------


def encrypt(
    mode: CipherMode, plaintext: bytes, key: KeyLike, iv: bytes, aad: bytes = b""
) -> Sealed:
    if mode is CipherMode.GCM:
        sealed = gcm_encrypt(plaintext, key, iv, aad)
        return Sealed(mode=mode, ciphertext=sealed.ciphertext, tag=sealed.tag)
    if mode is CipherMode.CTR:
        schedule = _schedule(key)
        return Sealed(mode=mode, ciphertext=ctr_encrypt(plaintext, schedule, compute_j0(schedule, iv)))
    raise UnsupportedMode(mode)


def decrypt(
    mode: CipherMode,
    ciphertext: bytes,
    key: KeyLike,
    iv: bytes,
    tag: Optional[bytes] = None,
    aad: bytes = b"",
) -> bytes:
    if mode is CipherMode.GCM:
        if tag is None:
            raise InvalidLength("GCM decryption requires a 16-byte tag", got=0)
        return gcm_decrypt(ciphertext, key, iv, tag, aad)
    if mode is CipherMode.CTR:
        schedule = _schedule(key)
        return ctr_decrypt(ciphertext, schedule, compute_j0(schedule, iv))
    raise UnsupportedMode(mode)


__all__ = [
    "TAG_SIZE",
    "STANDARD_IV_SIZE",
    "CipherMode",
    "GcmSealed",
    "Sealed",
    "increment_counter",
    "compute_j0",
    "ctr_encrypt",
    "ctr_decrypt",
    "gcm_encrypt",
    "gcm_decrypt",
    "encrypt",
    "decrypt",
]
