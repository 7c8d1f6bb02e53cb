"""
Witness marshalling for circuit comparison.

Builds the plain dict/list shapes the external circuit tester feeds into its
templates, so values computed here can be compared against circuit outputs
bit for bit:

- 256-bit scalars (r, s, salt, coordinates) as limb-quads, least-significant
  limb first
- digests as 256 bits (byte order kept, LSB-first within each byte)
- byte strings as lists of ints, keys also as 4-byte words

`stringify` turns every int into a decimal string, which is how the tester's
JSON input files carry field elements.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .ecc.ecdsa import Signature
from .ecc.secp256k1 import Point
from .errors import InvalidLength
from .utils.limbs import bytes_to_bits, bytes_to_words, split_limbs
from .will.types import SignedWill


def signature_witness(signature: Signature) -> Dict[str, Any]:
    return {
        "r": list(split_limbs(signature.r)),
        "s": list(split_limbs(signature.s)),
        "v": signature.v,
    }


def pubkey_witness(point: Point) -> List[List[int]]:
    x, y = point.to_limbs()
    return [list(x), list(y)]


def msghash_bits(digest: bytes) -> List[int]:
    if len(digest) != 32:
        raise InvalidLength(f"digest must be 32 bytes, got {len(digest)}")
    return bytes_to_bits(digest)


def will_witness(will: SignedWill) -> Dict[str, Any]:
    """The deserializer's outputs for ``will``."""
    return {
        "testator": will.testator,
        "estates": [
            {"beneficiary": e.beneficiary, "token": e.token, "amount": e.amount}
            for e in will.estates
        ],
        "salt": list(split_limbs(will.salt)),
        "will": will.will,
        "nonce": will.nonce,
        "deadline": will.deadline,
        "signature": signature_witness(will.signature),
    }


def cipher_witness(
    key: bytes,
    iv: bytes,
    ciphertext: bytes,
    *,
    plaintext: Optional[bytes] = None,
    auth_tag: Optional[bytes] = None,
) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "key": list(key),
        "key_words": [list(w) for w in bytes_to_words(bytes(key))],
        "iv": list(iv),
        "ciphertext": list(ciphertext),
    }
    if plaintext is not None:
        out["plaintext"] = list(plaintext)
    if auth_tag is not None:
        out["auth_tag"] = list(auth_tag)
    return out


def stringify(value: Any) -> Any:
    """Recursively render ints as decimal strings."""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    if isinstance(value, dict):
        return {k: stringify(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [stringify(v) for v in value]
    return value


__all__ = [
    "signature_witness",
    "pubkey_witness",
    "msghash_bits",
    "will_witness",
    "cipher_witness",
    "stringify",
]
