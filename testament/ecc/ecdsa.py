"""
ECDSA over secp256k1 with public-key recovery.

Signatures are (r, s, v) with v in {27, 28} (or the bare recovery ids
{0, 1}); the 65-byte wire form is r32 || s32 || v1.

Recovery
--------
    R = lift_x(r, parity = v - 27)
    Q = r^-1 * (s*R - e*G)  (mod n)

Every malformed input (r or s outside [1, n), unknown v, r not the
x-coordinate of a curve point) raises `RecoveryFailure`; recovery never
returns a point for a signature it could not interpret.

Signing uses RFC 6979 deterministic nonces (HMAC-SHA256) and produces low-s
signatures.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Iterator, Union

from ..errors import (
    DeserializationError,
    InternalError,
    InvalidLength,
    InvalidRange,
    PointNotOnCurve,
    RecoveryFailure,
)
from ..utils.bytes import from_hex
from .address import public_key_to_address
from .secp256k1 import G, N, Point, lift_x, point_add, scalar_mult

SIGNATURE_SIZE = 65
HALF_N = N // 2
VALID_V = (0, 1, 27, 28)

DigestLike = Union[bytes, int]


def _digest_int(digest: DigestLike) -> int:
    if isinstance(digest, int):
        if not (0 <= digest < 1 << 256):
            raise InvalidRange("digest must be a 256-bit unsigned value")
        return digest
    if len(digest) != 32:
        raise InvalidLength(f"digest must be 32 bytes, got {len(digest)}")
    return int.from_bytes(digest, "big")


@dataclass(frozen=True)
class Signature:
    r: int
    s: int
    v: int

    # --- Codec -----------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes) -> "Signature":
        if len(data) != SIGNATURE_SIZE:
            raise InvalidLength(f"signature must be {SIGNATURE_SIZE} bytes, got {len(data)}")
        return cls(
            r=int.from_bytes(data[:32], "big"),
            s=int.from_bytes(data[32:64], "big"),
            v=data[64],
        )

    @classmethod
    def from_hex(cls, value: str) -> "Signature":
        try:
            raw = from_hex(value)
        except (TypeError, ValueError) as e:
            raise DeserializationError("signature is not valid hex") from e
        return cls.from_bytes(raw)

    def to_bytes(self) -> bytes:
        for name, value in (("r", self.r), ("s", self.s)):
            if not (0 <= value < 1 << 256):
                raise InvalidRange(f"{name} does not fit in 32 bytes", field=name)
        if not (0 <= self.v < 256):
            raise InvalidRange("v does not fit in one byte", v=self.v)
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + bytes((self.v,))

    def to_hex(self) -> str:
        return "0x" + self.to_bytes().hex()

    # --- Properties ------------------------------------------------------

    @property
    def recovery_id(self) -> int:
        if self.v not in VALID_V:
            raise RecoveryFailure("recovery id must be 27, 28, 0 or 1", v=self.v)
        return self.v - 27 if self.v >= 27 else self.v

    @property
    def is_low_s(self) -> bool:
        return self.s <= HALF_N

    def normalized(self) -> "Signature":
        """Flip to the low-s twin; the recovery parity flips with it."""
        if self.is_low_s:
            return self
        base = 27 if self.v >= 27 else 0
        return Signature(self.r, N - self.s, base + (self.recovery_id ^ 1))

    def validate(self) -> None:
        if not (0 < self.r < N):
            raise RecoveryFailure("r must be in [1, n)")
        if not (0 < self.s < N):
            raise RecoveryFailure("s must be in [1, n)")
        if self.v not in VALID_V:
            raise RecoveryFailure("recovery id must be 27, 28, 0 or 1", v=self.v)


# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------


def recover_public_key(digest: DigestLike, signature: Signature) -> Point:
    signature.validate()
    e = _digest_int(digest)
    try:
        big_r = lift_x(signature.r, odd=bool(signature.recovery_id))
    except PointNotOnCurve as exc:
        raise RecoveryFailure("r is not the x-coordinate of a curve point") from exc
    r_inv = pow(signature.r, -1, N)
    u1 = (-e * r_inv) % N
    u2 = (signature.s * r_inv) % N
    q = point_add(scalar_mult(u1, G), scalar_mult(u2, big_r))
    if q is None:
        raise RecoveryFailure("recovered point is the identity")
    return q


def recover_address(digest: DigestLike, signature: Signature) -> int:
    return public_key_to_address(recover_public_key(digest, signature))


# ---------------------------------------------------------------------------
# Keys, signing & verification
# ---------------------------------------------------------------------------


def _check_private_key(private_key: int) -> None:
    if not (0 < private_key < N):
        raise InvalidRange("private key must be in [1, n)")


def private_key_to_public_key(private_key: int) -> Point:
    _check_private_key(private_key)
    q = scalar_mult(private_key, G)
    if q is None:
        raise InternalError("scalar multiple of G is the identity")
    return q


def private_key_to_address(private_key: int) -> int:
    return public_key_to_address(private_key_to_public_key(private_key))


def _rfc6979_nonces(private_key: int, e: int) -> Iterator[int]:
    x = private_key.to_bytes(32, "big")
    h1 = (e % N).to_bytes(32, "big")
    v = b"\x01" * 32
    k = b"\x00" * 32
    k = hmac.new(k, v + b"\x00" + x + h1, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    k = hmac.new(k, v + b"\x01" + x + h1, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    while True:
        v = hmac.new(k, v, hashlib.sha256).digest()
        candidate = int.from_bytes(v, "big")
        if 0 < candidate < N:
            yield candidate
        k = hmac.new(k, v + b"\x00", hashlib.sha256).digest()
        v = hmac.new(k, v, hashlib.sha256).digest()


def sign(digest: DigestLike, private_key: int) -> Signature:
    """Deterministic low-s signature with v in {27, 28}."""
    _check_private_key(private_key)
    e = _digest_int(digest)
    for k in _rfc6979_nonces(private_key, e):
        big_r = scalar_mult(k, G)
        if big_r is None or big_r.x >= N:
            # recovery ids 2 and 3 have no wire encoding
            continue
        r = big_r.x
        s = pow(k, -1, N) * (e + r * private_key) % N
        if r == 0 or s == 0:
            continue
        return Signature(r, s, 27 + (big_r.y & 1)).normalized()
    raise AssertionError("unreachable")  # pragma: no cover


def verify(digest: DigestLike, signature: Signature, public_key: Point) -> bool:
    """Plain ECDSA verification. Accepts both s and its high twin n - s; v is ignored."""
    if not (0 < signature.r < N and 0 < signature.s < N):
        return False
    e = _digest_int(digest)
    w = pow(signature.s, -1, N)
    point = point_add(scalar_mult(e * w % N, G), scalar_mult(signature.r * w % N, public_key))
    return point is not None and point.x % N == signature.r


__all__ = [
    "SIGNATURE_SIZE",
    "HALF_N",
    "Signature",
    "recover_public_key",
    "recover_address",
    "private_key_to_public_key",
    "private_key_to_address",
    "sign",
    "verify",
]
