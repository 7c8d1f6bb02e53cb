"""
secp256k1 base field F_p, minimal pure-Python helpers.

This module provides a tiny `Fp` class with the arithmetic the curve code and
the circuit-facing checks need, plus plain-int helpers for hot paths.

It is **not** constant-time.

Features:
- Canonical modulus `P` and 32-byte big-endian (de)serialization.
- Basic ring ops: +, -, *, /, pow, neg, eq, int().
- Inversion via the extended Euclidean algorithm.
- Square root via the p = 3 (mod 4) shortcut (returns None if non-residue).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..errors import InvalidLength, InvalidRange

# secp256k1 field prime: 2^256 - 2^32 - 977
P: int = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
FP_BYTE_LEN = 32


def inv_mod(a: int, m: int) -> int:
    """Inverse of ``a`` modulo ``m`` by the extended Euclidean algorithm."""
    a %= m
    if a == 0:
        raise InvalidRange("zero has no modular inverse")
    lm, hm = 1, 0
    low, high = a, m
    while low > 1:
        r = high // low
        lm, hm = hm - lm * r, lm
        low, high = high - low * r, low
    if low != 1:
        raise InvalidRange("value is not invertible modulo m")
    return lm % m


def _to_int(x: Union[int, "Fp"]) -> int:
    return x.n if isinstance(x, Fp) else int(x)


@dataclass(frozen=True)
class Fp:
    """
    Small immutable wrapper for elements of F_p.

        a = Fp.from_int(5)
        b = Fp.from_int(7)
        c = a * b + 1
    """

    n: int  # canonical representative in [0, P)

    # --- Constructors -----------------------------------------------------

    @staticmethod
    def from_int(x: int) -> "Fp":
        return Fp(x % P)

    @staticmethod
    def from_bytes(b: bytes, *, strict: bool = True) -> "Fp":
        """
        Parse 32 big-endian bytes. With ``strict`` (default) values >= P are
        rejected instead of being reduced.
        """
        if len(b) != FP_BYTE_LEN:
            raise InvalidLength(f"field element must be {FP_BYTE_LEN} bytes, got {len(b)}")
        v = int.from_bytes(b, "big")
        if strict and v >= P:
            raise InvalidRange("field element is not canonical")
        return Fp.from_int(v)

    # --- Serialization ----------------------------------------------------

    def to_bytes(self) -> bytes:
        return self.n.to_bytes(FP_BYTE_LEN, "big")

    def to_hex(self, prefix: bool = True) -> str:
        h = self.to_bytes().hex()
        return ("0x" + h) if prefix else h

    # --- Basic number protocol -------------------------------------------

    def __int__(self) -> int:
        return self.n

    def __bool__(self) -> bool:
        return self.n != 0

    def __repr__(self) -> str:
        return f"Fp({self.to_hex()})"

    def __hash__(self) -> int:
        return hash(self.n)

    # --- Arithmetic -------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (int, Fp)):
            return False
        return self.n == _to_int(other) % P

    def __neg__(self) -> "Fp":
        return Fp(0 if self.n == 0 else P - self.n)

    def __add__(self, other: Union[int, "Fp"]) -> "Fp":
        return Fp((self.n + _to_int(other)) % P)

    __radd__ = __add__

    def __sub__(self, other: Union[int, "Fp"]) -> "Fp":
        return Fp((self.n - _to_int(other)) % P)

    def __rsub__(self, other: Union[int, "Fp"]) -> "Fp":
        return Fp((_to_int(other) - self.n) % P)

    def __mul__(self, other: Union[int, "Fp"]) -> "Fp":
        return Fp((self.n * _to_int(other)) % P)

    __rmul__ = __mul__

    def __truediv__(self, other: Union[int, "Fp"]) -> "Fp":
        return self * Fp.from_int(_to_int(other)).inv()

    def __rtruediv__(self, other: Union[int, "Fp"]) -> "Fp":
        return Fp.from_int(_to_int(other)) / self

    def __pow__(self, exponent: int) -> "Fp":
        return Fp(pow(self.n, exponent, P))

    # --- Field-specific ops ----------------------------------------------

    def inv(self) -> "Fp":
        return Fp(inv_mod(self.n, P))

    def is_square(self) -> bool:
        return self.n == 0 or pow(self.n, (P - 1) // 2, P) == 1

    def sqrt(self) -> Optional["Fp"]:
        """One square root (P = 3 mod 4, so a^((P+1)/4)), or None."""
        r = pow(self.n, (P + 1) // 4, P)
        return Fp(r) if (r * r) % P == self.n else None

    def is_odd(self) -> bool:
        return bool(self.n & 1)

    @staticmethod
    def zero() -> "Fp":
        return Fp(0)

    @staticmethod
    def one() -> "Fp":
        return Fp(1)


FP_ZERO = Fp.zero()
FP_ONE = Fp.one()

__all__ = ["P", "FP_BYTE_LEN", "inv_mod", "Fp", "FP_ZERO", "FP_ONE"]
