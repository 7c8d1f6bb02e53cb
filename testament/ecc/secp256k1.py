"""
secp256k1 affine arithmetic
===========================

y^2 = x^3 + 7 over F_p, with group order n and generator G.

Public points are always finite: `Point` has no identity value. The identity
only appears transiently inside `scalar_mult`, where it is represented by
``None``.

Besides the group law, this module carries the predicate checks the circuit
uses to constrain an addition or a doubling without computing an inverse:

- `add_unequal_constraint(p1, p2, p3)`  x3 is the x-coordinate of p1 + p2
- `point_on_line(p1, p2, p3)`           p1, p2 and -p3 are collinear
- `point_on_tangent(p, q)`              q lies on the tangent line at p
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import InvalidRange, PointNotOnCurve
from ..utils.limbs import Limbs, point_to_limbs
from .field import P, Fp, inv_mod

A = 0
B = 7
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
GX = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
GY = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def to_bytes(self) -> bytes:
        """Uncompressed coordinates without the 0x04 tag: x32 || y32."""
        return self.x.to_bytes(32, "big") + self.y.to_bytes(32, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Point":
        if len(data) == 65 and data[0] == 0x04:
            data = data[1:]
        if len(data) != 64:
            raise PointNotOnCurve("public key must be 64 raw or 65 tagged bytes", got=len(data))
        pt = cls(int.from_bytes(data[:32], "big"), int.from_bytes(data[32:], "big"))
        if not is_on_curve(pt):
            raise PointNotOnCurve()
        return pt

    def to_limbs(self) -> Tuple[Limbs, Limbs]:
        return point_to_limbs((self.x, self.y))

    def __neg__(self) -> "Point":
        return Point(self.x, (-self.y) % P)


G = Point(GX, GY)


def is_on_curve(point: Point) -> bool:
    if not (0 <= point.x < P and 0 <= point.y < P):
        return False
    x, y = Fp(point.x), Fp(point.y)
    return y * y == x * x * x + B


def lift_x(x: int, odd: bool) -> Point:
    """The curve point with this x-coordinate and y-parity."""
    if not (0 <= x < P):
        raise InvalidRange("x-coordinate is not a field element")
    fx = Fp(x)
    y = (fx * fx * fx + B).sqrt()
    if y is None:
        raise PointNotOnCurve("no curve point has this x-coordinate")
    if y.is_odd() != odd:
        y = -y
    return Point(x, y.n)


# ---------------------------------------------------------------------------
# Group law
# ---------------------------------------------------------------------------


def point_double(p1: Point) -> Optional[Point]:
    if p1.y == 0:
        return None
    slope = (3 * p1.x * p1.x) * inv_mod(2 * p1.y, P) % P
    x3 = (slope * slope - 2 * p1.x) % P
    return Point(x3, (slope * (p1.x - x3) - p1.y) % P)


def point_add_unequal(p1: Point, p2: Point) -> Point:
    """Chord addition; requires distinct x-coordinates."""
    if p1.x == p2.x:
        raise InvalidRange("chord addition needs distinct x-coordinates")
    slope = (p2.y - p1.y) * inv_mod(p2.x - p1.x, P) % P
    x3 = (slope * slope - p1.x - p2.x) % P
    return Point(x3, (slope * (p1.x - x3) - p1.y) % P)


def point_add(p1: Optional[Point], p2: Optional[Point]) -> Optional[Point]:
    if p1 is None:
        return p2
    if p2 is None:
        return p1
    if p1.x == p2.x:
        if (p1.y + p2.y) % P == 0:
            return None
        return point_double(p1)
    return point_add_unequal(p1, p2)


def scalar_mult(k: int, point: Point) -> Optional[Point]:
    """Double-and-add, most significant bit first."""
    if k < 0:
        raise InvalidRange("scalar must be non-negative")
    result: Optional[Point] = None
    for bit in bin(k % N)[2:]:
        result = point_add(result, result)
        if bit == "1":
            result = point_add(result, point)
    return result


# ---------------------------------------------------------------------------
# Circuit-side predicates
# ---------------------------------------------------------------------------


def add_unequal_constraint(p1: Point, p2: Point, p3: Point) -> bool:
    """
    (x1 + x2 + x3)(x2 - x1)^2 - (y2 - y1)^2 == 0, expanded as the circuit
    writes it. Only x3 is constrained.
    """
    x1, y1, x2, y2, x3 = (Fp.from_int(v) for v in (p1.x, p1.y, p2.x, p2.y, p3.x))
    expr = (
        x1 * x1 * x1
        + x2 * x2 * x2
        - x1 * x1 * x2
        - x1 * x2 * x2
        + x2 * x2 * x3
        + x1 * x1 * x3
        - 2 * x1 * x2 * x3
        - y2 * y2
        + 2 * y1 * y2
        - y1 * y1
    )
    return expr == 0


def point_on_line(p1: Point, p2: Point, p3: Point) -> bool:
    """True if (x1, y1), (x2, y2) and (x3, -y3) are collinear."""
    if p1 == p2 or p1 == p3 or p2 == p3:
        return True
    x1, y1, x2, y2, x3, y3 = (Fp.from_int(v) for v in (p1.x, p1.y, p2.x, p2.y, p3.x, p3.y))
    return x3 * y2 + x2 * y3 + x2 * y1 - x3 * y1 - x1 * y2 - x1 * y3 == 0


def point_on_tangent(point: Point, test: Point) -> bool:
    """True if ``test`` lies on the tangent line to the curve at ``point``."""
    if not is_on_curve(point):
        return False
    if point == test:
        return True
    if point.y == 0:
        return point.x == test.x
    x, y = Fp(point.x), Fp(point.y)
    slope = (3 * x * x + A) / (2 * y)
    return Fp.from_int(test.y) == slope * (Fp.from_int(test.x) - x) + y


__all__ = [
    "A",
    "B",
    "P",
    "N",
    "G",
    "Point",
    "is_on_curve",
    "lift_x",
    "point_double",
    "point_add_unequal",
    "point_add",
    "scalar_mult",
    "add_unequal_constraint",
    "point_on_line",
    "point_on_tangent",
]
