"""
Fixed-width will codec.

Layout (big-endian, no delimiters, no length prefixes)::

    testator      20
    estates       k x (beneficiary 20 | token 20 | amount A)
    salt          32
    will          20
    nonce         N
    deadline      D
    signature     65   (r 32 | s 32 | v 1)

A = 16, N = 16 and D = 4 by default, which gives 20 + 56k + 137 bytes
(269 for two estates). The estate count is not encoded: it is a parameter of
the circuit, so `deserialize` must be told which count to expect and rejects
any input whose length differs from `WillLayout.total_length`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..ecc.address import ADDRESS_SIZE
from ..ecc.ecdsa import SIGNATURE_SIZE, Signature
from ..errors import DeserializationError, InvalidLength, InvalidRange, SerializationError
from ..utils.bytes import from_hex, int_to_be
from .types import Estate, SignedWill

SALT_SIZE = 32


@dataclass(frozen=True)
class WillLayout:
    estate_count: int = 1
    amount_bytes: int = 16
    nonce_bytes: int = 16
    deadline_bytes: int = 4

    def __post_init__(self) -> None:
        if self.estate_count < 1:
            raise InvalidRange("estate_count must be >= 1", estate_count=self.estate_count)
        for name in ("amount_bytes", "nonce_bytes", "deadline_bytes"):
            if not (1 <= getattr(self, name) <= 32):
                raise InvalidRange(f"{name} must be in [1, 32]", field=name)

    @classmethod
    def from_config(cls, cfg, estate_count: Optional[int] = None) -> "WillLayout":
        """Build from an `EngineConfig` (its ``estate_count`` unless overridden)."""
        return cls(
            estate_count=estate_count if estate_count is not None else cfg.estate_count,
            amount_bytes=cfg.layout.amount_bytes,
            nonce_bytes=cfg.layout.nonce_bytes,
            deadline_bytes=cfg.layout.deadline_bytes,
        )

    @property
    def estate_size(self) -> int:
        return 2 * ADDRESS_SIZE + self.amount_bytes

    @property
    def trailer_size(self) -> int:
        return SALT_SIZE + ADDRESS_SIZE + self.nonce_bytes + self.deadline_bytes + SIGNATURE_SIZE

    @property
    def total_length(self) -> int:
        return ADDRESS_SIZE + self.estate_count * self.estate_size + self.trailer_size

    @classmethod
    def for_length(cls, length: int, **widths: int) -> "WillLayout":
        """Infer the estate count from a serialized length; `InvalidLength` if none fits."""
        probe = cls(**widths)
        body = length - ADDRESS_SIZE - probe.trailer_size
        if body <= 0 or body % probe.estate_size:
            raise InvalidLength(
                "length does not match any estate count",
                got=length,
                estate_size=probe.estate_size,
            )
        return cls(estate_count=body // probe.estate_size, **widths)


def serialize(will: SignedWill, layout: Optional[WillLayout] = None) -> bytes:
    """
    Encode ``will`` with ``layout`` (default: the 16/16/4 widths sized to the
    will's own estate count). Values wider than their slot raise `InvalidRange`.
    """
    if layout is None:
        layout = WillLayout(estate_count=len(will.estates))
    if len(will.estates) != layout.estate_count:
        raise SerializationError(
            "estate count does not match the layout",
            expected=layout.estate_count,
            got=len(will.estates),
        )
    out = bytearray(int_to_be(will.testator, length=ADDRESS_SIZE, name="testator"))
    for estate in will.estates:
        out += int_to_be(estate.beneficiary, length=ADDRESS_SIZE, name="beneficiary")
        out += int_to_be(estate.token, length=ADDRESS_SIZE, name="token")
        out += int_to_be(estate.amount, length=layout.amount_bytes, name="amount")
    out += int_to_be(will.salt, length=SALT_SIZE, name="salt")
    out += int_to_be(will.will, length=ADDRESS_SIZE, name="will")
    out += int_to_be(will.nonce, length=layout.nonce_bytes, name="nonce")
    out += int_to_be(will.deadline, length=layout.deadline_bytes, name="deadline")
    out += will.signature.to_bytes()
    if len(out) != layout.total_length:
        raise SerializationError(
            "encoded will does not match the layout length",
            expected=layout.total_length,
            got=len(out),
        )
    return bytes(out)


class _Reader:
    __slots__ = ("data", "pos")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def take(self, n: int) -> bytes:
        chunk = self.data[self.pos : self.pos + n]
        self.pos += n
        return chunk

    def uint(self, n: int) -> int:
        return int.from_bytes(self.take(n), "big")


def deserialize(data: bytes, layout: WillLayout) -> SignedWill:
    """Decode exactly ``layout.total_length`` bytes back into a `SignedWill`."""
    data = bytes(data)
    if len(data) != layout.total_length:
        raise InvalidLength(
            f"serialized will must be {layout.total_length} bytes for "
            f"{layout.estate_count} estate(s), got {len(data)}",
            expected=layout.total_length,
            got=len(data),
            estate_count=layout.estate_count,
        )
    r = _Reader(data)
    testator = r.uint(ADDRESS_SIZE)
    estates: List[Estate] = []
    for _ in range(layout.estate_count):
        beneficiary = r.uint(ADDRESS_SIZE)
        token = r.uint(ADDRESS_SIZE)
        estates.append(Estate(beneficiary, token, r.uint(layout.amount_bytes)))
    salt = r.uint(SALT_SIZE)
    will = r.uint(ADDRESS_SIZE)
    nonce = r.uint(layout.nonce_bytes)
    deadline = r.uint(layout.deadline_bytes)
    signature = Signature.from_bytes(r.take(SIGNATURE_SIZE))
    return SignedWill(
        testator,
        tuple(estates),
        salt=salt,
        will=will,
        nonce=nonce,
        deadline=deadline,
        signature=signature,
    )


def serialize_hex(will: SignedWill, layout: Optional[WillLayout] = None) -> str:
    return "0x" + serialize(will, layout).hex()


def deserialize_hex(value: str, layout: Optional[WillLayout] = None) -> SignedWill:
    """Hex variant; without a layout the estate count is inferred from the length."""
    try:
        data = from_hex(value)
    except ValueError as e:
        raise DeserializationError("serialized will is not valid hex") from e
    return deserialize(data, layout or WillLayout.for_length(len(data)))


__all__ = [
    "SALT_SIZE",
    "WillLayout",
    "serialize",
    "deserialize",
    "serialize_hex",
    "deserialize_hex",
]
