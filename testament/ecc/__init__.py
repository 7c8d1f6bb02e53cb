"""secp256k1 arithmetic, ECDSA signing/verification and public-key recovery."""

from __future__ import annotations

from .address import (
    format_address,
    parse_address,
    public_key_to_address,
    to_checksum_address,
)
from .ecdsa import (
    Signature,
    private_key_to_address,
    private_key_to_public_key,
    recover_address,
    recover_public_key,
    sign,
    verify,
)
from .secp256k1 import G, N, Point, is_on_curve

__all__ = [
    "G",
    "N",
    "Point",
    "is_on_curve",
    "Signature",
    "recover_public_key",
    "recover_address",
    "private_key_to_public_key",
    "private_key_to_address",
    "sign",
    "verify",
    "parse_address",
    "format_address",
    "to_checksum_address",
    "public_key_to_address",
]
