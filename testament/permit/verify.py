"""
Permit signature verification.

Two outcomes are kept apart:

- the signature was well formed but belongs to someone else: `verify_permit`
  returns False (`check_permit` returns a falsy `PermitVerification` whose
  ``reason`` is ``"mismatch"``);
- the signature could not be interpreted at all: `VerificationUnavailable` is
  raised, wrapping the underlying `RecoveryFailure` (or the `InvalidLength` of a
  truncated signature, or the `DeserializationError` of one that is not hex).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ..ecc.address import AddressLike, parse_address
from ..ecc.ecdsa import Signature, recover_address, sign
from ..errors import (
    DeserializationError,
    InvalidLength,
    RecoveryFailure,
    VerificationUnavailable,
)
from .permit2 import (
    DEFAULT_CHAIN_ID,
    PERMIT2_ADDRESS,
    PROTOCOL_NAME,
    HasTokenAmount,
    PermitBatch,
    permit_digest,
)

SignatureLike = Union[Signature, bytes, str]

MATCH = "match"
MISMATCH = "mismatch"


@dataclass(frozen=True)
class PermitVerification:
    valid: bool
    expected: int
    signer: int
    digest: bytes
    reason: str

    def __bool__(self) -> bool:
        return self.valid


def _as_signature(signature: SignatureLike) -> Signature:
    if isinstance(signature, Signature):
        return signature
    if isinstance(signature, str):
        return Signature.from_hex(signature)
    return Signature.from_bytes(bytes(signature))


def recover_signer(
    estates: Iterable[HasTokenAmount],
    nonce: int,
    deadline: int,
    spender: AddressLike,
    signature: SignatureLike,
    *,
    chain_id: int = DEFAULT_CHAIN_ID,
    verifying_contract: AddressLike = PERMIT2_ADDRESS,
    name: str = PROTOCOL_NAME,
) -> int:
    permit = PermitBatch.of(estates, nonce, deadline)
    digest = permit_digest(
        permit, spender, chain_id=chain_id, verifying_contract=verifying_contract, name=name
    )
    return recover_address(digest, _as_signature(signature))


def check_permit(
    testator: AddressLike,
    estates: Iterable[HasTokenAmount],
    nonce: int,
    deadline: int,
    spender: AddressLike,
    signature: SignatureLike,
    *,
    chain_id: int = DEFAULT_CHAIN_ID,
    verifying_contract: AddressLike = PERMIT2_ADDRESS,
    name: str = PROTOCOL_NAME,
) -> PermitVerification:
    expected = parse_address(testator)
    permit = PermitBatch.of(estates, nonce, deadline)
    digest = permit_digest(
        permit, spender, chain_id=chain_id, verifying_contract=verifying_contract, name=name
    )
    try:
        signer = recover_address(digest, _as_signature(signature))
    except (RecoveryFailure, InvalidLength, DeserializationError) as exc:
        raise VerificationUnavailable(
            "permit signature could not be recovered", chain_id=chain_id
        ).with_cause(exc) from exc
    valid = signer == expected
    return PermitVerification(
        valid=valid,
        expected=expected,
        signer=signer,
        digest=digest,
        reason=MATCH if valid else MISMATCH,
    )


def verify_permit(
    testator: AddressLike,
    estates: Iterable[HasTokenAmount],
    nonce: int,
    deadline: int,
    spender: AddressLike,
    signature: SignatureLike,
    *,
    chain_id: int = DEFAULT_CHAIN_ID,
    verifying_contract: AddressLike = PERMIT2_ADDRESS,
    name: str = PROTOCOL_NAME,
) -> bool:
    return check_permit(
        testator,
        estates,
        nonce,
        deadline,
        spender,
        signature,
        chain_id=chain_id,
        verifying_contract=verifying_contract,
        name=name,
    ).valid


def sign_permit(
    private_key: int,
    estates: Iterable[HasTokenAmount],
    nonce: int,
    deadline: int,
    spender: AddressLike,
    *,
    chain_id: int = DEFAULT_CHAIN_ID,
    verifying_contract: AddressLike = PERMIT2_ADDRESS,
    name: str = PROTOCOL_NAME,
) -> Signature:
    permit = PermitBatch.of(estates, nonce, deadline)
    digest = permit_digest(
        permit, spender, chain_id=chain_id, verifying_contract=verifying_contract, name=name
    )
    return sign(digest, private_key)


__all__ = [
    "PermitVerification",
    "recover_signer",
    "check_permit",
    "verify_permit",
    "sign_permit",
]
