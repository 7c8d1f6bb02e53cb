"""Permit2 batch-transfer digests, signing and signer verification."""

from __future__ import annotations

from .permit2 import (
    DOMAIN_TYPEHASH,
    HASHED_NAME,
    PERMIT2_ADDRESS,
    PERMIT_BATCH_TRANSFER_FROM_TYPEHASH,
    TOKEN_PERMISSIONS_TYPEHASH,
    PermitBatch,
    TokenPermissions,
    domain_separator,
    hash_permit_batch,
    hash_token_permissions,
    hash_typed_data,
    permit_digest,
)
from .verify import (
    PermitVerification,
    check_permit,
    recover_signer,
    sign_permit,
    verify_permit,
)

__all__ = [
    "TOKEN_PERMISSIONS_TYPEHASH",
    "PERMIT_BATCH_TRANSFER_FROM_TYPEHASH",
    "DOMAIN_TYPEHASH",
    "HASHED_NAME",
    "PERMIT2_ADDRESS",
    "TokenPermissions",
    "PermitBatch",
    "hash_token_permissions",
    "hash_permit_batch",
    "domain_separator",
    "hash_typed_data",
    "permit_digest",
    "PermitVerification",
    "recover_signer",
    "check_permit",
    "verify_permit",
    "sign_permit",
]
