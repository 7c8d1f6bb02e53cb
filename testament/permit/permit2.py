"""
Permit2 ``PermitBatchTransferFrom`` typed-data digests (EIP-712).

    tokenDigest_i   = keccak(encode(TOKEN_PERMISSIONS_TYPEHASH, token_i, amount_i))
    permissions     = keccak(tokenDigest_0 || ... || tokenDigest_k)
    batchDigest     = keccak(encode(BATCH_TYPEHASH, permissions, spender, nonce, deadline))
    domainSeparator = keccak(encode(DOMAIN_TYPEHASH, keccak(name), chainId, verifyingContract))
    digest          = keccak(0x1901 || domainSeparator || batchDigest)

The domain separator depends on the chain id and is recomputed on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Tuple

from ..abi.encoder import encode, encode_packed
from ..ecc.address import AddressLike, parse_address
from ..errors import InvalidRange
from ..hash.keccak import keccak256

TOKEN_PERMISSIONS_TYPE = "TokenPermissions(address token,uint256 amount)"
PERMIT_BATCH_TRANSFER_FROM_TYPE = (
    "PermitBatchTransferFrom(TokenPermissions[] permitted,address spender,"
    "uint256 nonce,uint256 deadline)" + TOKEN_PERMISSIONS_TYPE
)
DOMAIN_TYPE = "EIP712Domain(string name,uint256 chainId,address verifyingContract)"

TOKEN_PERMISSIONS_TYPEHASH = keccak256(TOKEN_PERMISSIONS_TYPE.encode())
PERMIT_BATCH_TRANSFER_FROM_TYPEHASH = keccak256(PERMIT_BATCH_TRANSFER_FROM_TYPE.encode())
DOMAIN_TYPEHASH = keccak256(DOMAIN_TYPE.encode())

PROTOCOL_NAME = "Permit2"
HASHED_NAME = keccak256(PROTOCOL_NAME.encode())
PERMIT2_ADDRESS = 0x000000000022D473030F116DDEE9F6B43AC78BA3
DEFAULT_CHAIN_ID = 31337

TYPED_DATA_PREFIX = b"\x19\x01"


class HasTokenAmount(Protocol):
    token: int
    amount: int


@dataclass(frozen=True)
class TokenPermissions:
    token: int
    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise InvalidRange("amount must be non-negative")


@dataclass(frozen=True)
class PermitBatch:
    permitted: Tuple[TokenPermissions, ...]
    nonce: int
    deadline: int

    @classmethod
    def of(cls, estates: Iterable[HasTokenAmount], nonce: int, deadline: int) -> "PermitBatch":
        """Build from anything carrying ``token`` and ``amount`` (estates included)."""
        return cls(
            permitted=tuple(TokenPermissions(parse_address(e.token), e.amount) for e in estates),
            nonce=nonce,
            deadline=deadline,
        )


def hash_token_permissions(permission: HasTokenAmount) -> bytes:
    return keccak256(
        encode([TOKEN_PERMISSIONS_TYPEHASH, parse_address(permission.token), permission.amount])
    )


def hash_permissions(permitted: Iterable[HasTokenAmount]) -> bytes:
    return keccak256(encode_packed(hash_token_permissions(p) for p in permitted))


def hash_permit_batch(permit: PermitBatch, spender: AddressLike) -> bytes:
    return keccak256(
        encode(
            [
                PERMIT_BATCH_TRANSFER_FROM_TYPEHASH,
                hash_permissions(permit.permitted),
                parse_address(spender),
                permit.nonce,
                permit.deadline,
            ]
        )
    )


def domain_separator(
    chain_id: int = DEFAULT_CHAIN_ID,
    verifying_contract: AddressLike = PERMIT2_ADDRESS,
    name: str = PROTOCOL_NAME,
) -> bytes:
    hashed_name = HASHED_NAME if name == PROTOCOL_NAME else keccak256(name.encode())
    return keccak256(
        encode([DOMAIN_TYPEHASH, hashed_name, chain_id, parse_address(verifying_contract)])
    )


def hash_typed_data(struct_hash: bytes, separator: bytes) -> bytes:
    return keccak256(encode_packed([TYPED_DATA_PREFIX, separator, struct_hash]))


def permit_digest(
    permit: PermitBatch,
    spender: AddressLike,
    *,
    chain_id: int = DEFAULT_CHAIN_ID,
    verifying_contract: AddressLike = PERMIT2_ADDRESS,
    name: str = PROTOCOL_NAME,
) -> bytes:
    """The 32-byte digest the testator signs."""
    return hash_typed_data(
        hash_permit_batch(permit, spender),
        domain_separator(chain_id, verifying_contract, name),
    )


__all__ = [
    "TOKEN_PERMISSIONS_TYPEHASH",
    "PERMIT_BATCH_TRANSFER_FROM_TYPEHASH",
    "DOMAIN_TYPEHASH",
    "HASHED_NAME",
    "PERMIT2_ADDRESS",
    "DEFAULT_CHAIN_ID",
    "TokenPermissions",
    "PermitBatch",
    "hash_token_permissions",
    "hash_permissions",
    "hash_permit_batch",
    "domain_separator",
    "hash_typed_data",
    "permit_digest",
]
