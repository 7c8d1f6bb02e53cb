"""
Will pipeline: format -> address -> sign -> serialize -> encrypt, and back.

Each stage takes the previous stage's value and returns a new one; nothing is
mutated in place. Chain parameters and codec widths come from an
`EngineConfig` resolved by the caller (defaults when omitted), never from the
environment.

    formatted = format_will(testator, estates)
    addressed = address_will(formatted, will_address)
    signed    = sign_will(addressed, private_key)
    blob      = serialize_will(signed)
    envelope  = encrypt_will(blob, key)

    blob      = decrypt_will(envelope, key)
    signed    = deserialize_will(blob)

Stages log at INFO with public fields only (addresses, counts, sizes). Keys,
plaintext and private keys never reach a log record.
"""

from __future__ import annotations

import time
from typing import Any, Iterable, Optional, Union

from ..cipher.modes import CipherMode, decrypt, encrypt
from ..config import EngineConfig
from ..ecc.address import AddressLike, format_address
from ..ecc.ecdsa import private_key_to_address
from ..errors import InvalidLength, InvalidRange
from ..logging import get_logger, with_fields
from ..permit.verify import PermitVerification, check_permit, sign_permit
from .codec import WillLayout, deserialize, serialize
from .entropy import generate_iv, generate_nonce, generate_salt
from .types import AddressedWill, EncryptedWill, FormattedWill, SerializedWill, SignedWill

log = get_logger(__name__)

DEFAULT_PERMIT_DURATION = 365 * 24 * 60 * 60  # seconds


def _cfg(config: Optional[EngineConfig]) -> EngineConfig:
    return config if config is not None else EngineConfig()


def _stage(name: str, **fields: Any):
    return with_fields(log, stage=name, **fields)


def compute_deadline(duration: int = DEFAULT_PERMIT_DURATION, now: Optional[int] = None) -> int:
    """Unix-seconds deadline ``duration`` seconds from ``now``."""
    if duration <= 0:
        raise InvalidRange("permit duration must be positive", duration=duration)
    return (int(time.time()) if now is None else now) + duration


def format_will(testator: AddressLike, estates: Iterable[Any]) -> FormattedWill:
    formatted = FormattedWill.of(testator, estates)
    _stage("formatted", testator=format_address(formatted.testator)).info(
        "will formatted", extra={"estates": len(formatted.estates)}
    )
    return formatted


def address_will(
    formatted: FormattedWill, will: AddressLike, *, salt: Optional[int] = None
) -> AddressedWill:
    """Attach the will-contract address; a fresh 256-bit salt is drawn if none is given."""
    addressed = AddressedWill.from_formatted(
        formatted, salt=generate_salt() if salt is None else salt, will=will
    )
    _stage("addressed", will=format_address(addressed.will)).info("will addressed")
    return addressed


def sign_will(
    addressed: AddressedWill,
    private_key: int,
    *,
    nonce: Optional[int] = None,
    deadline: Optional[int] = None,
    config: Optional[EngineConfig] = None,
) -> SignedWill:
    """
    Sign the Permit2 batch transfer that hands every estate's tokens to the
    will contract. The key must belong to the testator.
    """
    cfg = _cfg(config)
    if private_key_to_address(private_key) != addressed.testator:
        raise InvalidRange("private key does not belong to the testator", field="private_key")
    if nonce is None:
        nonce = generate_nonce(cfg.layout.nonce_bytes)
    if deadline is None:
        deadline = compute_deadline()
    signature = sign_permit(
        private_key,
        addressed.estates,
        nonce,
        deadline,
        addressed.will,
        chain_id=cfg.chain_id,
        verifying_contract=cfg.verifying_contract,
        name=cfg.protocol_name,
    )
    signed = SignedWill.from_addressed(addressed, nonce=nonce, deadline=deadline, signature=signature)
    _stage("signed", will=format_address(signed.will)).info(
        "will signed", extra={"chain_id": cfg.chain_id, "deadline": deadline}
    )
    return signed


def verify_will(signed: SignedWill, *, config: Optional[EngineConfig] = None) -> PermitVerification:
    """Check that the will's signature authorizes its estates for its will address."""
    cfg = _cfg(config)
    result = check_permit(
        signed.testator,
        signed.estates,
        signed.nonce,
        signed.deadline,
        signed.will,
        signed.signature,
        chain_id=cfg.chain_id,
        verifying_contract=cfg.verifying_contract,
        name=cfg.protocol_name,
    )
    _stage("verified", will=format_address(signed.will)).debug(
        "permit checked", extra={"reason": result.reason, "chain_id": cfg.chain_id}
    )
    return result


def serialize_will(signed: SignedWill, *, config: Optional[EngineConfig] = None) -> SerializedWill:
    cfg = _cfg(config)
    layout = WillLayout.from_config(cfg, estate_count=len(signed.estates))
    data = serialize(signed, layout)
    _stage("serialized", will=format_address(signed.will)).info(
        "will serialized", extra={"bytes": len(data), "estates": layout.estate_count}
    )
    return SerializedWill(data=data, estate_count=layout.estate_count)


def encrypt_will(
    serialized: SerializedWill,
    key: bytes,
    *,
    mode: Union[CipherMode, str, None] = None,
    iv: Optional[bytes] = None,
    aad: bytes = b"",
    timestamp: Optional[int] = None,
    config: Optional[EngineConfig] = None,
) -> EncryptedWill:
    cfg = _cfg(config)
    mode = CipherMode.parse(mode if mode is not None else cfg.cipher_mode)
    if len(key) != cfg.key_size:
        raise InvalidLength(f"key must be {cfg.key_size} bytes, got {len(key)}")
    if iv is None:
        iv = generate_iv(cfg.iv_size)
    sealed = encrypt(mode, serialized.data, key, iv, aad)
    envelope = EncryptedWill(
        mode=mode,
        ciphertext=sealed.ciphertext,
        iv=bytes(iv),
        auth_tag=sealed.tag,
        timestamp=int(time.time()) if timestamp is None else timestamp,
    )
    _stage("encrypted").info(
        "will encrypted", extra={"mode": mode.value, "bytes": len(envelope.ciphertext)}
    )
    return envelope


def decrypt_will(
    encrypted: EncryptedWill,
    key: bytes,
    *,
    aad: bytes = b"",
    config: Optional[EngineConfig] = None,
) -> SerializedWill:
    """
    Decrypt an envelope. In GCM mode the tag is checked before any plaintext
    is produced (`AuthenticationFailure` otherwise). The estate count is
    inferred from the plaintext length.
    """
    cfg = _cfg(config)
    data = decrypt(encrypted.mode, encrypted.ciphertext, key, encrypted.iv, encrypted.auth_tag, aad)
    layout = WillLayout.for_length(
        len(data),
        amount_bytes=cfg.layout.amount_bytes,
        nonce_bytes=cfg.layout.nonce_bytes,
        deadline_bytes=cfg.layout.deadline_bytes,
    )
    _stage("decrypted").info(
        "will decrypted", extra={"mode": encrypted.mode.value, "bytes": len(data)}
    )
    return SerializedWill(data=data, estate_count=layout.estate_count)


def deserialize_will(
    serialized: Union[SerializedWill, bytes], *, config: Optional[EngineConfig] = None
) -> SignedWill:
    cfg = _cfg(config)
    if isinstance(serialized, SerializedWill):
        layout = WillLayout.from_config(cfg, estate_count=serialized.estate_count)
        data = serialized.data
    else:
        layout = WillLayout.from_config(cfg)
        data = bytes(serialized)
    signed = deserialize(data, layout)
    _stage("deserialized", will=format_address(signed.will)).info(
        "will deserialized", extra={"estates": len(signed.estates)}
    )
    return signed


__all__ = [
    "DEFAULT_PERMIT_DURATION",
    "compute_deadline",
    "format_will",
    "address_will",
    "sign_will",
    "verify_will",
    "serialize_will",
    "encrypt_will",
    "decrypt_will",
    "deserialize_will",
]
