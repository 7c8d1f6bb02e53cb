"""Will value types, the fixed-width codec and the signing/encryption pipeline."""

from __future__ import annotations

from .codec import WillLayout, deserialize, deserialize_hex, serialize, serialize_hex
from .pipeline import (
    address_will,
    compute_deadline,
    decrypt_will,
    deserialize_will,
    encrypt_will,
    format_will,
    serialize_will,
    sign_will,
    verify_will,
)
from .types import (
    AddressedWill,
    EncryptedWill,
    Estate,
    FormattedWill,
    SerializedWill,
    SignedWill,
    Will,
)

__all__ = [
    "Estate",
    "FormattedWill",
    "AddressedWill",
    "SignedWill",
    "Will",
    "SerializedWill",
    "EncryptedWill",
    "WillLayout",
    "serialize",
    "deserialize",
    "serialize_hex",
    "deserialize_hex",
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
