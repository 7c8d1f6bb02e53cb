"""
Rijndael block cipher with counter (CTR) and Galois/counter (GCM) modes.

Mode selection goes through `CipherMode`; see `testament.cipher.modes`.
"""

from __future__ import annotations

from .aes import AesVariant, RoundKey, encrypt_block, expand_key
from .modes import (
    CipherMode,
    GcmSealed,
    Sealed,
    compute_j0,
    ctr_decrypt,
    ctr_encrypt,
    decrypt,
    encrypt,
    gcm_decrypt,
    gcm_encrypt,
    increment_counter,
)

__all__ = [
    "AesVariant",
    "RoundKey",
    "expand_key",
    "encrypt_block",
    "CipherMode",
    "GcmSealed",
    "Sealed",
    "compute_j0",
    "increment_counter",
    "ctr_encrypt",
    "ctr_decrypt",
    "gcm_encrypt",
    "gcm_decrypt",
    "encrypt",
    "decrypt",
]
