"""
testament
=========

Reference cryptographic engine for the digital-will protocol.

Subpackages
-----------
- ``testament.hash``    Keccak-256 sponge (padding, absorb, Keccak-f[1600], squeeze)
- ``testament.cipher``  Rijndael block cipher with counter and Galois/counter modes
- ``testament.ecc``     secp256k1 arithmetic, ECDSA signing and public-key recovery
- ``testament.abi``     32-byte word encoder (standard and packed)
- ``testament.permit``  Permit2 batch-transfer digests and signer verification
- ``testament.will``    will value types, fixed-width codec and the signing pipeline
- ``testament.witness`` limb/bit marshalling for circuit comparison

Everything under ``hash``, ``cipher``, ``ecc``, ``abi``, ``permit`` and the will
codec is pure computation over in-memory values and never logs.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__"]
