"""Keccak-256 sponge (the Ethereum variant, 0x01 domain padding)."""

from __future__ import annotations

from .keccak import Keccak256, keccak256, keccak256_hex

__all__ = ["Keccak256", "keccak256", "keccak256_hex"]
