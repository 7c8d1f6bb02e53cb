"""Fixed-width 32-byte word encoder used to build typed-data pre-images."""

from __future__ import annotations

from .encoder import WORD_SIZE, encode, encode_packed, word

__all__ = ["WORD_SIZE", "encode", "encode_packed", "word"]
