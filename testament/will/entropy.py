"""
Random material for the will pipeline: cipher keys, IVs, salts and nonces.

All draws come from `secrets`. A draw that is entirely zero bytes is rejected
and redrawn, at most ``max_attempts`` times, after which `EntropyExhausted` is
raised. The ``source`` hook exists for tests.
"""

from __future__ import annotations

import secrets
from typing import Callable

from ..errors import EntropyExhausted, InvalidRange

DEFAULT_MAX_ATTEMPTS = 3

KEY_SIZE = 32
IV_SIZE = 12
SALT_SIZE = 32
NONCE_SIZE = 16

Source = Callable[[int], bytes]


def random_bytes(
    size: int,
    *,
    what: str = "bytes",
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    source: Source = secrets.token_bytes,
) -> bytes:
    if size < 1:
        raise InvalidRange("size must be >= 1", what=what, size=size)
    if max_attempts < 1:
        raise InvalidRange("max_attempts must be >= 1", max_attempts=max_attempts)
    for _ in range(max_attempts):
        out = source(size)
        if len(out) == size and any(out):
            return out
    raise EntropyExhausted(what, max_attempts)


def generate_key(size: int = KEY_SIZE, **kw) -> bytes:
    if size not in (16, 24, 32):
        raise InvalidRange("AES keys are 16, 24 or 32 bytes", size=size)
    return random_bytes(size, what="key", **kw)


def generate_iv(size: int = IV_SIZE, **kw) -> bytes:
    return random_bytes(size, what="iv", **kw)


def generate_salt(**kw) -> int:
    return int.from_bytes(random_bytes(SALT_SIZE, what="salt", **kw), "big")


def generate_nonce(size: int = NONCE_SIZE, **kw) -> int:
    return int.from_bytes(random_bytes(size, what="nonce", **kw), "big")


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "random_bytes",
    "generate_key",
    "generate_iv",
    "generate_salt",
    "generate_nonce",
]
