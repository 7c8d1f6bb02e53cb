"""
Version helpers for testament.

- Exposes ``__version__`` (PEP 440).
- ``TESTAMENT_VERSION`` in the environment overrides the packaged default,
  which is handy for reproducible builds of the CLI.
"""

from __future__ import annotations

import os

DEFAULT_VERSION = "0.3.0"


def get_version() -> str:
    env = os.environ.get("TESTAMENT_VERSION", "").strip()
    if env:
        return env[1:] if env.startswith("v") else env
    return DEFAULT_VERSION


__version__ = get_version()

__all__ = ["DEFAULT_VERSION", "get_version", "__version__"]
