"""
testament configuration loader.

Goals
-----
- Zero external deps (stdlib only).
- Layered config with clear precedence:
    1) Explicit overrides passed to `load()` (highest)
    2) Environment variables (TESTAMENT_*)
    3) Config file (TOML or JSON)
    4) Built-in defaults (lowest)
- Safe, typed dataclasses with validation.

The engine itself never reads this module: the CLI and pipeline drivers
resolve an `EngineConfig` once and pass its values down as call-time
parameters (chain id, verifying contract, estate count, widths, sizes).
"""

from __future__ import annotations

import json
import os
import re
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError

# ------------------------------
# Defaults & helpers
# ------------------------------

DEFAULT_CHAIN_ID = 31337  # local dev chain used by the circuit fixtures
MAINNET_CHAIN_ID = 1
ARBITRUM_SEPOLIA_CHAIN_ID = 421614

DEFAULT_VERIFYING_CONTRACT = "0x000000000022d473030f116ddee9f6b43ac78ba3"
DEFAULT_PROTOCOL_NAME = "Permit2"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_CIPHER_MODES = ("gcm", "ctr")
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _expand(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


def _parse_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    v = os.environ.get(name)
    if v is None or v == "":
        return default
    try:
        return int(v, 0)
    except ValueError as e:
        raise ConfigError(f"{name} must be int, got {v!r}", var=name) from e


# ------------------------------
# Typed configuration model
# ------------------------------


@dataclass
class LayoutConfig:
    """Fixed field widths of the serialized will (bytes)."""

    amount_bytes: int = 16
    nonce_bytes: int = 16
    deadline_bytes: int = 4

    def validate(self) -> None:
        for name in ("amount_bytes", "nonce_bytes", "deadline_bytes"):
            v = getattr(self, name)
            if not (1 <= v <= 32):
                raise ConfigError(f"{name} must be in [1, 32]", field=name, value=v)


@dataclass
class EngineConfig:
    chain_id: int = DEFAULT_CHAIN_ID
    verifying_contract: str = DEFAULT_VERIFYING_CONTRACT
    protocol_name: str = DEFAULT_PROTOCOL_NAME
    estate_count: int = 1
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    key_size: int = 32
    iv_size: int = 12
    cipher_mode: str = "gcm"
    log_level: str = "INFO"
    log_json: Optional[bool] = None

    def validate(self) -> None:
        if self.chain_id <= 0:
            raise ConfigError("chain_id must be positive", chain_id=self.chain_id)
        if not _ADDRESS_RE.match(self.verifying_contract):
            raise ConfigError(
                "verifying_contract must be a 0x-prefixed 20-byte hex address",
                verifying_contract=self.verifying_contract,
            )
        if not self.protocol_name:
            raise ConfigError("protocol_name must not be empty")
        if self.estate_count < 1:
            raise ConfigError("estate_count must be >= 1", estate_count=self.estate_count)
        if self.key_size not in (16, 24, 32):
            raise ConfigError("key_size must be 16, 24 or 32", key_size=self.key_size)
        if self.iv_size < 1:
            raise ConfigError("iv_size must be >= 1", iv_size=self.iv_size)
        if self.cipher_mode not in _CIPHER_MODES:
            raise ConfigError(
                f"cipher_mode must be one of {_CIPHER_MODES}", cipher_mode=self.cipher_mode
            )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError("unknown log_level", log_level=self.log_level)
        self.layout.validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ------------------------------
# File loader (TOML / JSON)
# ------------------------------


def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError("config file not found", path=str(path))
    suffix = path.suffix.lower()
    with path.open("rb") as f:
        if suffix in {".toml", ".tml"}:
            data = tomllib.load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ConfigError(f"unsupported config format: {suffix}. Use .toml or .json")
    # Allow a [testament] table or top-level keys.
    return data.get("testament", data)


def _merge_dict(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow + nested dict merge: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dict(out[k], v)
        else:
            out[k] = v
    return out


def _env_layer() -> Dict[str, Any]:
    env: Dict[str, Any] = {}
    if "TESTAMENT_CHAIN_ID" in os.environ:
        env["chain_id"] = _env_int("TESTAMENT_CHAIN_ID", DEFAULT_CHAIN_ID)
    if "TESTAMENT_VERIFYING_CONTRACT" in os.environ:
        env["verifying_contract"] = os.environ["TESTAMENT_VERIFYING_CONTRACT"].strip()
    if "TESTAMENT_PROTOCOL_NAME" in os.environ:
        env["protocol_name"] = os.environ["TESTAMENT_PROTOCOL_NAME"]
    if "TESTAMENT_ESTATE_COUNT" in os.environ:
        env["estate_count"] = _env_int("TESTAMENT_ESTATE_COUNT", 1)
    if "TESTAMENT_KEY_SIZE" in os.environ:
        env["key_size"] = _env_int("TESTAMENT_KEY_SIZE", 32)
    if "TESTAMENT_IV_SIZE" in os.environ:
        env["iv_size"] = _env_int("TESTAMENT_IV_SIZE", 12)
    if "TESTAMENT_CIPHER_MODE" in os.environ:
        env["cipher_mode"] = os.environ["TESTAMENT_CIPHER_MODE"].strip().lower()
    if "TESTAMENT_LOG_LEVEL" in os.environ:
        env["log_level"] = os.environ["TESTAMENT_LOG_LEVEL"].strip().upper()
    if "TESTAMENT_LOG_JSON" in os.environ:
        env["log_json"] = _parse_bool(os.environ["TESTAMENT_LOG_JSON"])
    return env


# ------------------------------
# Main loader
# ------------------------------


def load(config_file: Optional[str | Path] = None, **overrides: Any) -> EngineConfig:
    """
    Load the engine configuration.

    Precedence: overrides > env > file > defaults.

    Parameters
    ----------
    config_file : str | Path | None
        Optional path to a TOML or JSON file. Falls back to ``TESTAMENT_CONFIG``.
        Keys mirror `EngineConfig`, with widths nested under ``layout``.
    overrides : Any
        Keyword overrides, e.g. ``load(chain_id=1, layout={"deadline_bytes": 8})``.
    """
    base = asdict(EngineConfig())

    path = config_file or os.environ.get("TESTAMENT_CONFIG")
    if path:
        base = _merge_dict(base, _load_file(_expand(path)))

    base = _merge_dict(base, _env_layer())

    if overrides:
        base = _merge_dict(base, {k: v for k, v in overrides.items() if v is not None})

    unknown = set(base) - set(asdict(EngineConfig()))
    if unknown:
        raise ConfigError("unknown configuration keys", keys=sorted(unknown))
    layout = base.pop("layout") or {}
    try:
        cfg = EngineConfig(layout=LayoutConfig(**layout), **base)
        cfg.chain_id = int(cfg.chain_id)
        cfg.estate_count = int(cfg.estate_count)
    except (TypeError, ValueError) as e:
        raise ConfigError("malformed configuration", reason=str(e)) from e
    cfg.validate()
    return cfg


__all__ = [
    "DEFAULT_CHAIN_ID",
    "MAINNET_CHAIN_ID",
    "ARBITRUM_SEPOLIA_CHAIN_ID",
    "DEFAULT_VERIFYING_CONTRACT",
    "DEFAULT_PROTOCOL_NAME",
    "LayoutConfig",
    "EngineConfig",
    "load",
]
