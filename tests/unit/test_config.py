from __future__ import annotations

import json
from pathlib import Path

import pytest

from testament import config as tconfig
from testament.errors import ConfigError
from testament.will.codec import WillLayout

ENV_VARS = (
    "TESTAMENT_CONFIG",
    "TESTAMENT_CHAIN_ID",
    "TESTAMENT_VERIFYING_CONTRACT",
    "TESTAMENT_PROTOCOL_NAME",
    "TESTAMENT_ESTATE_COUNT",
    "TESTAMENT_KEY_SIZE",
    "TESTAMENT_IV_SIZE",
    "TESTAMENT_CIPHER_MODE",
    "TESTAMENT_LOG_LEVEL",
    "TESTAMENT_LOG_JSON",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    cfg = tconfig.load()
    assert cfg.chain_id == 31337
    assert cfg.verifying_contract == "0x000000000022d473030f116ddee9f6b43ac78ba3"
    assert cfg.protocol_name == "Permit2"
    assert cfg.estate_count == 1
    assert (cfg.layout.amount_bytes, cfg.layout.nonce_bytes, cfg.layout.deadline_bytes) == (16, 16, 4)
    assert (cfg.key_size, cfg.iv_size, cfg.cipher_mode) == (32, 12, "gcm")


def test_toml_file(tmp_path: Path) -> None:
    path = tmp_path / "testament.toml"
    path.write_text(
        '[testament]\nchain_id = 421614\nestate_count = 2\n\n'
        '[testament.layout]\ndeadline_bytes = 8\n'
    )
    cfg = tconfig.load(path)
    assert cfg.chain_id == 421614
    assert cfg.estate_count == 2
    assert cfg.layout.deadline_bytes == 8
    assert cfg.layout.amount_bytes == 16
    assert WillLayout.from_config(cfg).total_length == 273


def test_json_file_top_level_keys(tmp_path: Path) -> None:
    path = tmp_path / "testament.json"
    path.write_text(json.dumps({"cipher_mode": "ctr", "key_size": 16}))
    cfg = tconfig.load(path)
    assert cfg.cipher_mode == "ctr"
    assert cfg.key_size == 16


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "c.json"
    path.write_text(json.dumps({"chain_id": 421614}))
    monkeypatch.setenv("TESTAMENT_CONFIG", str(path))
    monkeypatch.setenv("TESTAMENT_CHAIN_ID", "0x1")
    monkeypatch.setenv("TESTAMENT_LOG_JSON", "yes")
    cfg = tconfig.load()
    assert cfg.chain_id == 1
    assert cfg.log_json is True


def test_overrides_win_and_none_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TESTAMENT_ESTATE_COUNT", "3")
    cfg = tconfig.load(estate_count=2, chain_id=None)
    assert cfg.estate_count == 2
    assert cfg.chain_id == 31337


def test_nested_layout_override() -> None:
    cfg = tconfig.load(layout={"nonce_bytes": 32})
    assert cfg.layout.nonce_bytes == 32
    assert cfg.layout.deadline_bytes == 4


@pytest.mark.parametrize(
    "overrides",
    [
        {"chain_id": 0},
        {"verifying_contract": "0x1234"},
        {"protocol_name": ""},
        {"estate_count": 0},
        {"key_size": 20},
        {"iv_size": 0},
        {"cipher_mode": "cbc"},
        {"log_level": "LOUD"},
        {"layout": {"amount_bytes": 33}},
    ],
)
def test_validation(overrides) -> None:
    with pytest.raises(ConfigError):
        tconfig.load(**overrides)


def test_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "c.json"
    path.write_text(json.dumps({"chainid": 1}))
    with pytest.raises(ConfigError) as info:
        tconfig.load(path)
    assert info.value.data["keys"] == ["chainid"]


def test_unknown_layout_key() -> None:
    with pytest.raises(ConfigError):
        tconfig.load(layout={"salt_bytes": 8})


def test_bad_env_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TESTAMENT_CHAIN_ID", "mainnet")
    with pytest.raises(ConfigError):
        tconfig.load()


def test_missing_and_unsupported_files(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        tconfig.load(tmp_path / "absent.toml")
    other = tmp_path / "c.yaml"
    other.write_text("chain_id: 1\n")
    with pytest.raises(ConfigError):
        tconfig.load(other)


def test_to_dict_nests_layout() -> None:
    d = tconfig.load().to_dict()
    assert d["layout"] == {"amount_bytes": 16, "nonce_bytes": 16, "deadline_bytes": 4}
