import json
from pathlib import Path
from typing import Any, Dict

import pytest
from typer.testing import CliRunner

from testament.cli import main as cli
from testament.ecc.ecdsa import sign
from testament.hash.keccak import keccak256
from testament.version import __version__
from tests.conftest import ESTATES, KNOWN_KEYS, PERMIT_VECTORS, WILL_1, WILL_HEX_1

runner = CliRunner()

KEY = "0x" + "11" * 32
IV = "0x" + "22" * 12


def run_cli(args: list[str], expect: int = 0):
    result = runner.invoke(cli.app, args)
    assert result.exit_code == expect, result.output
    return result


def run_json(args: list[str], expect: int = 0) -> Any:
    return json.loads(run_cli(args, expect).stdout)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TESTAMENT_CONFIG", "TESTAMENT_CHAIN_ID", "TESTAMENT_ESTATE_COUNT", "TESTAMENT_CIPHER_MODE"):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path: Path, name: str, obj: Dict[str, Any]) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(obj))
    return str(path)


def _permit_will(vector: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "testator": vector["testator"],
        "estates": [e.to_dict() for e in ESTATES],
        "salt": "0x01",
        "will": vector["will"],
        "nonce": vector["nonce"],
        "deadline": vector["deadline"],
        "signature": vector["signature"],
    }


def test_version() -> None:
    assert run_cli(["version"]).stdout.strip() == __version__


def test_keccak_text_and_hex() -> None:
    out = run_json(["keccak", "Hello World"])
    assert out == {
        "digest": "0x592fa743889fc7f92ac2a37bb1f5ba1daf2a5c84741ca0e0061d243a2e6707ba",
        "length": 11,
    }
    empty = run_json(["keccak", "0x", "--hex"])
    assert empty["digest"] == "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


def test_keccak_bad_hex() -> None:
    result = run_cli(["keccak", "0xzz", "--hex"], expect=1)
    assert "not valid hex" in result.output


def test_serialize_and_deserialize(tmp_path: Path) -> None:
    will_file = _write(tmp_path, "will.json", WILL_1.to_dict())
    out = run_json(["serialize", will_file])
    assert out == {"serialized": WILL_HEX_1.lower(), "estate_count": 2, "length": 269}

    decoded = run_json(["--estate-count", "2", "deserialize", WILL_HEX_1])
    assert decoded == WILL_1.to_dict()


def test_deserialize_wrong_estate_count() -> None:
    result = run_cli(["deserialize", WILL_HEX_1], expect=1)
    assert "TESTAMENT/INVALID_LENGTH" in result.output


def test_estate_count_from_config_file(tmp_path: Path) -> None:
    cfg = _write(tmp_path, "cfg.json", {"estate_count": 2})
    decoded = run_json(["--config", cfg, "deserialize", WILL_HEX_1])
    assert decoded["nonce"] == WILL_1.nonce


@pytest.mark.parametrize("mode", ["gcm", "ctr"])
def test_encrypt_then_decrypt(tmp_path: Path, mode: str) -> None:
    envelope = run_json(["encrypt", WILL_HEX_1, "--key", KEY, "--iv", IV, "--mode", mode])
    assert envelope["algorithm"] == mode
    assert envelope["iv"] == IV
    assert (envelope["auth_tag"] is None) == (mode == "ctr")
    assert KEY[2:] not in json.dumps(envelope)

    env_file = _write(tmp_path, "env.json", envelope)
    out = run_json(["decrypt", env_file, "--key", KEY])
    assert out == {"serialized": WILL_HEX_1.lower(), "estate_count": 2}


def test_decrypt_with_wrong_key_fails(tmp_path: Path) -> None:
    envelope = run_json(["encrypt", WILL_HEX_1, "--key", KEY, "--iv", IV])
    env_file = _write(tmp_path, "env.json", envelope)
    result = run_cli(["decrypt", env_file, "--key", "0x" + "33" * 32], expect=1)
    assert "TESTAMENT/AUTHENTICATION_FAILURE" in result.output
    assert WILL_HEX_1.lower()[2:] not in result.output


def test_encrypt_rejects_short_key() -> None:
    result = run_cli(["encrypt", WILL_HEX_1, "--key", "0x" + "11" * 16, "--iv", IV], expect=1)
    assert "TESTAMENT/INVALID_LENGTH" in result.output


def test_encrypt_rejects_unknown_mode() -> None:
    result = run_cli(["encrypt", WILL_HEX_1, "--key", KEY, "--mode", "ofb"], expect=1)
    assert "TESTAMENT/UNSUPPORTED_MODE" in result.output


@pytest.mark.parametrize("vector", PERMIT_VECTORS, ids=["permit-a", "permit-b"])
def test_verify_permit_match(tmp_path: Path, vector: Dict[str, Any]) -> None:
    will_file = _write(tmp_path, "will.json", _permit_will(vector))
    out = run_json(["verify-permit", will_file])
    assert out["valid"] is True
    assert out["reason"] == "match"
    assert out["signer"] == vector["testator"]
    assert out["chain_id"] == 31337


def test_verify_permit_mismatch_on_other_chain(tmp_path: Path) -> None:
    will_file = _write(tmp_path, "will.json", _permit_will(PERMIT_VECTORS[0]))
    out = run_json(["--chain-id", "421614", "verify-permit", will_file], expect=1)
    assert out["valid"] is False
    assert out["reason"] == "mismatch"


def test_verify_permit_unavailable(tmp_path: Path) -> None:
    will = _permit_will(PERMIT_VECTORS[0])
    will["signature"] = {"r": 0, "s": 1, "v": 27}
    will_file = _write(tmp_path, "will.json", will)
    result = run_cli(["verify-permit", will_file], expect=2)
    assert "TESTAMENT/VERIFICATION_UNAVAILABLE" in result.output


def test_serialize_rejects_oversized_signature(tmp_path: Path) -> None:
    will = WILL_1.to_dict()
    will["signature"] = {"r": 2**256, "s": 1, "v": 27}
    result = run_cli(["serialize", _write(tmp_path, "will.json", will)], expect=1)
    assert "TESTAMENT/INVALID_RANGE" in result.output


def test_verify_permit_non_hex_signature(tmp_path: Path) -> None:
    will = _permit_will(PERMIT_VECTORS[0])
    will["signature"] = "0xnothex"
    result = run_cli(["verify-permit", _write(tmp_path, "will.json", will)], expect=1)
    assert "TESTAMENT/DESERIALIZATION" in result.output


def test_invalid_json_input(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    result = run_cli(["serialize", str(path)], expect=1)
    assert "Invalid JSON" in result.output


def test_stdin_input() -> None:
    result = runner.invoke(cli.app, ["serialize", "-"], input=json.dumps(WILL_1.to_dict()))
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["length"] == 269


@pytest.mark.parametrize("private_key, address", KNOWN_KEYS)
def test_recover(private_key: int, address: str) -> None:
    digest = keccak256(b"recover me")
    sig = sign(digest, private_key)
    out = run_json(["recover", "--digest", "0x" + digest.hex(), "--signature", sig.to_hex()])
    assert out["address"] == address
    assert out["public_key"]["x"].startswith("0x")


def test_recover_malformed_signature() -> None:
    digest = "0x" + "00" * 32
    result = run_cli(["recover", "--digest", digest, "--signature", "0x" + "00" * 65], expect=1)
    assert "TESTAMENT/RECOVERY_FAILURE" in result.output


def test_witness_will(tmp_path: Path) -> None:
    will_file = _write(tmp_path, "will.json", WILL_1.to_dict())
    out = run_json(["witness", "will", will_file])
    assert out["nonce"] == str(WILL_1.nonce)
    assert len(out["salt"]) == 4
    assert all(isinstance(limb, str) for limb in out["signature"]["r"])


def test_witness_signature() -> None:
    digest = keccak256(b"witness")
    sig = sign(digest, 1)
    out = run_json(["witness", "signature", "--digest", digest.hex(), "--signature", sig.to_hex()])
    assert len(out["bitsMsghash"]) == 256
    assert out["signature"]["v"] == str(sig.v)
    assert len(out["pubkey"]) == 2 and len(out["pubkey"][0]) == 4


def test_witness_cipher() -> None:
    out = run_json(["witness", "cipher", "0x" + "00" * 16, "--key", "0x" + "00" * 16, "--iv", "0x" + "00" * 12])
    assert out["ciphertext"] == [str(b) for b in bytes.fromhex("0388dace60b6a392f328c2b971b2fe78")]
    assert out["auth_tag"] == [str(b) for b in bytes.fromhex("ab6e47d42cec13bdf53a67b21257bddf")]
    assert len(out["key_words"]) == 4


def test_verbose_logs_stages() -> None:
    quiet = run_cli(["encrypt", WILL_HEX_1, "--key", KEY, "--iv", IV])
    assert "will encrypted" not in quiet.output
    loud = run_cli(["-v", "--chain-id", "421614", "encrypt", WILL_HEX_1, "--key", KEY, "--iv", IV])
    assert "will encrypted" in loud.output
    assert "421614" in loud.output
    assert "trace_id" in loud.output
    assert KEY[2:] not in loud.output
