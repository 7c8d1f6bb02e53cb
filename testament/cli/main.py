"""
testament - operator CLI over the digital-will engine.

Commands:
  keccak          Keccak-256 of text or hex input
  serialize       Signed will JSON -> fixed-width hex
  deserialize     Fixed-width hex -> signed will JSON
  encrypt         Serialized will -> encrypted envelope JSON
  decrypt         Encrypted envelope JSON -> serialized will
  verify-permit   Check a signed will's Permit2 signature
  recover         Recover the signer of a 32-byte digest
  witness         Circuit witness inputs (sub-commands)
  version         Print the package version

Global options:
  --config PATH        TOML/JSON config file (env TESTAMENT_CONFIG)
  --chain-id INTEGER   Override the chain id used for Permit2 digests
  --estate-count INT   Override the estate count used by the codec
  --verbose / -v       Log pipeline stages to stderr

Binary values are hex on the way in and out. File arguments accept ``-`` for
stdin.

Examples:
  testament keccak "Hello World"
  testament serialize will.json
  testament deserialize 0x041f... --estate-count 2
  testament encrypt 0x041f... --key 0x00..00 --mode gcm > envelope.json
  testament decrypt envelope.json --key 0x00..00
"""

from __future__ import annotations

import sys
from typing import Optional

import typer

from .. import config as tconfig
from .. import logging as tlog
from ..cipher.modes import CipherMode
from ..ecc.address import public_key_to_address, to_checksum_address
from ..ecc.ecdsa import Signature, recover_public_key
from ..errors import TestamentError
from ..hash.keccak import keccak256
from ..utils.bytes import to_hex
from ..version import __version__
from ..will.codec import WillLayout, deserialize, serialize
from ..will.pipeline import decrypt_will, encrypt_will, verify_will
from ..will.types import EncryptedWill, SerializedWill, SignedWill
from . import witness
from .common import emit, fail, load_json, parse_hex

app = typer.Typer(
    name="testament",
    help="Digital-will engine: hashing, will codec, encryption and permit checks",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self):
        self.config_path: Optional[str] = None
        self.chain_id: Optional[int] = None
        self.estate_count: Optional[int] = None
        self.verbose: bool = False


_ctx = GlobalContext()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to config file",
        envvar="TESTAMENT_CONFIG",
    ),
    chain_id: Optional[int] = typer.Option(
        None,
        "--chain-id",
        help="Override chain ID",
    ),
    estate_count: Optional[int] = typer.Option(
        None,
        "--estate-count",
        help="Override the number of estates in a serialized will",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log pipeline stages to stderr",
    ),
) -> None:
    """
    Configuration is resolved in this order (highest to lowest priority):
      1. Command-line flags (--chain-id, --estate-count)
      2. Environment variables (TESTAMENT_CHAIN_ID, TESTAMENT_ESTATE_COUNT, ...)
      3. Config file (--config or TESTAMENT_CONFIG)
      4. Built-in defaults (chain 31337, one estate, AES-256-GCM)
    """
    _ctx.config_path = config
    _ctx.chain_id = chain_id
    _ctx.estate_count = estate_count
    _ctx.verbose = verbose
    ctx.with_resource(tlog.trace_scope())


# ----------------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------------


def get_config() -> tconfig.EngineConfig:
    try:
        cfg = tconfig.load(
            _ctx.config_path, chain_id=_ctx.chain_id, estate_count=_ctx.estate_count
        )
    except TestamentError as e:
        fail(e)
    tlog.configure(
        json=cfg.log_json,
        level=cfg.log_level if _ctx.verbose else "WARNING",
        stream=sys.stderr,
    )
    tlog.bind(chain_id=cfg.chain_id)
    return cfg


# ----------------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------------


@app.command()
def keccak(
    data: str = typer.Argument(..., help="Input (UTF-8 text, or hex with --hex)"),
    is_hex: bool = typer.Option(False, "--hex", help="Treat input as hex bytes"),
) -> None:
    """Keccak-256 digest (Ethereum padding)."""
    payload = parse_hex(data, "data") if is_hex else data.encode("utf-8")
    emit({"digest": to_hex(keccak256(payload)), "length": len(payload)})


@app.command("serialize")
def serialize_cmd(
    will_file: str = typer.Argument(..., help="Signed will JSON file, or - for stdin"),
) -> None:
    """Encode a signed will into the fixed-width layout."""
    cfg = get_config()
    try:
        will = SignedWill.from_dict(load_json(will_file))
        layout = WillLayout.from_config(cfg, estate_count=len(will.estates))
        data = serialize(will, layout)
    except TestamentError as e:
        fail(e)
    emit({"serialized": to_hex(data), "estate_count": layout.estate_count, "length": len(data)})


@app.command("deserialize")
def deserialize_cmd(
    data: str = typer.Argument(..., help="Serialized will as hex"),
) -> None:
    """Decode fixed-width hex; the estate count comes from --estate-count or the config."""
    cfg = get_config()
    raw = parse_hex(data, "data")
    try:
        will = deserialize(raw, WillLayout.from_config(cfg))
    except TestamentError as e:
        fail(e)
    emit(will.to_dict())


@app.command("encrypt")
def encrypt_cmd(
    data: str = typer.Argument(..., help="Serialized will as hex"),
    key: str = typer.Option(..., "--key", help="Cipher key as hex"),
    iv: Optional[str] = typer.Option(None, "--iv", help="IV as hex (random if omitted)"),
    mode: Optional[str] = typer.Option(None, "--mode", help="gcm or ctr (default from config)"),
) -> None:
    """Encrypt a serialized will; prints the envelope (never the key)."""
    cfg = get_config()
    raw = parse_hex(data, "data")
    try:
        layout = WillLayout.for_length(
            len(raw),
            amount_bytes=cfg.layout.amount_bytes,
            nonce_bytes=cfg.layout.nonce_bytes,
            deadline_bytes=cfg.layout.deadline_bytes,
        )
        envelope = encrypt_will(
            SerializedWill(data=raw, estate_count=layout.estate_count),
            parse_hex(key, "key"),
            mode=CipherMode.parse(mode) if mode else None,
            iv=parse_hex(iv, "iv") if iv else None,
            config=cfg,
        )
    except TestamentError as e:
        fail(e)
    emit(envelope.to_dict())


@app.command("decrypt")
def decrypt_cmd(
    envelope_file: str = typer.Argument(..., help="Envelope JSON file, or - for stdin"),
    key: str = typer.Option(..., "--key", help="Cipher key as hex"),
) -> None:
    """Decrypt an envelope; GCM tags are checked before anything is printed."""
    cfg = get_config()
    try:
        envelope = EncryptedWill.from_dict(load_json(envelope_file))
        blob = decrypt_will(envelope, parse_hex(key, "key"), config=cfg)
    except TestamentError as e:
        fail(e)
    except ValueError as e:
        typer.echo(f"Invalid envelope: {e}", err=True)
        raise typer.Exit(1)
    emit({"serialized": to_hex(blob.data), "estate_count": blob.estate_count})


@app.command("verify-permit")
def verify_permit_cmd(
    will_file: str = typer.Argument(..., help="Signed will JSON file, or - for stdin"),
) -> None:
    """
    Check that the testator signed the will's Permit2 batch transfer.

    Exit code 0 when the signer matches, 1 on a mismatch, 2 when the
    signature cannot be interpreted at all.
    """
    cfg = get_config()
    try:
        will = SignedWill.from_dict(load_json(will_file))
    except TestamentError as e:
        fail(e)
    try:
        result = verify_will(will, config=cfg)
    except TestamentError as e:
        fail(e, exit_code=2)
    emit(
        {
            "valid": result.valid,
            "reason": result.reason,
            "expected": to_checksum_address(result.expected),
            "signer": to_checksum_address(result.signer),
            "digest": to_hex(result.digest),
            "chain_id": cfg.chain_id,
        }
    )
    if not result.valid:
        raise typer.Exit(1)


@app.command()
def recover(
    digest: str = typer.Option(..., "--digest", help="32-byte message digest as hex"),
    signature: str = typer.Option(..., "--signature", help="65-byte r||s||v signature as hex"),
) -> None:
    """Recover the public key and address behind a signature."""
    try:
        point = recover_public_key(
            parse_hex(digest, "digest"), Signature.from_bytes(parse_hex(signature, "signature"))
        )
    except TestamentError as e:
        fail(e)
    emit(
        {
            "address": to_checksum_address(public_key_to_address(point)),
            "public_key": {
                "x": to_hex(point.x.to_bytes(32, "big")),
                "y": to_hex(point.y.to_bytes(32, "big")),
            },
        }
    )


@app.command()
def version() -> None:
    """Print the package version."""
    typer.echo(__version__)


app.add_typer(witness.app, name="witness")


def main() -> None:
    """Entry point for the testament CLI."""
    app()


if __name__ == "__main__":
    main()
