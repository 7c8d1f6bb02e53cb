"""
testament witness: circuit input files.

Implements:
  - testament witness will <will.json>              deserializer outputs
  - testament witness signature --digest --signature pubkey-recovery inputs
  - testament witness cipher --key --iv <data>       AES-GCM inputs and outputs
"""

from __future__ import annotations

from typing import Optional

import typer

from ..cipher.modes import gcm_encrypt
from ..ecc.ecdsa import Signature, recover_public_key
from ..errors import TestamentError
from ..will.types import SignedWill
from ..witness import (
    cipher_witness,
    msghash_bits,
    pubkey_witness,
    signature_witness,
    stringify,
    will_witness,
)
from .common import emit, fail, load_json, parse_hex

app = typer.Typer(help="Circuit witness inputs (will, signature, cipher)")


@app.command()
def will(
    will_file: str = typer.Argument(..., help="Signed will JSON file, or - for stdin"),
) -> None:
    """Deserializer outputs for a signed will (limb-quads for salt, r and s)."""
    try:
        signed = SignedWill.from_dict(load_json(will_file))
    except TestamentError as e:
        fail(e)
    emit(stringify(will_witness(signed)))


@app.command()
def signature(
    digest: str = typer.Option(..., "--digest", help="32-byte message digest as hex"),
    sig: str = typer.Option(..., "--signature", help="65-byte r||s||v signature as hex"),
) -> None:
    """Message-hash bits, signature limbs and the expected recovered public key."""
    msghash = parse_hex(digest, "digest")
    try:
        parsed = Signature.from_bytes(parse_hex(sig, "signature"))
        out = {
            "bitsMsghash": msghash_bits(msghash),
            "signature": signature_witness(parsed),
            "pubkey": pubkey_witness(recover_public_key(msghash, parsed)),
        }
    except TestamentError as e:
        fail(e)
    emit(stringify(out))


@app.command()
def cipher(
    data: str = typer.Argument(..., help="Plaintext as hex"),
    key: str = typer.Option(..., "--key", help="Cipher key as hex"),
    iv: str = typer.Option(..., "--iv", help="IV as hex"),
    aad: Optional[str] = typer.Option(None, "--aad", help="Additional authenticated data as hex"),
) -> None:
    """AES-GCM inputs with the ciphertext and tag this engine produces for them."""
    plaintext = parse_hex(data, "data")
    key_b = parse_hex(key, "key")
    iv_b = parse_hex(iv, "iv")
    try:
        sealed = gcm_encrypt(plaintext, key_b, iv_b, parse_hex(aad, "aad") if aad else b"")
        out = cipher_witness(
            key_b, iv_b, sealed.ciphertext, plaintext=plaintext, auth_tag=sealed.tag
        )
    except TestamentError as e:
        fail(e)
    emit(stringify(out))
