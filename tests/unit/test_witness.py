from __future__ import annotations

import pytest

from testament.ecc.ecdsa import private_key_to_public_key, sign
from testament.ecc.secp256k1 import G
from testament.errors import InvalidLength
from testament.hash.keccak import keccak256
from testament.utils.limbs import join_limbs
from testament.witness import (
    cipher_witness,
    msghash_bits,
    pubkey_witness,
    signature_witness,
    stringify,
    will_witness,
)
from tests.conftest import WILL_1


def test_signature_witness_limbs() -> None:
    sig = WILL_1.signature
    out = signature_witness(sig)
    assert len(out["r"]) == len(out["s"]) == 4
    assert join_limbs(out["r"]) == sig.r
    assert join_limbs(out["s"]) == sig.s
    assert out["v"] == 27


def test_pubkey_witness_of_generator() -> None:
    x, y = pubkey_witness(G)
    assert x[0] == G.x & ((1 << 64) - 1)
    assert join_limbs(x) == G.x
    assert join_limbs(y) == G.y


def test_msghash_bits_order() -> None:
    digest = b"\x01" + b"\x00" * 30 + b"\x80"
    bits = msghash_bits(digest)
    assert len(bits) == 256
    assert bits[0] == 1 and sum(bits[:8]) == 1
    assert bits[255] == 1 and sum(bits[248:]) == 1


def test_msghash_bits_length() -> None:
    with pytest.raises(InvalidLength):
        msghash_bits(b"\x00" * 31)


def test_will_witness_fields() -> None:
    out = will_witness(WILL_1)
    assert out["testator"] == WILL_1.testator
    assert len(out["estates"]) == 2
    assert out["estates"][0]["amount"] == 1000
    assert join_limbs(out["salt"]) == WILL_1.salt
    assert out["signature"]["v"] == 27
    assert out["deadline"] == WILL_1.deadline


def test_recovery_witness_is_consistent() -> None:
    digest = keccak256(b"witness")
    sig = sign(digest, 4)
    assert pubkey_witness(private_key_to_public_key(4)) == [
        list(private_key_to_public_key(4).to_limbs()[0]),
        list(private_key_to_public_key(4).to_limbs()[1]),
    ]
    assert join_limbs(signature_witness(sig)["r"]) == sig.r


def test_cipher_witness_shapes() -> None:
    key = bytes(range(16))
    out = cipher_witness(key, b"\x00" * 12, b"\xaa\xbb", plaintext=b"\x01\x02", auth_tag=b"\x05" * 16)
    assert out["key"] == list(range(16))
    assert out["key_words"] == [[0, 1, 2, 3], [4, 5, 6, 7], [8, 9, 10, 11], [12, 13, 14, 15]]
    assert out["ciphertext"] == [0xAA, 0xBB]
    assert out["plaintext"] == [1, 2]
    assert len(out["auth_tag"]) == 16
    assert "plaintext" not in cipher_witness(key, b"\x00" * 12, b"")


def test_stringify() -> None:
    value = {"a": 1, "b": [2, (3, True)], "c": "x", "d": None, "e": 1 << 200}
    assert stringify(value) == {
        "a": "1",
        "b": ["2", ["3", "1"]],
        "c": "x",
        "d": None,
        "e": str(1 << 200),
    }
