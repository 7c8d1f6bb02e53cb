"""
AES forward cipher: FIPS-197 appendix vectors, round steps and the key schedule.
"""
from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from testament.cipher import aes
from testament.cipher.aes import AesVariant, encrypt_block, expand_key
from testament.errors import InvalidLength

PLAINTEXT = bytes.fromhex("00112233445566778899aabbccddeeff")


def oracle_block(key: bytes, block: bytes) -> bytes:
    enc = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
    return enc.update(block) + enc.finalize()


@pytest.mark.parametrize(
    "key_len, expected",
    [
        (16, "69c4e0d86a7b0430d8cdb78070b4c55a"),
        (24, "dda97ca4864cdfe06eaf70a0ec0d7191"),
        (32, "8ea2b7ca516745bfeafc49904b496089"),
    ],
)
def test_fips197_appendix_c(key_len: int, expected: str) -> None:
    key = bytes(range(key_len))
    assert encrypt_block(PLAINTEXT, key).hex() == expected


def test_key_schedule_appendix_a1() -> None:
    schedule = expand_key(bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c"))
    assert schedule.variant is AesVariant.AES128
    assert len(schedule.words) == 44
    assert schedule.words[4].hex() == "a0fafe17"
    assert schedule.words[43].hex() == "b6630ca6"
    assert schedule.round_key(10) == b"".join(schedule.words[40:44])


@pytest.mark.parametrize("key_len, rounds", [(16, 10), (24, 12), (32, 14)])
def test_variant_selected_by_key_length(key_len: int, rounds: int) -> None:
    schedule = expand_key(b"\x01" * key_len)
    assert schedule.rounds == rounds
    assert len(schedule.to_bytes()) == 16 * (rounds + 1)


@pytest.mark.parametrize("key_len", [0, 15, 17, 31, 33, 64])
def test_bad_key_length(key_len: int) -> None:
    with pytest.raises(InvalidLength):
        expand_key(b"\x00" * key_len)


@pytest.mark.parametrize("block_len", [0, 15, 17])
def test_bad_block_length(block_len: int) -> None:
    with pytest.raises(InvalidLength):
        encrypt_block(b"\x00" * block_len, b"\x00" * 16)


def test_expanded_key_and_raw_key_agree() -> None:
    key = bytes(range(32))
    assert encrypt_block(PLAINTEXT, expand_key(key)) == encrypt_block(PLAINTEXT, key)


@pytest.mark.parametrize("key_len", [16, 24, 32])
def test_matches_oracle(key_len: int) -> None:
    key = bytes((7 * i + 1) & 0xFF for i in range(key_len))
    for seed in range(4):
        block = bytes((seed * 31 + i * 13) & 0xFF for i in range(16))
        assert encrypt_block(block, key) == oracle_block(key, block)


def test_sbox_known_entries() -> None:
    assert aes.SBOX[0x00] == 0x63
    assert aes.SBOX[0x01] == 0x7C
    assert aes.SBOX[0x53] == 0xED
    assert aes.SBOX[0xFF] == 0x16
    assert sorted(aes.SBOX) == list(range(256))


def test_gf256_arithmetic() -> None:
    assert aes.xtime(0x57) == 0xAE
    assert aes.xtime(0x80) == 0x1B
    assert aes.gf_mul(0x57, 0x83) == 0xC1
    assert aes.gf_mul(0x57, 0x13) == 0xFE
    assert aes.gf_mul(0xAB, 1) == 0xAB


def test_mix_columns_known_column() -> None:
    column = bytes.fromhex("db135345")
    state = column * 4
    assert aes.mix_columns(state)[:4].hex() == "8e4da1bc"


def test_shift_rows_moves_row_r_left_by_r() -> None:
    state = bytes(range(16))
    shifted = aes.shift_rows(state)
    # row 0 untouched, row 1 column 0 takes column 1
    assert [shifted[4 * c] for c in range(4)] == [0, 4, 8, 12]
    assert shifted[1] == state[5]
    assert shifted[2] == state[10]
    assert shifted[3] == state[15]


def test_rot_and_sub_word() -> None:
    assert aes.rot_word(bytes.fromhex("09cf4f3c")).hex() == "cf4f3c09"
    assert aes.sub_word(bytes.fromhex("cf4f3c09")).hex() == "8a84eb01"
