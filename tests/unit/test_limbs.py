from __future__ import annotations

import pytest

from testament.errors import InvalidLength, InvalidRange
from testament.utils.limbs import (
    bits_to_bytes,
    bytes_to_bits,
    bytes_to_words,
    int_to_bits,
    join_limbs,
    limbs_to_point,
    point_to_limbs,
    split_limbs,
    words_to_bytes,
)

P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F


def test_split_is_least_significant_first() -> None:
    value = (4 << 192) | (3 << 128) | (2 << 64) | 1
    assert split_limbs(value) == (1, 2, 3, 4)
    assert join_limbs((1, 2, 3, 4)) == value


def test_split_edges() -> None:
    assert split_limbs(0) == (0, 0, 0, 0)
    top = (1 << 256) - 1
    assert split_limbs(top) == ((1 << 64) - 1,) * 4
    with pytest.raises(InvalidRange):
        split_limbs(1 << 256)


def test_negative_values_need_a_modulus() -> None:
    with pytest.raises(InvalidRange):
        split_limbs(-1)
    assert join_limbs(split_limbs(-1, modulus=P)) == P - 1


def test_custom_limb_width() -> None:
    assert split_limbs(0x0102, n=2, width=8) == (0x02, 0x01)
    assert join_limbs((0x02, 0x01), width=8) == 0x0102


def test_join_rejects_oversized_limb() -> None:
    with pytest.raises(InvalidRange):
        join_limbs((1 << 64, 0, 0, 0))


def test_point_limbs() -> None:
    limbs = point_to_limbs((5, 7))
    assert limbs == ((5, 0, 0, 0), (7, 0, 0, 0))
    assert limbs_to_point(limbs) == (5, 7)
    with pytest.raises(InvalidLength):
        limbs_to_point([limbs[0]])
    with pytest.raises(InvalidLength):
        limbs_to_point([(1, 2, 3), (4, 5, 6)])


def test_bits_are_lsb_first() -> None:
    assert bytes_to_bits(b"\x01\x80") == [1, 0, 0, 0, 0, 0, 0, 0] + [0, 0, 0, 0, 0, 0, 0, 1]
    assert bits_to_bytes(bytes_to_bits(b"\x5a\xa5")) == b"\x5a\xa5"


def test_bits_validation() -> None:
    with pytest.raises(InvalidLength):
        bits_to_bytes([1, 0, 1])
    with pytest.raises(InvalidRange):
        bits_to_bytes([2, 0, 0, 0, 0, 0, 0, 0])


def test_int_to_bits() -> None:
    bits = int_to_bits(1)
    assert len(bits) == 256
    assert bits[248] == 1 and sum(bits) == 1
    with pytest.raises(InvalidRange):
        int_to_bits(1 << 256)


def test_words() -> None:
    data = bytes(range(8))
    assert bytes_to_words(data) == [b"\x00\x01\x02\x03", b"\x04\x05\x06\x07"]
    assert words_to_bytes(bytes_to_words(data)) == data
    with pytest.raises(InvalidLength):
        bytes_to_words(b"\x00" * 5)
