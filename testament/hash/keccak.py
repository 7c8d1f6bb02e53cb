"""
Keccak-256 sponge
=================

Pure-Python Keccak-f[1600] with the original Keccak padding (0x01 ... 0x80),
i.e. the hash Ethereum calls ``keccak256``. This is *not* FIPS-202 SHA3-256,
which pads with 0x06.

The state is a tuple of 25 unsigned 64-bit lanes indexed ``x + 5*y``. Lanes
are read from and written to bytes little-endian. Each step function below is
exposed so circuit tests can compare a single step in isolation; every step
returns a new state and never mutates its argument.

    pad -> absorb (xor block into lanes 0..16, permute) -> squeeze

Not constant-time. Inputs here are public (typed-data pre-images, public keys).
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from ..errors import InvalidLength

RATE = 136  # bytes, for a 256-bit digest (capacity 512)
DIGEST_SIZE = 32
ROUNDS = 24
STATE_BYTES = 200

_MASK = (1 << 64) - 1

State = Tuple[int, ...]

ROUND_CONSTANTS: Tuple[int, ...] = (
    0x0000000000000001,
    0x0000000000008082,
    0x800000000000808A,
    0x8000000080008000,
    0x000000000000808B,
    0x0000000080000001,
    0x8000000080008081,
    0x8000000000008009,
    0x000000000000008A,
    0x0000000000000088,
    0x0000000080008009,
    0x000000008000000A,
    0x000000008000808B,
    0x800000000000008B,
    0x8000000000008089,
    0x8000000000008003,
    0x8000000000008002,
    0x8000000000000080,
    0x000000000000800A,
    0x800000008000000A,
    0x8000000080008081,
    0x8000000000008080,
    0x0000000080000001,
    0x8000000080008008,
)

# rho offsets, indexed by lane x + 5*y
ROTATION_OFFSETS: Tuple[int, ...] = (
    0, 1, 62, 28, 27,
    36, 44, 6, 55, 20,
    3, 10, 43, 25, 39,
    41, 45, 15, 21, 8,
    18, 2, 61, 56, 14,
)

# pi: destination lane x + 5*y takes source lane (x + 3*y) % 5 + 5*x
PI_SOURCE: Tuple[int, ...] = tuple(
    ((x + 3 * y) % 5) + 5 * x for y in range(5) for x in range(5)
)


def _rotl(lane: int, n: int) -> int:
    n %= 64
    if n == 0:
        return lane
    return ((lane << n) | (lane >> (64 - n))) & _MASK


def empty_state() -> State:
    return (0,) * 25


# ---------------------------------------------------------------------------
# Step mappings
# ---------------------------------------------------------------------------


def theta(state: Sequence[int]) -> State:
    c = [state[x] ^ state[x + 5] ^ state[x + 10] ^ state[x + 15] ^ state[x + 20] for x in range(5)]
    d = [c[(x - 1) % 5] ^ _rotl(c[(x + 1) % 5], 1) for x in range(5)]
    return tuple(state[i] ^ d[i % 5] for i in range(25))


def rho(state: Sequence[int]) -> State:
    return tuple(_rotl(state[i], ROTATION_OFFSETS[i]) for i in range(25))


def pi(state: Sequence[int]) -> State:
    return tuple(state[PI_SOURCE[i]] for i in range(25))


def chi(state: Sequence[int]) -> State:
    out: List[int] = [0] * 25
    for y in range(0, 25, 5):
        row = state[y : y + 5]
        for x in range(5):
            out[y + x] = row[x] ^ ((~row[(x + 1) % 5] & _MASK) & row[(x + 2) % 5])
    return tuple(out)


def iota(state: Sequence[int], round_index: int) -> State:
    return (state[0] ^ ROUND_CONSTANTS[round_index],) + tuple(state[1:])


def keccak_round(state: Sequence[int], round_index: int) -> State:
    return iota(chi(pi(rho(theta(state)))), round_index)


def keccak_f1600(state: Sequence[int]) -> State:
    """The 24-round permutation."""
    if len(state) != 25:
        raise InvalidLength("keccak state must have 25 lanes", got=len(state))
    s: State = tuple(state)
    for r in range(ROUNDS):
        s = keccak_round(s, r)
    return s


# ---------------------------------------------------------------------------
# State <-> bytes
# ---------------------------------------------------------------------------


def bytes_to_lanes(data: bytes) -> State:
    """Little-endian lanes from up to 200 bytes (short input is zero-extended)."""
    if len(data) > STATE_BYTES or len(data) % 8:
        raise InvalidLength("lane bytes must be a multiple of 8 and at most 200", got=len(data))
    data = data.ljust(STATE_BYTES, b"\x00")
    return tuple(int.from_bytes(data[8 * i : 8 * i + 8], "little") for i in range(25))


def lanes_to_bytes(state: Sequence[int]) -> bytes:
    return b"".join(lane.to_bytes(8, "little") for lane in state)


# ---------------------------------------------------------------------------
# Sponge
# ---------------------------------------------------------------------------


def pad(message: bytes, rate: int = RATE) -> bytes:
    """
    Keccak pad10*1 in byte form: append 0x01, zero-fill to a multiple of
    ``rate`` and OR 0x80 into the last byte. An aligned message gets a full
    extra block.
    """
    padded = bytearray(message)
    padded.append(0x01)
    padded.extend(b"\x00" * (-len(padded) % rate))
    padded[-1] |= 0x80
    return bytes(padded)


def absorb_block(state: Sequence[int], block: bytes) -> State:
    if len(block) % 8 or len(block) > STATE_BYTES:
        raise InvalidLength("block length must be a multiple of 8 and at most 200", got=len(block))
    lanes = list(state)
    for i in range(len(block) // 8):
        lanes[i] ^= int.from_bytes(block[8 * i : 8 * i + 8], "little")
    return keccak_f1600(lanes)


def absorb(padded: bytes, rate: int = RATE, state: Sequence[int] | None = None) -> State:
    """XOR each rate-sized block into the state and permute."""
    if len(padded) % rate:
        raise InvalidLength(f"padded input must be a multiple of {rate} bytes", got=len(padded))
    s: State = tuple(state) if state is not None else empty_state()
    for off in range(0, len(padded), rate):
        s = absorb_block(s, padded[off : off + rate])
    return s


def squeeze(state: Sequence[int], length: int = DIGEST_SIZE, rate: int = RATE) -> bytes:
    """Read the first ``rate`` bytes of the state, permuting between blocks."""
    out = bytearray()
    s: State = tuple(state)
    while True:
        out.extend(lanes_to_bytes(s[: rate // 8]))
        if len(out) >= length:
            return bytes(out[:length])
        s = keccak_f1600(s)


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest of ``data``. Total over every finite byte string."""
    return squeeze(absorb(pad(bytes(data))), DIGEST_SIZE)


def keccak256_hex(data: bytes, *, prefix: bool = True) -> str:
    h = keccak256(data).hex()
    return "0x" + h if prefix else h


class Keccak256:
    """
    Incremental hasher with a hashlib-style surface::

        h = Keccak256()
        h.update(b"Hello ")
        h.update(b"World")
        h.hexdigest()
    """

    name = "keccak256"
    digest_size = DIGEST_SIZE
    block_size = RATE

    def __init__(self, data: bytes = b"") -> None:
        self._state: State = empty_state()
        self._buffer = b""
        if data:
            self.update(data)

    def update(self, data: bytes) -> "Keccak256":
        buf = self._buffer + bytes(data)
        full = len(buf) - len(buf) % RATE
        for off in range(0, full, RATE):
            self._state = absorb_block(self._state, buf[off : off + RATE])
        self._buffer = buf[full:]
        return self

    def digest(self) -> bytes:
        final = absorb(pad(self._buffer), RATE, self._state)
        return squeeze(final, DIGEST_SIZE)

    def hexdigest(self) -> str:
        return self.digest().hex()

    def copy(self) -> "Keccak256":
        other = Keccak256()
        other._state = self._state
        other._buffer = self._buffer
        return other


def keccak256_many(parts: Iterable[bytes]) -> bytes:
    h = Keccak256()
    for p in parts:
        h.update(p)
    return h.digest()


__all__ = [
    "RATE",
    "DIGEST_SIZE",
    "ROUNDS",
    "ROUND_CONSTANTS",
    "ROTATION_OFFSETS",
    "PI_SOURCE",
    "State",
    "empty_state",
    "theta",
    "rho",
    "pi",
    "chi",
    "iota",
    "keccak_round",
    "keccak_f1600",
    "bytes_to_lanes",
    "lanes_to_bytes",
    "pad",
    "absorb_block",
    "absorb",
    "squeeze",
    "keccak256",
    "keccak256_hex",
    "keccak256_many",
    "Keccak256",
]
