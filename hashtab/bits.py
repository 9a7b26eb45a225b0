"""Bit helpers and constants used by the BLAKE3 hash."""

from __future__ import annotations

import struct
from enum import IntFlag

BLAKE3_KEY_LEN = 32
_U64_LIMIT = 1 << 64
_U32_MASK = 0xFFFFFFFF


class Blake3Flags(IntFlag):
    """Domain flags passed to the BLAKE3 compression function."""

    CHUNK_START = 1 << 0
    CHUNK_END = 1 << 1
    PARENT = 1 << 2
    ROOT = 1 << 3
    KEYED_HASH = 1 << 4
    DERIVE_KEY_CONTEXT = 1 << 5
    DERIVE_KEY_MATERIAL = 1 << 6


IV = (
    0x6A09E667,
    0xBB67AE85,
    0x3C6EF372,
    0xA54FF53A,
    0x510E527F,
    0x9B05688C,
    0x1F83D9AB,
    0x5BE0CD19,
)

MSG_SCHEDULE = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (2, 6, 3, 10, 7, 0, 4, 13, 1, 11, 12, 5, 9, 14, 15, 8),
    (3, 4, 10, 12, 13, 2, 7, 14, 6, 5, 9, 0, 11, 15, 8, 1),
    (10, 7, 12, 9, 14, 3, 13, 15, 4, 0, 11, 2, 5, 8, 1, 6),
    (12, 13, 9, 11, 15, 10, 14, 8, 7, 2, 5, 3, 0, 1, 6, 4),
    (9, 14, 11, 5, 8, 12, 15, 1, 13, 3, 0, 10, 2, 6, 4, 7),
    (11, 15, 5, 0, 1, 9, 8, 6, 14, 10, 2, 12, 3, 4, 7, 13),
)


def _check_u64(x: int) -> None:
    if not 0 <= x < _U64_LIMIT:
        raise ValueError(f"value is not an unsigned 64-bit integer: {x}")


def highest_one(x: int) -> int:
    """Index of the highest set bit of a nonzero 64-bit value."""
    _check_u64(x)
    if x == 0:
        raise ValueError("highest_one is undefined for zero")
    return x.bit_length() - 1


def popcnt(x: int) -> int:
    """Number of set bits in a 64-bit value."""
    _check_u64(x)
    return bin(x).count("1")


def round_down_to_power_of_2(x: int) -> int:
    """Largest power of two not above ``x``; 1 when ``x`` is 0."""
    return 1 << highest_one(x | 1)


def counter_low(counter: int) -> int:
    """Low 32 bits of a 64-bit counter."""
    _check_u64(counter)
    return counter & _U32_MASK


def counter_high(counter: int) -> int:
    """High 32 bits of a 64-bit counter."""
    _check_u64(counter)
    return (counter >> 32) & _U32_MASK


def load32(data: bytes, offset: int = 0) -> int:
    """Read a little-endian 32-bit word from ``data`` at ``offset``."""
    if offset < 0 or offset + 4 > len(data):
        raise ValueError("not enough bytes for a 32-bit word")
    return int.from_bytes(data[offset : offset + 4], "little")


def load_key_words(key: bytes) -> tuple[int, ...]:
    """Split a 32-byte key into eight little-endian words."""
    if len(key) != BLAKE3_KEY_LEN:
        raise ValueError(f"key must be {BLAKE3_KEY_LEN} bytes, got {len(key)}")
    return struct.unpack("<8I", key)