"""Registry of the hash algorithms that files can be checked with."""

from __future__ import annotations

import hashlib
import zlib
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Protocol

MAX_HASH_SIZE = 64
"""Largest digest, in bytes, produced by any algorithm."""


class HashContext(Protocol):
    """Running hash state: feed it data, then read the digest."""

    def update(self, data: bytes, /) -> None: ...

    def digest(self) -> bytes: ...


class _Crc32:
    """CRC-32 with the same interface as a hashlib object."""

    digest_size = 4
    name = "crc32"

    def __init__(self) -> None:
        self._value = 0

    def update(self, data: bytes, /) -> None:
        self._value = zlib.crc32(data, self._value)

    def digest(self) -> bytes:
        return self._value.to_bytes(4, "big")

    def hexdigest(self) -> str:
        return self.digest().hex()


@dataclass(frozen=True)
class HashAlgorithm:
    """A named hash algorithm, the sumfile extensions it uses and its strength."""

    name: str
    extensions: tuple[str, ...]
    secure: bool
    factory: Callable[[], HashContext] = field(compare=False, repr=False)
    index: int = 0

    def new(self) -> HashContext:
        """Start a fresh hash computation."""
        return self.factory()


def _hashlib(name: str) -> Callable[[], HashContext]:
    def make() -> HashContext:
        return hashlib.new(name)

    return make


_SPECS: tuple[tuple[str, tuple[str, ...], bool, Callable[[], HashContext]], ...] = (
    ("CRC32", ("crc32",), False, _Crc32),
    ("MD5", ("md5",), False, _hashlib("md5")),
    ("SHA-1", ("sha1",), False, _hashlib("sha1")),
    ("SHA-224", ("sha224",), True, _hashlib("sha224")),
    ("SHA-256", ("sha256",), True, _hashlib("sha256")),
    ("SHA-384", ("sha384",), True, _hashlib("sha384")),
    ("SHA-512", ("sha512",), True, _hashlib("sha512")),
    ("SHA3-256", ("sha3-256",), True, _hashlib("sha3_256")),
    ("SHA3-512", ("sha3-512",), True, _hashlib("sha3_512")),
    ("BLAKE2b-512", ("blake2b",), True, _hashlib("blake2b")),
    ("BLAKE2s-256", ("blake2s",), True, _hashlib("blake2s")),
)


@lru_cache(maxsize=None)
def builtin_algorithms() -> tuple[HashAlgorithm, ...]:
    """All supported algorithms, each carrying its position as ``index``."""
    return tuple(
        HashAlgorithm(name, extensions, secure, factory, index)
        for index, (name, extensions, secure, factory) in enumerate(_SPECS)
    )


def idx_by_name(algorithms: Sequence[HashAlgorithm], name: str) -> int:
    """Position of the algorithm called ``name``; KeyError if there is none."""
    for position, algorithm in enumerate(algorithms):
        if algorithm.name == name:
            return position
    raise KeyError(f"unknown hash algorithm: {name}")