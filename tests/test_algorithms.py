import hashlib
import zlib

import pytest

from hashtab.algorithms import (
    MAX_HASH_SIZE,
    HashAlgorithm,
    builtin_algorithms,
    idx_by_name,
)


def test_indices_match_positions():
    algorithms = builtin_algorithms()
    assert [a.index for a in algorithms] == list(range(len(algorithms)))


def test_names_are_unique():
    names = [a.name for a in builtin_algorithms()]
    assert len(names) == len(set(names))


@pytest.mark.parametrize("name", ["CRC32", "MD5", "SHA-1", "SHA-256", "SHA-512"])
def test_idx_by_name_finds_required(name):
    algorithms = builtin_algorithms()
    assert algorithms[idx_by_name(algorithms, name)].name == name


def test_idx_by_name_unknown():
    with pytest.raises(KeyError):
        idx_by_name(builtin_algorithms(), "NOPE-1")


def test_sha256_matches_hashlib():
    algorithms = builtin_algorithms()
    ctx = algorithms[idx_by_name(algorithms, "SHA-256")].new()
    ctx.update(b"ab")
    ctx.update(b"c")
    assert ctx.digest() == hashlib.sha256(b"abc").digest()


def test_crc32_check_value():
    algorithms = builtin_algorithms()
    ctx = algorithms[idx_by_name(algorithms, "CRC32")].new()
    ctx.update(b"123456789")
    assert ctx.digest() == bytes.fromhex("cbf43926")


def test_crc32_incremental_matches_zlib():
    algorithms = builtin_algorithms()
    ctx = algorithms[idx_by_name(algorithms, "CRC32")].new()
    for chunk in (b"hello ", b"world"):
        ctx.update(chunk)
    assert ctx.digest() == zlib.crc32(b"hello world").to_bytes(4, "big")


def test_new_contexts_are_independent():
    algorithms = builtin_algorithms()
    md5 = algorithms[idx_by_name(algorithms, "MD5")]
    first = md5.new()
    first.update(b"x")
    second = md5.new()
    assert second.digest() == hashlib.md5(b"").digest()
    assert first.digest() == hashlib.md5(b"x").digest()


def test_digests_fit_max_size():
    for algorithm in builtin_algorithms():
        assert 0 < len(algorithm.new().digest()) <= MAX_HASH_SIZE


def test_security_flags():
    algorithms = builtin_algorithms()
    by_name = {a.name: a for a in algorithms}
    assert not by_name["MD5"].secure
    assert not by_name["SHA-1"].secure
    assert not by_name["CRC32"].secure
    assert by_name["SHA-256"].secure


def test_extensions_have_no_dot():
    for algorithm in builtin_algorithms():
        assert all(not ext.startswith(".") for ext in algorithm.extensions)


def test_idx_by_name_custom_sequence():
    custom = [
        HashAlgorithm("A", (), True, lambda: hashlib.sha1()),
        HashAlgorithm("B", (), True, lambda: hashlib.sha1()),
    ]
    assert idx_by_name(custom, "B") == 1