import pytest

from hashtab.sumfile import (
    MAX_SUMFILE_SIZE,
    FileSum,
    SumFileParser,
    parse_sumfile,
    try_parse_sumfile,
)

MD5_EMPTY = "d41d8cd98f00b204e9800998ecf8427e"


def test_single_line_star():
    result = parse_sumfile(f"{MD5_EMPTY} *file.txt\n".encode())
    assert result == [FileSum("file.txt", bytes.fromhex(MD5_EMPTY))]


def test_double_space_and_crlf():
    data = f"{MD5_EMPTY}  a.bin\r\nAABB  b.bin\r\n".encode()
    result = parse_sumfile(data)
    assert [r.filename for r in result] == ["a.bin", "b.bin"]
    assert result[1].hash == bytes.fromhex("aabb")


def test_no_trailing_newline():
    result = parse_sumfile(b"0102 *x")
    assert result == [FileSum("x", b"\x01\x02")]


def test_bom_and_comments():
    data = b"\xef\xbb\xbf# Generated\n#\n0a0b *dir/file\n"
    assert parse_sumfile(data) == [FileSum("dir/file", b"\x0a\x0b")]


def test_hash_only_line():
    assert parse_sumfile(f"{MD5_EMPTY}\n".encode()) == [
        FileSum("", bytes.fromhex(MD5_EMPTY))
    ]


def test_utf8_filename():
    name = "f\u00e9.txt"
    result = parse_sumfile(b"00 *" + name.encode("utf-8"))
    assert result[0].filename == name


@pytest.mark.parametrize(
    "data",
    [
        b"not a sumfile\n",
        b"abc *odd\n",
        b"00 *bad\x00name\n",
        b"\xef\xbb\x00 00 *x\n",
        b"0011x\n",
        b"0011 -x\n",
    ],
)
def test_invalid_inputs_give_empty(data):
    assert parse_sumfile(data) == []


def test_empty_input():
    assert parse_sumfile(b"") == []


def test_blank_lines_are_skipped():
    result = parse_sumfile(b"\n\r\n00 *a\n\n11 *b\n")
    assert [r.filename for r in result] == ["a", "b"]


def test_hash_length_limit():
    assert parse_sumfile(b"aabbcc x\n", max_hash_size=2) == []
    assert parse_sumfile(b"aabbccdd *x\n", max_hash_size=2) == []
    assert parse_sumfile(b"aabb *x\n", max_hash_size=2) == [FileSum("x", b"\xaa\xbb")]


def test_parser_reports_invalid_state():
    parser = SumFileParser()
    assert parser.process(ord("z")) is False
    assert parser.process(None) is False


def test_parser_streaming():
    parser = SumFileParser()
    for byte in b"ff *name":
        assert parser.process(byte)
    assert parser.process(None)
    assert parser.files == [FileSum("name", b"\xff")]


def test_try_parse_file(tmp_path):
    path = tmp_path / "sums.md5"
    path.write_bytes(f"{MD5_EMPTY} *empty\n".encode())
    assert try_parse_sumfile(path) == [FileSum("empty", bytes.fromhex(MD5_EMPTY))]


def test_try_parse_empty_file(tmp_path):
    path = tmp_path / "empty.md5"
    path.write_bytes(b"")
    assert try_parse_sumfile(path) == []


def test_try_parse_too_large(tmp_path):
    path = tmp_path / "big.md5"
    line = b"00 *x\n"
    path.write_bytes(line * (MAX_SUMFILE_SIZE // len(line) + 1))
    assert try_parse_sumfile(path) == []


def test_try_parse_missing(tmp_path):
    with pytest.raises(OSError):
        try_parse_sumfile(tmp_path / "absent.md5")