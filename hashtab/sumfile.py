"""Parser for checksum files of the ``<hex hash> *<file name>`` form."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from os import PathLike
from pathlib import Path

from hashtab.algorithms import MAX_HASH_SIZE
from hashtab.hexutil import unhex

MAX_SUMFILE_SIZE = 1 << 20

_CR = 0x0D
_LF = 0x0A
_NUL = 0x00
_SPACE = 0x20
_STAR = 0x2A
_HASH_SIGN = 0x23
_BOM = (0xEF, 0xBB, 0xBF)


@dataclass(frozen=True)
class FileSum:
    """One entry of a sumfile: the file name and its expected hash."""

    filename: str
    hash: bytes


class _State(Enum):
    FILE_BEGIN = auto()
    BOM1 = auto()
    BOM2 = auto()
    LINE_BEGIN = auto()
    COMMENT = auto()
    HASH1 = auto()
    HASH2 = auto()
    SPACE = auto()
    SPACE_OR_STAR = auto()
    FILE_NAME = auto()
    INVALID = auto()


class SumFileParser:
    """Byte-at-a-time state machine; feed ``None`` to signal end of input."""

    def __init__(self, max_hash_size: int = MAX_HASH_SIZE) -> None:
        self.max_hash_size = max_hash_size
        self.files: list[FileSum] = []
        self._state = _State.FILE_BEGIN
        self._hash = bytearray()
        self._filename = bytearray()
        self._half_byte = 0

    @staticmethod
    def _hex(c: int | None) -> int | None:
        return None if c is None else unhex(c)

    def process(self, c: int | None) -> bool:
        """Consume one byte (or ``None`` for end of input); False once invalid."""
        state = self._state
        line_end = c in (_CR, _LF) or c is None

        if state is _State.FILE_BEGIN:
            if c == _BOM[0]:
                self._state = _State.BOM1
            else:
                self._state = _State.LINE_BEGIN
                self.process(c)
        elif state is _State.BOM1:
            self._state = _State.BOM2 if c == _BOM[1] else _State.INVALID
        elif state is _State.BOM2:
            self._state = _State.LINE_BEGIN if c == _BOM[2] else _State.INVALID
        elif state is _State.LINE_BEGIN:
            if line_end:
                pass
            elif c == _HASH_SIGN:
                self._state = _State.COMMENT
            elif self._hex(c) is not None:
                self._state = _State.HASH1
                self.process(c)
            else:
                self._state = _State.INVALID
        elif state is _State.COMMENT:
            if c in (_CR, _LF):
                self._state = _State.LINE_BEGIN
        elif state is _State.HASH1:
            nibble = self._hex(c)
            if nibble is not None:
                self._half_byte = nibble << 4
                self._state = _State.HASH2
            else:
                self._state = _State.SPACE
                self.process(c)
        elif state is _State.HASH2:
            nibble = self._hex(c)
            if nibble is not None:
                self._hash.append(self._half_byte | nibble)
                self._state = (
                    _State.SPACE if len(self._hash) > self.max_hash_size else _State.HASH1
                )
            else:
                self._state = _State.INVALID
        elif state is _State.SPACE:
            if c == _SPACE:
                self._state = _State.SPACE_OR_STAR
            elif line_end:
                # A line holding only a hash is accepted, with no file name.
                self._state = _State.FILE_NAME
                self.process(c)
            else:
                self._state = _State.INVALID
        elif state is _State.SPACE_OR_STAR:
            self._state = _State.FILE_NAME if c in (_SPACE, _STAR) else _State.INVALID
        elif state is _State.FILE_NAME:
            if line_end:
                self.files.append(
                    FileSum(self._filename.decode("utf-8", errors="replace"), bytes(self._hash))
                )
                self._filename = bytearray()
                self._hash = bytearray()
                self._state = _State.LINE_BEGIN
            elif c == _NUL:
                self._state = _State.INVALID
            else:
                self._filename.append(c)

        return self._state is not _State.INVALID


def parse_sumfile(data: bytes, max_hash_size: int = MAX_HASH_SIZE) -> list[FileSum]:
    """Parse sumfile content; an invalid or non-sumfile input yields an empty list."""
    parser = SumFileParser(max_hash_size)
    for byte in data:
        if not parser.process(byte):
            break
    if parser.process(None):
        return parser.files
    return []


def try_parse_sumfile(
    path: str | PathLike[str], max_hash_size: int = MAX_HASH_SIZE
) -> list[FileSum]:
    """Parse the sumfile at ``path``.

    Empty files and files over 1 MiB give an empty list. Raises OSError if the
    file cannot be read.
    """
    file_path = Path(path)
    size = file_path.stat().st_size
    if size == 0 or size > MAX_SUMFILE_SIZE:
        return []
    return parse_sumfile(file_path.read_bytes(), max_hash_size)