"""Hex encoding of hash digests, version numbers and small path/file helpers."""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from pathlib import Path

_ICON_SIZES = (256, 192, 128, 96, 64, 48, 40, 32, 24, 16)
_LONG_PATH_PREFIX = "\\\\?\\"
_UNC_PREFIX = "\\\\"
_U16_MAX = 0xFFFF


@dataclass(frozen=True, order=True)
class Version:
    """A three-part release number, each part an unsigned 16-bit value."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __post_init__(self) -> None:
        for field_name in ("major", "minor", "patch"):
            value = getattr(self, field_name)
            if not 0 <= value <= _U16_MAX:
                raise ValueError(f"{field_name} must be in 0..65535, got {value}")

    def as_number(self) -> int:
        """Pack the version into a single integer that orders like the version."""
        return (self.major << 32) | (self.minor << 16) | self.patch


def hex_digit(n: int, upper: bool = True) -> str:
    """Return the hex digit for a nibble value 0..15."""
    if not 0 <= n <= 0xF:
        raise ValueError(f"nibble out of range: {n}")
    if n < 0xA:
        return chr(ord("0") + n)
    return chr(ord("A" if upper else "a") + n - 0xA)


def unhex(ch: str | int) -> int | None:
    """Return the value of a hex digit, or None if it is not one.

    Accepts a one-character string or a character code.
    """
    code = ord(ch) if isinstance(ch, str) else ch
    if code >= 0x80 or code <= 0:
        return None
    if ord("0") <= code <= ord("9"):
        return code - ord("0")
    if ord("a") <= code <= ord("f"):
        return code - ord("a") + 0xA
    if ord("A") <= code <= ord("F"):
        return code - ord("A") + 0xA
    return None


def hash_bytes_to_string(data: bytes, upper: bool = True) -> str:
    """Render digest bytes as a hex string."""
    return "".join(
        hex_digit(b >> 4, upper) + hex_digit(b & 0xF, upper) for b in data
    )


def hash_string_to_bytes(text: str) -> bytes:
    """Extract the first run of hex digits in ``text`` as bytes.

    Leading non-hex characters are skipped. The run ends at the first non-hex
    character; if that character falls in the middle of a byte, the result is
    empty. A lone trailing nibble at the end of the text is dropped.
    """
    start = next(
        (pos for pos, ch in enumerate(text) if unhex(ch) is not None), len(text)
    )
    result = bytearray()
    high = 0
    for i, ch in enumerate(text[start:]):
        nibble = unhex(ch)
        if nibble is None:
            if i % 2 == 0:
                break
            return b""
        if i % 2 == 0:
            high = nibble << 4
        else:
            result.append(high | nibble)
    return bytes(result)


def floor_icon_size(size: int) -> int:
    """Round down to the nearest standard icon size; smaller sizes are kept."""
    return next((v for v in _ICON_SIZES if size >= v), size)


def make_path_long_compatible(path: str) -> str:
    """Prefix a path for long-path access unless it already starts with two backslashes."""
    if path.startswith(_UNC_PREFIX):
        return path
    return _LONG_PATH_PREFIX + path


def save_bytes_as_file(path: str | PathLike[str], data: bytes) -> None:
    """Write ``data`` to ``path``, replacing any existing file.

    Raises OSError if the file cannot be created or written.
    """
    Path(path).write_bytes(data)