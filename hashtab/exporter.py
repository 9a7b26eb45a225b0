"""Writers that turn finished hash results into sumfile text."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Protocol

from hashtab.algorithms import HashAlgorithm, idx_by_name
from hashtab.hexutil import hash_bytes_to_string
from hashtab.settings import Settings

_GENERATOR = "hashtab"
_DOT_HASH_TIMESTAMP = "1970.01.01@00.00:00"
_CRLF = "\r\n"
_LF = "\n"


class HashedFile(Protocol):
    """What an exporter needs to know about a hashed file."""

    @property
    def error(self) -> BaseException | None: ...

    @property
    def display_name(self) -> str: ...

    @property
    def hash_results(self) -> Sequence[bytes]: ...


def iso8601_now() -> str:
    """Current UTC time as ``YYYY-MM-DDTHH:MM:SSZ``."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _banner(settings: Settings, comment: str, line_end: str) -> str:
    first = f"{comment} Generated by {_GENERATOR}"
    if settings.sumfile_banner_date:
        first += f" at {iso8601_now()}"
    return first + line_end + comment + line_end


def _dot_hash_name(algorithm: HashAlgorithm) -> str:
    return algorithm.name.lower().replace("-", "")


def export_sumfile(
    settings: Settings,
    for_clipboard: bool,
    files: Iterable[HashedFile],
    algorithms: Sequence[HashAlgorithm],
    algorithm: int | None,
    dot_hash: bool,
) -> str:
    """Render ``files`` as a ``<hash> *<name>`` sumfile.

    With ``dot_hash`` every enabled algorithm is written in the corz .hash
    layout and ``algorithm`` is ignored; otherwise only ``algorithm`` is.
    Files that failed are left out.
    """
    line_end = _CRLF if for_clipboard or dot_hash or not settings.sumfile_unix_endings else _LF
    separator = "  " if not dot_hash and settings.sumfile_use_double_space else " *"
    uppercase = not dot_hash and settings.sumfile_uppercase
    forward_slashes = not dot_hash and settings.sumfile_forward_slashes
    dot_hash_compatible = dot_hash or settings.sumfile_dot_hash_compatible

    if dot_hash:
        indices = settings.enabled_indices()
    else:
        if algorithm is None:
            raise ValueError("an algorithm index is required unless dot_hash is set")
        indices = [algorithm]

    parts: list[str] = []
    if not for_clipboard and settings.sumfile_banner:
        parts.append(_banner(settings, "#", line_end))

    for file in files:
        if file.error is not None:
            continue
        original = file.display_name
        filename = original.replace("\\", "/") if forward_slashes else original
        for idx in indices:
            digest = hash_bytes_to_string(file.hash_results[idx], uppercase)
            if dot_hash_compatible:
                parts.append(
                    f"#{_dot_hash_name(algorithms[idx])}#{original}#{_DOT_HASH_TIMESTAMP}{line_end}"
                )
            parts.append(f"{digest}{separator}{filename}{line_end}")

    return "".join(parts)


class Exporter(ABC):
    """A sumfile format that hash results can be saved or copied as."""

    name: str
    extension: str

    @abstractmethod
    def is_enabled(self, settings: Settings) -> bool:
        """Whether this format can be produced with the current settings."""

    @abstractmethod
    def export(
        self, settings: Settings, for_clipboard: bool, files: Iterable[HashedFile]
    ) -> str:
        """Render ``files`` in this format."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class SumfileExporter(Exporter):
    """Plain ``<hash> *<name>`` sumfile for a single algorithm."""

    def __init__(self, algorithms: Sequence[HashAlgorithm], index: int) -> None:
        self.algorithms = tuple(algorithms)
        self.index = index
        algorithm = self.algorithms[index]
        self.name = algorithm.name
        self.extension = algorithm.extensions[0] if algorithm.extensions else "sums"

    def is_enabled(self, settings: Settings) -> bool:
        return settings.algorithms[self.index]

    def export(
        self, settings: Settings, for_clipboard: bool, files: Iterable[HashedFile]
    ) -> str:
        return export_sumfile(settings, for_clipboard, files, self.algorithms, self.index, False)


class DotHashExporter(Exporter):
    """Multi-algorithm ``.hash`` file in the corz checksum layout."""

    def __init__(self, algorithms: Sequence[HashAlgorithm]) -> None:
        self.algorithms = tuple(algorithms)
        self.name = ".hash (corz)"
        self.extension = "hash"

    def is_enabled(self, settings: Settings) -> bool:
        return True

    def export(
        self, settings: Settings, for_clipboard: bool, files: Iterable[HashedFile]
    ) -> str:
        return export_sumfile(settings, for_clipboard, files, self.algorithms, None, True)


class SFVExporter(Exporter):
    """Simple File Verification listing of CRC32 values."""

    def __init__(self, algorithms: Sequence[HashAlgorithm]) -> None:
        self.algorithms = tuple(algorithms)
        self.name = "SFV (CRC32)"
        self.extension = "sfv"
        self._crc32 = idx_by_name(self.algorithms, "CRC32")

    def is_enabled(self, settings: Settings) -> bool:
        return settings.algorithms[self._crc32]

    def export(
        self, settings: Settings, for_clipboard: bool, files: Iterable[HashedFile]
    ) -> str:
        line_end = _CRLF if for_clipboard or not settings.sumfile_unix_endings else _LF
        parts: list[str] = []
        if not for_clipboard and settings.sumfile_banner:
            parts.append(_banner(settings, ";", line_end))
        for file in files:
            if file.error is not None:
                continue
            filename = file.display_name
            if settings.sumfile_forward_slashes:
                filename = filename.replace("\\", "/")
            digest = hash_bytes_to_string(
                file.hash_results[self._crc32], settings.sumfile_uppercase
            )
            parts.append(f"{filename} {digest}{line_end}")
        return "".join(parts)


def make_exporters(algorithms: Sequence[HashAlgorithm]) -> list[Exporter]:
    """One sumfile exporter per algorithm, then the .hash and SFV exporters."""
    algorithms = tuple(algorithms)
    exporters: list[Exporter] = [
        SumfileExporter(algorithms, index) for index in range(len(algorithms))
    ]
    exporters.append(DotHashExporter(algorithms))
    exporters.append(SFVExporter(algorithms))
    return exporters