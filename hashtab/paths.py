"""Turn a selection of paths into the list of files to hash.

Directories are expanded, and a single selected sumfile is read so that the
files it lists are hashed and checked against it.
"""

from __future__ import annotations

import os
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from os import PathLike

from hashtab.algorithms import HashAlgorithm, builtin_algorithms
from hashtab.settings import Settings
from hashtab.sumfile import FileSum, try_parse_sumfile

SUMFILE_NONE = -2
"""The selection is not a sumfile."""

SUMFILE_UNKNOWN = -1
"""The selection is a sumfile of an algorithm not known from its extension."""


@dataclass
class FileInfo:
    """A file to hash: where it is shown and the hashes it should have."""

    relative_path: str = ""
    expected_hashes: list[bytes] = field(default_factory=list)


@dataclass
class ProcessedFileList:
    """The files to hash, keyed by normalized path.

    ``sumfile_type`` is SUMFILE_NONE, SUMFILE_UNKNOWN or the index of the
    algorithm the selected sumfile belongs to. ``base_path`` is the directory
    that supposedly holds every file, ending with a separator, or empty.
    """

    sumfile_type: int = SUMFILE_NONE
    base_path: str = ""
    files: dict[str, FileInfo] = field(default_factory=dict)


def normalize_path(path: str | PathLike[str]) -> str:
    """Absolute form of ``path`` with redundant separators and dot segments removed."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def _read_sums(path: str) -> list[FileSum]:
    try:
        return try_parse_sumfile(path)
    except OSError:
        return []


def _relative(normalized: str, base: str) -> str:
    if normalized.startswith(base):
        return normalized[len(base):]
    return normalized


def _last_separator(text: str) -> int:
    positions = [text.rfind(os.sep)]
    if os.altsep:
        positions.append(text.rfind(os.altsep))
    return max(positions)


def _common_base(paths: Sequence[str]) -> str:
    ordered = sorted(paths)
    prefix = os.path.commonprefix([ordered[0], ordered[-1]])
    cut = _last_separator(prefix)
    return prefix[:cut] if cut >= 0 else prefix


def _sumfile_type(name: str, algorithms: Sequence[HashAlgorithm]) -> int:
    sumfile_type = SUMFILE_UNKNOWN
    extension = os.path.splitext(name)[1]
    if extension.startswith("."):
        for position, algorithm in enumerate(algorithms):
            if extension[1:] in algorithm.extensions:
                sumfile_type = position
    return sumfile_type


def process_everything(
    paths: Iterable[str | PathLike[str]],
    settings: Settings,
    algorithms: Sequence[HashAlgorithm] | None = None,
) -> ProcessedFileList:
    """Build the list of files to hash from the selected ``paths``.

    Raises ValueError if no path is given.
    """
    algorithms = tuple(algorithms) if algorithms is not None else builtin_algorithms()
    items = [os.path.abspath(os.fspath(p)) for p in paths]
    if not items:
        raise ValueError("no paths given")

    result = ProcessedFileList()
    listed: list[tuple[str, bytes]] = []

    if len(items) == 1:
        path = items[0]
        name = os.path.basename(path)
        sumfile_base = path[: len(path) - len(name)]
        # With a single selection, its directory holds every file.
        result.base_path = sumfile_base
        sums = _read_sums(path)
        if sums:
            result.sumfile_type = _sumfile_type(name, algorithms)
            # An entry without a file name is not allowed in a selected sumfile.
            listed = [(sumfile_base + s.filename, s.hash) for s in sums if s.filename]
    else:
        result.base_path = _common_base(items)

    if result.base_path:
        base = normalize_path(result.base_path)
        if not base.endswith(os.sep):
            base += os.sep
        result.base_path = base

    for path, expected in listed:
        normalized = normalize_path(path)
        info = result.files.get(normalized)
        if info is None:
            result.files[normalized] = FileInfo(
                _relative(normalized, result.base_path), [expected]
            )
        else:
            info.expected_hashes.append(expected)

    pending = deque(items)
    while pending:
        normalized = normalize_path(pending.popleft())
        if os.path.isdir(normalized):
            try:
                with os.scandir(normalized) as entries:
                    children = sorted(e.name for e in entries if not e.is_symlink())
            except OSError:
                # Unlistable directories are hashed as files so an error shows up.
                pass
            else:
                pending.extend(os.path.join(normalized, child) for child in children)
                continue

        info = FileInfo(_relative(normalized, result.base_path))
        # A selected sumfile already supplies expectations; don't look further.
        if result.sumfile_type == SUMFILE_NONE and settings.look_for_sumfiles:
            for enabled, algorithm in zip(settings.algorithms, algorithms):
                if not enabled:
                    continue
                for extension in algorithm.extensions:
                    sums = _read_sums(f"{normalized}.{extension}")
                    info.expected_hashes.extend(s.hash for s in sums)
        result.files.setdefault(normalized, info)

    return result