"""Hashing of a single file with every enabled algorithm, and of many in parallel."""

from __future__ import annotations

import errno
import os
import threading
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from os import PathLike
from typing import Protocol

from hashtab.algorithms import HashAlgorithm, HashContext

BLOCK_SIZE = 2 << 20
"""Bytes read and hashed at a time."""

MAX_BLOCKS = 512
"""Most blocks held in memory at once across all tasks."""

MATCH_NONE = -1
MATCH_MISMATCH = -2

_block_slots = threading.BoundedSemaphore(MAX_BLOCKS)

Progress = Callable[[int], None]


class FileInfoLike(Protocol):
    """Where a file is shown and which hashes it is expected to have."""

    @property
    def relative_path(self) -> str: ...

    @property
    def expected_hashes(self) -> Sequence[bytes]: ...


class FileHashTask:
    """Hashes one file with the enabled algorithms and checks expected hashes.

    After :meth:`run`, ``error`` holds the OSError that stopped it (or None),
    ``hash_results`` holds one digest per algorithm (empty for disabled ones)
    and ``match_state`` is an algorithm index, MATCH_NONE or MATCH_MISMATCH.
    """

    def __init__(
        self,
        path: str | PathLike[str],
        file_info: FileInfoLike,
        algorithms: Sequence[HashAlgorithm],
        enabled: Sequence[bool],
    ) -> None:
        self.path = os.fspath(path)
        self.file_info = file_info
        self.algorithms = tuple(algorithms)
        if len(enabled) != len(self.algorithms):
            raise ValueError("enabled must have one entry per algorithm")
        self.enabled = tuple(bool(e) for e in enabled)
        self.hash_results: tuple[bytes, ...] = tuple(b"" for _ in self.algorithms)
        self.match_state = MATCH_NONE
        self.error: OSError | None = None
        self.size = 0
        self._cancelled = threading.Event()
        try:
            self.size = os.stat(self.path).st_size
        except OSError as exc:
            self.error = exc

    @property
    def display_name(self) -> str:
        return self.file_info.relative_path

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Ask a running or pending task to stop at the next block."""
        self._cancelled.set()

    def _cancel_error(self) -> OSError:
        return OSError(errno.ECANCELED, "Operation cancelled", self.path)

    def run(self, progress: Progress | None = None) -> None:
        """Hash the file; ``progress`` is called with the size of each block hashed."""
        contexts: list[HashContext | None] = [
            algorithm.new() if on else None
            for algorithm, on in zip(self.algorithms, self.enabled)
        ]
        if self.error is None:
            try:
                self._read_all(contexts, progress)
            except OSError as exc:
                self.error = exc
        self._finish(contexts)

    def _read_all(self, contexts: list[HashContext | None], progress: Progress | None) -> None:
        if self.cancelled:
            self.error = self._cancel_error()
            return
        remaining = self.size
        with open(self.path, "rb") as stream:
            while True:
                with _block_slots:
                    block = stream.read(min(remaining, BLOCK_SIZE))
                    for ctx in contexts:
                        if ctx is not None:
                            ctx.update(block)
                if progress is not None:
                    progress(len(block))
                remaining -= len(block)
                if self.cancelled:
                    self.error = self._cancel_error()
                    return
                if remaining <= 0 or not block:
                    return

    def _finish(self, contexts: list[HashContext | None]) -> None:
        if self.error is not None:
            return
        expected = list(self.file_info.expected_hashes)
        self.match_state = MATCH_NONE if not expected else MATCH_MISMATCH
        results: list[bytes] = []
        for i, ctx in enumerate(contexts):
            result = ctx.digest() if ctx is not None else b""
            results.append(result)
            for want in expected:
                if self.match_state != MATCH_NONE and result == want:
                    # A secure algorithm's match takes precedence over an insecure one.
                    if (
                        self.match_state == MATCH_MISMATCH
                        or not self.algorithms[self.match_state].secure
                    ):
                        self.match_state = i
        self.hash_results = tuple(results)

    def __repr__(self) -> str:
        return f"FileHashTask({self.path!r}, error={self.error!r}, match_state={self.match_state})"


def hash_files(
    tasks: Iterable[FileHashTask],
    progress: Progress | None = None,
    workers: int | None = None,
) -> list[FileHashTask]:
    """Run every task on a thread pool and return them once all are done.

    ``progress`` may be called from several threads at once.
    """
    task_list = list(tasks)
    if not task_list:
        return task_list
    with ThreadPoolExecutor(max_workers=workers) as pool:
        for future in [pool.submit(task.run, progress) for task in task_list]:
            future.result()
    return task_list