"""One hashing session: a selection of files, its results and what is shown of them."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from os import PathLike

from hashtab.algorithms import HashAlgorithm, builtin_algorithms
from hashtab.exporter import Exporter, make_exporters
from hashtab.hashtask import MATCH_MISMATCH, MATCH_NONE, FileHashTask, hash_files
from hashtab.hexutil import hash_bytes_to_string, hash_string_to_bytes
from hashtab.paths import SUMFILE_NONE, ProcessedFileList, process_everything
from hashtab.settings import Settings

COLUMN_FILENAME = 0
COLUMN_ALGORITHM = 1
COLUMN_HASH = 2

ERROR_LABEL = "Error"
STATUS_DONE = "Done"
STATUS_PROCESSING = "Processing"

RGB = tuple[int, int, int]


class HashColor(Enum):
    """How a result row is coloured."""

    ERROR = "error"
    MATCH = "match"
    INSECURE = "insecure"
    MISMATCH = "mismatch"
    UNKNOWN = "unknown"

    @property
    def text_rgb(self) -> RGB | None:
        """Text colour, or None for the default."""
        return _COLORS[self][0]

    @property
    def background_rgb(self) -> RGB | None:
        """Background colour, or None for the default."""
        return _COLORS[self][1]


_WHITE: RGB = (255, 255, 255)
_COLORS: dict[HashColor, tuple[RGB | None, RGB | None]] = {
    HashColor.ERROR: ((255, 55, 23), None),
    HashColor.MATCH: (_WHITE, (45, 170, 23)),
    HashColor.INSECURE: (_WHITE, (170, 82, 23)),
    HashColor.MISMATCH: (_WHITE, (230, 55, 23)),
    HashColor.UNKNOWN: (None, None),
}


@dataclass(frozen=True)
class Row:
    """One line of the result list."""

    filename: str
    algorithm: str
    hash: str
    task: FileHashTask | None = field(default=None, compare=False, repr=False)
    algorithm_index: int = 0

    def column(self, index: int) -> str:
        """Text of the column at ``index``."""
        columns = (self.filename, self.algorithm, self.hash)
        if not 0 <= index < len(columns):
            raise IndexError(f"no such column: {index}")
        return columns[index]


def color_for_file(
    task: FileHashTask, algorithm_index: int, algorithms: Sequence[HashAlgorithm]
) -> HashColor:
    """Colour of the row showing ``task``'s result for one algorithm."""
    if task.error is not None:
        return HashColor.ERROR
    match = task.match_state
    if match == MATCH_MISMATCH:
        return HashColor.MISMATCH
    if match != MATCH_NONE and match == algorithm_index:
        return HashColor.MATCH if algorithms[algorithm_index].secure else HashColor.INSECURE
    return HashColor.UNKNOWN


def _error_text(error: BaseException) -> str:
    if isinstance(error, OSError) and error.strerror:
        return error.strerror
    return str(error)


class Session:
    """Collects the files of a selection, hashes them and presents the results."""

    def __init__(
        self,
        paths: Iterable[str | PathLike[str]],
        settings: Settings | None = None,
        algorithms: Sequence[HashAlgorithm] | None = None,
    ) -> None:
        self.paths = list(paths)
        self.algorithms = tuple(algorithms) if algorithms is not None else builtin_algorithms()
        self.settings = (
            settings
            if settings is not None
            else Settings(algorithm.name for algorithm in self.algorithms)
        )
        self.processed: ProcessedFileList | None = None
        self.tasks: list[FileHashTask] = []
        self.finished = False
        self.count_match = 0
        self.count_mismatch = 0
        self.count_unknown = 0
        self.count_error = 0
        self._rows: list[Row] = []

    @property
    def is_sumfile(self) -> bool:
        """Whether the selection was a single sumfile."""
        return self.processed is not None and self.processed.sumfile_type != SUMFILE_NONE

    def add_files(self) -> list[FileHashTask]:
        """Expand the selection into hash tasks.

        A selected sumfile of a disabled algorithm enables that algorithm for
        this session only.
        """
        self.processed = process_everything(self.paths, self.settings, self.algorithms)
        sumfile_type = self.processed.sumfile_type
        if sumfile_type >= 0 and not self.settings.algorithms[sumfile_type]:
            self.settings.set_algorithm(self.algorithms[sumfile_type].name, True, save=False)
        enabled = list(self.settings.algorithms)
        self.tasks = [
            FileHashTask(path, info, self.algorithms, enabled)
            for path, info in self.processed.files.items()
        ]
        return self.tasks

    def process_files(self, progress: Callable[[int], None] | None = None) -> list[Row]:
        """Hash every file, adding its rows and counting its outcome."""
        if self.processed is None:
            self.add_files()
        for task in hash_files(self.tasks, progress):
            self._file_finished(task)
        self.finished = True
        return self.rows()

    def _file_finished(self, task: FileHashTask) -> None:
        if task.error is not None:
            self.count_error += 1
            self._rows.append(
                Row(task.display_name, ERROR_LABEL, _error_text(task.error), task, 0)
            )
            return
        if task.match_state == MATCH_NONE:
            self.count_unknown += 1
        elif task.match_state == MATCH_MISMATCH:
            self.count_mismatch += 1
        else:
            self.count_match += 1
        for index, result in enumerate(task.hash_results):
            if result:
                self._rows.append(
                    Row(
                        task.display_name,
                        self.algorithms[index].name,
                        hash_bytes_to_string(result, self.settings.display_uppercase),
                        task,
                        index,
                    )
                )

    def cancel(self) -> None:
        """Ask every task to stop."""
        for task in self.tasks:
            task.cancel()

    def rows(self) -> list[Row]:
        """The result rows, in the order they were added."""
        return list(self._rows)

    def status(self) -> str:
        """Progress line with match, mismatch, unknown and error counts."""
        label = STATUS_DONE if self.finished else STATUS_PROCESSING
        return (
            f"{label} ({self.count_match}/{self.count_mismatch}/"
            f"{self.count_unknown}/{self.count_error})"
        )

    def find_hash(self, text: str) -> str | None:
        """``"<algorithm> / <file>"`` for the first result equal to the hash in ``text``."""
        wanted = hash_string_to_bytes(text)
        for task in self.tasks:
            for index, result in enumerate(task.hash_results):
                if result and result == wanted:
                    return f"{self.algorithms[index].name} / {task.display_name}"
        return None

    def enabled_exporters(self) -> list[Exporter]:
        """Export formats usable with the current settings."""
        return [e for e in make_exporters(self.algorithms) if e.is_enabled(self.settings)]

    def export(self, exporter: Exporter, for_clipboard: bool = False) -> str:
        """Render all results with ``exporter``."""
        return exporter.export(self.settings, for_clipboard, self.tasks)

    def line_text(self, row: Row) -> str:
        """Tab-separated text of one row."""
        return f"{row.filename}\t{row.algorithm}\t{row.hash}"

    def everything_text(self) -> str:
        """Tab-separated text of every row, CRLF terminated."""
        return "".join(self.line_text(row) + "\r\n" for row in self._rows)

    def double_click_text(self, row: Row, column: int) -> str:
        """Text copied on activating ``column`` of ``row``."""
        if column == COLUMN_HASH:
            return row.hash
        return f"{row.hash} *{row.filename}"