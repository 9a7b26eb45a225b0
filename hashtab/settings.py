"""Persistent user settings: enabled algorithms and sumfile options."""

from __future__ import annotations

import json
from collections.abc import Iterable
from os import PathLike
from pathlib import Path

_DWORD_MAX = 0xFFFFFFFF

DEFAULT_ALGORITHMS = frozenset({"MD5", "SHA-1", "SHA-256", "SHA-512"})

SETTING_OPTIONS: dict[str, tuple[str, bool]] = {
    "display_uppercase": ("DisplayUppercase", True),
    "look_for_sumfiles": ("LookForSumfiles", False),
    "sumfile_uppercase": ("SumfileUppercase", True),
    "sumfile_unix_endings": ("SumfileLF", True),
    "sumfile_use_double_space": ("SumfileDoubleSpace", False),
    "sumfile_forward_slashes": ("SumfileForwardSlash", True),
    "sumfile_dot_hash_compatible": ("SumfileDotHashCompat", True),
    "sumfile_banner": ("SumfileBanner", True),
    "sumfile_banner_date": ("SumfileBannerDate", False),
    "virustotal_tos": ("VTToS", False),
}
"""Option attribute name to (storage key, default value)."""


class SettingsStore:
    """Named unsigned 32-bit values, kept in a JSON file or in memory."""

    def __init__(self, path: str | PathLike[str] | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._memory: dict[str, int] = {}

    def _load(self) -> dict[str, object]:
        if self._path is None:
            return dict(self._memory)
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, name: str, default: int) -> int:
        """Stored value for ``name``, or ``default`` if absent or unusable."""
        value = self._load().get(name)
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= _DWORD_MAX:
            return value
        return int(default)

    def set(self, name: str, value: int) -> None:
        """Store ``value`` under ``name``."""
        value = int(value)
        if not 0 <= value <= _DWORD_MAX:
            raise ValueError(f"setting value out of range: {value}")
        self._memory[name] = value
        if self._path is None:
            return
        data = self._load()
        data[name] = value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        except OSError:
            # A failed save leaves the in-session value in effect.
            pass


class Settings:
    """User preferences, loaded from a store and saved back on change."""

    display_uppercase: bool
    look_for_sumfiles: bool
    sumfile_uppercase: bool
    sumfile_unix_endings: bool
    sumfile_use_double_space: bool
    sumfile_forward_slashes: bool
    sumfile_dot_hash_compatible: bool
    sumfile_banner: bool
    sumfile_banner_date: bool
    virustotal_tos: bool

    def __init__(
        self, algorithm_names: Iterable[str], store: SettingsStore | None = None
    ) -> None:
        self.store = store if store is not None else SettingsStore()
        self.algorithm_names = tuple(algorithm_names)
        self.algorithms = [
            bool(self.store.get(name, name in DEFAULT_ALGORITHMS))
            for name in self.algorithm_names
        ]
        for attribute, (key, default) in SETTING_OPTIONS.items():
            setattr(self, attribute, bool(self.store.get(key, default)))

    def _algorithm_position(self, name: str) -> int:
        try:
            return self.algorithm_names.index(name)
        except ValueError:
            raise KeyError(f"unknown hash algorithm: {name}") from None

    def is_algorithm_enabled(self, name: str) -> bool:
        """Whether the algorithm called ``name`` is enabled."""
        return self.algorithms[self._algorithm_position(name)]

    def set_algorithm(self, name: str, enabled: bool, save: bool = True) -> None:
        """Enable or disable an algorithm; with ``save`` false only for this session."""
        self.algorithms[self._algorithm_position(name)] = bool(enabled)
        if save:
            self.store.set(name, int(bool(enabled)))

    def set(self, name: str, value: bool) -> None:
        """Change an option by attribute name and save it."""
        if name not in SETTING_OPTIONS:
            raise KeyError(f"unknown setting: {name}")
        key, _ = SETTING_OPTIONS[name]
        setattr(self, name, bool(value))
        self.store.set(key, int(bool(value)))

    def enabled_indices(self) -> list[int]:
        """Indices of the enabled algorithms, in order."""
        return [i for i, enabled in enumerate(self.algorithms) if enabled]