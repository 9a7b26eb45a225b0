"""Command line entry: hash the given files and show the results."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from hashtab.algorithms import builtin_algorithms
from hashtab.session import Session
from hashtab.settings import Settings, SettingsStore


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashtab", description="Compute and verify file hashes."
    )
    parser.add_argument("paths", nargs="*", help="files or directories to hash")
    parser.add_argument("--settings", help="JSON file holding saved settings")
    parser.add_argument(
        "--enable", action="append", default=[], metavar="ALGORITHM",
        help="enable an algorithm for this run",
    )
    parser.add_argument(
        "--disable", action="append", default=[], metavar="ALGORITHM",
        help="disable an algorithm for this run",
    )
    parser.add_argument("--export", metavar="FORMAT", help="print results in this sumfile format")
    parser.add_argument("--check", metavar="HASH", help="look for a result equal to this hash")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Hash the files named on the command line and print the results."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.paths:
        return 0

    algorithms = builtin_algorithms()
    store = SettingsStore(args.settings) if args.settings else SettingsStore()
    settings = Settings((a.name for a in algorithms), store)
    for names, enabled in ((args.enable, True), (args.disable, False)):
        for name in names:
            try:
                settings.set_algorithm(name, enabled, save=False)
            except KeyError:
                parser.error(f"unknown algorithm: {name}")

    session = Session(args.paths, settings, algorithms)
    session.add_files()
    session.process_files()

    out = sys.stdout
    if args.export is not None:
        exporter = next(
            (e for e in session.enabled_exporters() if e.name == args.export), None
        )
        if exporter is None:
            parser.error(f"unavailable export format: {args.export}")
        out.write(session.export(exporter, for_clipboard=False))
    else:
        for row in session.rows():
            out.write(session.line_text(row) + "\n")
        out.write(session.status() + "\n")

    if args.check is not None:
        found = session.find_hash(args.check)
        out.write((found if found is not None else "No match") + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())