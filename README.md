# hashtab

Compute checksums of files and folders, check them against sumfiles, and
export the results in common checksum formats. Only the standard library is
needed.

## Features

- Hashes files with several algorithms at once (CRC32, MD5, SHA-1, SHA-224,
  SHA-256, SHA-384, SHA-512, SHA3-256, SHA3-512, BLAKE2b-512, BLAKE2s-256),
  block by block, on a thread pool. MD5, SHA-1, SHA-256 and SHA-512 are
  enabled by default.
- Reads sumfiles (`<hash> *<file>` or `<hash>  <file>` lines, `#` comments,
  optional UTF-8 BOM, files up to 1 MiB) and checks files against the hashes
  they list. A single selected sumfile is expanded into the files it names;
  if its extension (for example `.sha256`) belongs to a disabled algorithm,
  that algorithm is enabled for the run.
- Optionally looks for a sumfile next to each file (for example
  `file.iso.sha256`) when the `LookForSumfiles` setting is on.
- Colours results as match, insecure match (CRC32, MD5, SHA-1), mismatch,
  error or unknown (`hashtab.session.HashColor`).
- Exports results as per-algorithm sumfiles, `SFV (CRC32)` files or
  `.hash (corz)` files, with configurable line endings, case, separators,
  slashes and a banner.
- Finds which file and algorithm produced a given hash string.
- Can look hashes up in the VirusTotal file report service and check a
  server's tag list for a newer release.

## Installation

```
pip install .
```

## Command line

```
hashtab path/to/file.iso another/folder
```

Directories are walked recursively (symbolic links are skipped). Each result
line shows the file name, the algorithm and the hash separated by tabs,
followed by a status line `Done (matches/mismatches/unknown/errors)`.

Pass a single sumfile to verify the files it lists:

```
hashtab checksums.sha256
```

Options:

- `--enable NAME` / `--disable NAME` — turn an algorithm on or off for this
  run (repeatable; names as listed above, e.g. `SHA3-256`).
- `--export FORMAT` — print the results in a sumfile format instead of the
  result lines. `FORMAT` is an enabled algorithm name, `.hash (corz)` or
  `SFV (CRC32)`.
- `--check HASH` — print `<algorithm> / <file>` for the first result equal
  to `HASH`, or `No match`.
- `--settings FILE` — read settings from a JSON file. Without it the built-in
  defaults are used.

Run without paths, the command does nothing.

## Settings file

The JSON settings file maps keys to integer values (0 or 1). Algorithm keys
are the algorithm names; the options are `DisplayUppercase`,
`LookForSumfiles`, `SumfileUppercase`, `SumfileLF`, `SumfileDoubleSpace`,
`SumfileForwardSlash`, `SumfileDotHashCompat`, `SumfileBanner`,
`SumfileBannerDate` and `VTToS`. `Settings.set` and `Settings.set_algorithm`
write changes back through `SettingsStore`.

```json
{"LookForSumfiles": 1, "SHA3-256": 1, "SumfileLF": 0}
```

## Library use

```python
from hashtab.algorithms import builtin_algorithms
from hashtab.settings import Settings
from hashtab.session import Session

algorithms = builtin_algorithms()
settings = Settings([a.name for a in algorithms])
session = Session(["path/to/file.iso"], settings, algorithms)
session.add_files()
session.process_files()

for row in session.rows():
    print(session.line_text(row))

print(session.status())

for exporter in session.enabled_exporters():
    print(exporter.name)
    print(session.export(exporter, for_clipboard=False))
```

Sumfiles can also be parsed directly:

```python
from hashtab.sumfile import parse_sumfile

for entry in parse_sumfile(b"d41d8cd98f00b204e9800998ecf8427e *empty.txt\n"):
    print(entry.filename, entry.hash.hex())
```

Other modules:

- `hashtab.hexutil` — hex encoding and decoding of digests
  (`hash_bytes_to_string`, `hash_string_to_bytes`) and the `Version` type.
- `hashtab.hashtask` — `FileHashTask` and `hash_files` for hashing without a
  session.
- `hashtab.paths` — `process_everything`, which turns a selection into the
  files to hash.
- `hashtab.online` — `do_https` and `get_latest_version(server_name, uri)`,
  which reads the first tag of a JSON tag list (`v<major>.<minor>.<patch>`).
- `hashtab.virustotal` — `check_for_tos` and `query(files, algorithm,
  api_key)`; you supply your own API key.
- `hashtab.bits` — bit and word helpers and constants for BLAKE3.

## What it does not do

- There is no graphical window, clipboard access or save dialog; the
  "clipboard" form of an export is only the text, with CRLF line endings and
  no banner.
- BLAKE3 is not among the hash algorithms; `hashtab.bits` holds helper
  functions only.
- The command line does not offer the update check or VirusTotal lookups;
  use the library functions for those.

## Running the tests

```
pip install .[test]
pytest
```