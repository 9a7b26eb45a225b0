"""Look up file hashes in the VirusTotal file report service."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

from hashtab.hexutil import hash_bytes_to_string
from hashtab.online import HTTPRequest, HTTPSError, do_https
from hashtab.settings import Settings

VT_SERVER = "www.virustotal.com"
VT_PATH = "/partners/sysinternals/file-reports"
VT_USER_AGENT = "VirusTotal"

TOS_TITLE = "VirusTotal Terms of Service"
TOS_MESSAGE = (
    "You must agree to VirusTotal's terms of service to use this.\n"
    "Do you agree with the VirusTotal Terms of Service?"
)


class _HashedFile(Protocol):
    @property
    def hash_results(self) -> Sequence[bytes]: ...


@dataclass(frozen=True)
class VTResult:
    """The report for one hash; ``file`` is the file it was asked for."""

    permalink: str = ""
    file: Any = None
    positives: int = 0
    total: int = 0
    found: bool = False


def check_for_tos(settings: Settings, ask: Callable[[str], bool]) -> bool:
    """Whether the terms of service are agreed to, asking once if they are not yet.

    ``ask`` is shown the question and returns True when the user agrees; the
    agreement is then saved.
    """
    if not settings.virustotal_tos and ask(TOS_MESSAGE):
        settings.set("virustotal_tos", True)
    return settings.virustotal_tos


def build_query(hashes: Iterable[bytes]) -> str:
    """JSON request body listing ``hashes`` as uppercase hex.

    The list always ends with an entry whose hash is empty.
    """
    entries = [{"hash": hash_bytes_to_string(h)} for h in hashes]
    entries.append({"hash": ""})
    return json.dumps(entries, separators=(",", ":"))


def _is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_reply(body: bytes | str) -> dict[str, VTResult]:
    """Reports in a reply, keyed by the hash string the server echoes back.

    Raises ValueError if the body is not JSON or has no ``data`` list.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        root = json.loads(text)
    except ValueError:
        raise ValueError(f"JSON parse error. Body: {text}") from None

    data = root.get("data") if isinstance(root, dict) else None
    if not isinstance(data, list):
        raise ValueError(f"Malformed reply. Body: {text}")

    results: dict[str, VTResult] = {}
    for entry in data:
        if not isinstance(entry, dict):
            continue
        found = entry.get("found")
        hash_text = entry.get("hash")
        if not isinstance(found, bool) or not isinstance(hash_text, str):
            continue
        if not found:
            results[hash_text] = VTResult()
            continue
        permalink = entry.get("permalink")
        positives = entry.get("positives")
        total = entry.get("total")
        results[hash_text] = VTResult(
            permalink=permalink if isinstance(permalink, str) else "",
            positives=positives if _is_integer(positives) else 0,
            total=total if _is_integer(total) else 0,
            found=True,
        )
    return results


def query(
    files: Iterable[_HashedFile], algorithm: int, api_key: str
) -> list[VTResult]:
    """Ask for reports on each file's ``algorithm`` digest.

    Returns one result per file the server reported on, in file order.
    Raises HTTPSError on transport failure or a non-200 status, ValueError on
    a malformed reply.
    """
    file_list = list(files)
    body = build_query(f.hash_results[algorithm] for f in file_list)
    request = HTTPRequest(
        server_name=VT_SERVER,
        uri=f"{VT_PATH}?apikey={quote(api_key, safe='')}",
        method="POST",
        user_agent=VT_USER_AGENT,
        headers={"Content-Type": "application/json"},
        body=body.encode("utf-8"),
    )
    status, reply = do_https(request)
    if status != 200:
        text = reply.decode("utf-8", errors="replace")
        raise HTTPSError(f"HTTP Status {status} received. Server says: {text}", status=status)

    reports = parse_reply(reply)
    results: list[VTResult] = []
    for f in file_list:
        report = reports.get(hash_bytes_to_string(f.hash_results[algorithm]))
        if report is not None:
            results.append(dataclasses.replace(report, file=f))
    return results