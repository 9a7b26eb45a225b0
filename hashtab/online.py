"""HTTPS requests and the check for a newer release."""

from __future__ import annotations

import http.client
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from hashtab.hexutil import Version

_VERSION_PATTERN = re.compile(r"v(\d+)\.(\d+)\.(\d+)")
_UPDATE_USER_AGENT = "hashtab-update-checker"


class HTTPSError(Exception):
    """A request failed, or the server answered with an unexpected status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass
class HTTPRequest:
    """One HTTPS request to ``server_name`` on the default port."""

    server_name: str
    uri: str
    method: str = "GET"
    user_agent: str = "hashtab"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    timeout: float | None = 30.0


def do_https(request: HTTPRequest) -> tuple[int, bytes]:
    """Send ``request`` and return the status code and the whole response body.

    Raises HTTPSError if the request cannot be completed.
    """
    connection = http.client.HTTPSConnection(request.server_name, timeout=request.timeout)
    try:
        headers = {"User-Agent": request.user_agent, **request.headers}
        connection.request(
            request.method, request.uri, body=request.body or None, headers=headers
        )
        response = connection.getresponse()
        return response.status, response.read()
    except (OSError, http.client.HTTPException) as exc:
        raise HTTPSError(f"request to {request.server_name} failed: {exc}") from exc
    finally:
        connection.close()


def _text(body: bytes | str) -> str:
    return body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body


def parse_latest_version(body: bytes | str) -> Version:
    """Read the version from the ``name`` of the first tag in a JSON tag list.

    Raises ValueError if the body is not such a list or the name is not of
    the ``v<major>.<minor>.<patch>`` form.
    """
    text = _text(body)
    try:
        root = json.loads(text)
    except ValueError:
        raise ValueError(f"JSON parse error. Body: {text}") from None

    if (
        not isinstance(root, list)
        or not root
        or not isinstance(root[0], dict)
        or not isinstance(root[0].get("name"), str)
    ):
        raise ValueError(f"Malformed reply. Body: {text}")

    name = root[0]["name"]
    match = _VERSION_PATTERN.match(name)
    if match is None:
        raise ValueError(f"Malformed version number: {name}")
    try:
        return Version(*(int(part) for part in match.groups()))
    except ValueError:
        raise ValueError(f"Malformed version number: {name}") from None


def get_latest_version(server_name: str, uri: str) -> Version:
    """Ask the server for its tag list and return the newest release version.

    Raises HTTPSError on transport failure or a non-200 status, ValueError on
    a malformed reply.
    """
    request = HTTPRequest(
        server_name=server_name,
        uri=uri,
        method="GET",
        user_agent=_UPDATE_USER_AGENT,
        headers={"Content-Type": "application/json", "Accept": "application/json"},
    )
    status, body = do_https(request)
    if status != 200:
        raise HTTPSError(
            f"HTTP Status {status} received. Server says: {_text(body)}", status=status
        )
    return parse_latest_version(body)