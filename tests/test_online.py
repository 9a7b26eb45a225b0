from unittest.mock import patch

import pytest

from hashtab.hexutil import Version
from hashtab.online import (
    HTTPRequest,
    HTTPSError,
    do_https,
    get_latest_version,
    get_latest_version as _get_latest,
    parse_latest_version,
)


def test_parse_latest_version_from_bytes():
    assert parse_latest_version(b'[{"name":"v1.2.3"},{"name":"v1.2.2"}]') == Version(1, 2, 3)


def test_parse_latest_version_from_text_ignores_suffix():
    assert parse_latest_version('[{"name":"v2.0.1-beta"}]') == Version(2, 0, 1)


def test_parse_latest_version_rejects_invalid_json():
    with pytest.raises(ValueError, match="JSON parse error"):
        parse_latest_version("not json")


@pytest.mark.parametrize(
    "body",
    [
        '{"name":"v1.2.3"}',
        "[]",
        '["v1.2.3"]',
        '[{"name":5}]',
        '[{"other":"v1.2.3"}]',
    ],
)
def test_parse_latest_version_rejects_malformed_reply(body):
    with pytest.raises(ValueError, match="Malformed reply"):
        parse_latest_version(body)


@pytest.mark.parametrize("name", ["1.2.3", "v1.2", "v70000.0.0"])
def test_parse_latest_version_rejects_bad_number(name):
    with pytest.raises(ValueError, match="Malformed version number"):
        parse_latest_version('[{"name":"%s"}]' % name)


def test_do_https_returns_status_and_body():
    request = HTTPRequest(
        server_name="api.example.com",
        uri="/tags",
        method="POST",
        user_agent="agent",
        headers={"Accept": "application/json"},
        body=b"payload",
    )
    with patch("http.client.HTTPSConnection") as connection_class:
        connection = connection_class.return_value
        connection.getresponse.return_value.status = 200
        connection.getresponse.return_value.read.return_value = b"ok"
        result = do_https(request)
    assert result == (200, b"ok")
    assert connection_class.call_args.args[0] == "api.example.com"
    args, kwargs = connection.request.call_args
    assert args == ("POST", "/tags")
    assert kwargs["body"] == b"payload"
    assert kwargs["headers"] == {"User-Agent": "agent", "Accept": "application/json"}
    connection.close.assert_called_once()


def test_do_https_wraps_connection_failure():
    request = HTTPRequest(server_name="api.example.com", uri="/")
    with patch("http.client.HTTPSConnection") as connection_class:
        connection_class.return_value.request.side_effect = OSError("unreachable")
        with pytest.raises(HTTPSError) as info:
            do_https(request)
    assert info.value.status is None
    connection_class.return_value.close.assert_called_once()


def test_get_latest_version_success():
    with patch("http.client.HTTPSConnection") as connection_class:
        connection = connection_class.return_value
        connection.getresponse.return_value.status = 200
        connection.getresponse.return_value.read.return_value = b'[{"name":"v0.4.1"}]'
        version = get_latest_version("api.example.com", "/tags")
    assert version == Version(0, 4, 1)
    args, _ = connection.request.call_args
    assert args == ("GET", "/tags")


def test_get_latest_version_non_200_raises():
    with patch("http.client.HTTPSConnection") as connection_class:
        connection = connection_class.return_value
        connection.getresponse.return_value.status = 404
        connection.getresponse.return_value.read.return_value = b"missing"
        with pytest.raises(HTTPSError, match="missing") as info:
            _get_latest("api.example.com", "/tags")
    assert info.value.status == 404


def test_newer_version_compares_greater():
    newer = parse_latest_version('[{"name":"v1.10.0"}]')
    older = parse_latest_version('[{"name":"v1.9.9"}]')
    assert newer > older
    assert newer.as_number() > older.as_number()