import json
from dataclasses import dataclass
from unittest.mock import patch

import pytest

from hashtab.online import HTTPSError
from hashtab.settings import Settings, SettingsStore
from hashtab.virustotal import (
    VTResult,
    build_query,
    check_for_tos,
    parse_reply,
    query,
)


@dataclass
class FakeFile:
    name: str
    hash_results: tuple


def make_settings():
    return Settings(["MD5"], SettingsStore())


def test_build_query_format():
    assert build_query([b"\xab\xcd"]) == '[{"hash":"ABCD"},{"hash":""}]'


def test_build_query_empty():
    assert build_query([]) == '[{"hash":""}]'


def test_build_query_round_trip():
    hashes = [b"\x01\x02", b"\xff" * 16]
    decoded = json.loads(build_query(hashes))
    assert [entry["hash"] for entry in decoded[:-1]] == [h.hex().upper() for h in hashes]
    assert decoded[-1] == {"hash": ""}


def test_parse_reply_found_and_not_found():
    body = json.dumps(
        {
            "data": [
                {"hash": "AA", "found": True, "permalink": "link", "positives": 3, "total": 70},
                {"hash": "BB", "found": False},
            ]
        }
    )
    reports = parse_reply(body)
    assert reports["AA"] == VTResult(permalink="link", positives=3, total=70, found=True)
    assert reports["BB"] == VTResult()


def test_parse_reply_skips_entries_without_hash_or_found():
    body = json.dumps({"data": [{"found": True}, {"hash": "CC", "found": "yes"}, {"hash": "DD", "found": True}]})
    reports = parse_reply(body.encode())
    assert set(reports) == {"DD"}


def test_parse_reply_ignores_wrongly_typed_fields():
    body = json.dumps({"data": [{"hash": "AA", "found": True, "positives": "3", "total": True}]})
    report = parse_reply(body)["AA"]
    assert report.found is True
    assert (report.positives, report.total, report.permalink) == (0, 0, "")


@pytest.mark.parametrize("body", ["not json", "[]", '{"data": {}}', '{"other": []}'])
def test_parse_reply_rejects_malformed(body):
    with pytest.raises(ValueError):
        parse_reply(body)


def test_check_for_tos_agree_saves():
    settings = make_settings()
    asked = []
    assert check_for_tos(settings, lambda msg: asked.append(msg) or True) is True
    assert settings.virustotal_tos is True
    assert settings.store.get("VTToS", 0) == 1
    assert len(asked) == 1


def test_check_for_tos_decline():
    settings = make_settings()
    assert check_for_tos(settings, lambda msg: False) is False
    assert settings.virustotal_tos is False


def test_check_for_tos_already_agreed_does_not_ask():
    settings = make_settings()
    settings.set("virustotal_tos", True)
    calls = []
    assert check_for_tos(settings, lambda msg: calls.append(msg) or False) is True
    assert calls == []


def test_query_maps_results_to_files():
    files = [FakeFile("a", (b"\xaa",)), FakeFile("b", (b"\xbb",)), FakeFile("c", (b"\xcc",))]
    reply = json.dumps(
        {
            "data": [
                {"hash": "AA", "found": True, "permalink": "p", "positives": 1, "total": 2},
                {"hash": "CC", "found": False},
            ]
        }
    ).encode()
    with patch("http.client.HTTPSConnection") as connection_class:
        connection = connection_class.return_value
        connection.getresponse.return_value.status = 200
        connection.getresponse.return_value.read.return_value = reply
        results = query(files, 0, "placeholder")

    args = connection.request.call_args
    assert args.args[0] == "POST"
    assert args.args[1].endswith("apikey=placeholder")
    assert args.kwargs["body"] == build_query([b"\xaa", b"\xbb", b"\xcc"]).encode()
    assert [r.file.name for r in results] == ["a", "c"]
    assert results[0].found is True and results[0].positives == 1
    assert results[1].found is False


def test_query_non_200_raises():
    files = [FakeFile("a", (b"\xaa",))]
    with patch("http.client.HTTPSConnection") as connection_class:
        connection = connection_class.return_value
        connection.getresponse.return_value.status = 403
        connection.getresponse.return_value.read.return_value = b"denied"
        with pytest.raises(HTTPSError) as info:
            query(files, 0, "placeholder")
    assert info.value.status == 403