import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from xml.etree.ElementTree import ParseError

import pytest
from pydantic import BaseModel, Field

from http_problems.codec import RenderFormat, decode, encode, to_plain
from http_problems.problem import ProblemDetail, new

NS = "{urn:ietf:rfc:7807}"


class _Scope(BaseModel):
    scope_name: str = Field(alias="scopeName")


def _typed_problem() -> ProblemDetail:
    prob = new(503, "Try again later")
    prob.set("type", "urn:example:unavailable")
    prob.set("instance", "/jobs/7")
    return prob


def test_to_plain_normalises_nested_values():
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    plain = to_plain(
        {
            "when": stamp,
            "scopes": (_Scope(scopeName="kg:read"),),
            "problem": new(404, "gone"),
            1: "numeric key",
        }
    )
    assert plain == {
        "when": "2024-01-02T03:04:05Z",
        "scopes": [{"scopeName": "kg:read"}],
        "problem": {"detail": "gone", "status": 404, "title": "Not Found", "type": "about:blank"},
        "1": "numeric key",
    }


def test_encode_json_is_compact_and_sorted():
    assert encode({"b": 1, "a": "é"}, RenderFormat.JSON) == '{"a":"é","b":1}'.encode("utf-8")


def test_decode_json_returns_mapping():
    assert decode(b'{"status": 400}', RenderFormat.JSON) == {"status": 400}


def test_marshal_xml_uses_problem_namespace():
    prob = _typed_problem()
    prob.set("retryable", True)
    prob.set("tags", ["a", "b"])

    root = ET.fromstring(prob.marshal_xml())

    assert root.tag == f"{NS}problem"
    assert root.find(f"{NS}status").text == "503"
    assert root.find(f"{NS}title").text == "Service Unavailable"
    assert root.find(f"{NS}retryable").text == "true"
    assert [item.text for item in root.find(f"{NS}tags")] == ["a", "b"]


def test_xml_round_trip_with_string_values():
    prob = _typed_problem()
    prob.set("TraceID", "12345-67890")
    prob.set("tags", ["a", "b"])
    prob.set("invalid-params", [{"field": "state", "message": "A valid state must be provided"}])

    parsed = ProblemDetail.parse(prob.marshal_xml(), "xml")

    assert parsed == prob
    assert parsed.status == 503
    assert parsed.attributes["invalid-params"] == [
        {"field": "state", "message": "A valid state must be provided"}
    ]


def test_xml_scalars_decode_as_strings():
    prob = _typed_problem()
    prob.set("retries", 3)
    parsed = ProblemDetail.parse(prob.marshal_xml(), "xml")
    assert parsed.attributes["retries"] == "3"


def test_xml_rejects_invalid_element_names():
    prob = _typed_problem()
    prob.set("1st-attempt", "x")
    assert prob.marshal_json()
    with pytest.raises(ProblemDetail) as exc_info:
        prob.marshal_xml()
    assert "not a valid XML element name" in exc_info.value.detail


def test_unmarshal_reports_malformed_xml():
    failure = ProblemDetail().unmarshal_xml(b"<problem><status>")
    assert isinstance(failure, ProblemDetail)
    assert isinstance(failure.cause, ParseError)


def test_xml_namespace_is_configurable(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PROBLEMS_XML_NAMESPACE", "")
    root = ET.fromstring(new(400, "bad").marshal_xml())
    assert root.tag == "problem"


def test_xml_empty_containers_decode_as_empty_strings():
    prob = _typed_problem()
    prob.set("tags", [])
    prob.set("meta", {})
    parsed = ProblemDetail.parse(prob.marshal_xml(), "xml")
    assert parsed.attributes["tags"] == ""
    assert parsed.attributes["meta"] == ""


def test_xml_object_with_only_item_keys_decodes_as_list():
    prob = _typed_problem()
    prob.set("meta", {"i": "x"})
    parsed = ProblemDetail.parse(prob.marshal_xml(), "xml")
    assert parsed.attributes["meta"] == ["x"]


def test_deeply_nested_xml_returns_failure():
    document = "<problem><x>" + "<y>" * 5000 + "</y>" * 5000 + "</x></problem>"
    failure = ProblemDetail().unmarshal_xml(document)
    assert isinstance(failure, ProblemDetail)
    assert isinstance(failure.cause, RecursionError)
