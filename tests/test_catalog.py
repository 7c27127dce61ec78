import json

import pytest

from http_problems import catalog
from http_problems.catalog import Issue, MissingResource, ValidationParam
from http_problems.problem import ProblemDetail
from http_problems.problem_types import (
    TYPE_BAD_REQUEST,
    TYPE_CONFLICT,
    TYPE_INTERNAL_SERVER_ERROR,
    TYPE_INVALID_TOKEN,
    TYPE_MISSING_PERMISSION,
    TYPE_MISSING_SCOPE,
    TYPE_NO_ACCESS_TOKEN,
    TYPE_NOT_FOUND,
    TYPE_SCHEMA_VIOLATION,
    TYPE_TOKEN_EXPIRED,
    TYPE_UNKNOWN_PARAMETER,
)


def _payload(problem: ProblemDetail) -> dict:
    return json.loads(problem.marshal_json())


@pytest.mark.parametrize(
    ("problem", "status", "type_", "title"),
    [
        (catalog.no_access_token(), 401, TYPE_NO_ACCESS_TOKEN, "No Access Token"),
        (catalog.invalid_access_token(), 401, TYPE_INVALID_TOKEN, "Invalid Access Token"),
        (catalog.expired_access_token(), 401, TYPE_TOKEN_EXPIRED, "Expired Access Token"),
        (catalog.missing_permission(), 403, TYPE_MISSING_PERMISSION, "Missing Permission"),
        (catalog.internal_error("db down"), 500, TYPE_INTERNAL_SERVER_ERROR, "Internal Server Error"),
        (catalog.conflict("already exists"), 409, TYPE_CONFLICT, "Conflict"),
    ],
)
def test_canned_problems(problem: ProblemDetail, status: int, type_: str, title: str):
    payload = _payload(problem)
    assert payload["status"] == status
    assert payload["type"] == type_
    assert payload["title"] == title
    assert payload["detail"]


def test_missing_scope_lists_required_scopes():
    problem = catalog.missing_scope(("kg:read", "kg:write"))
    payload = _payload(problem)
    assert payload["status"] == 403
    assert payload["type"] == TYPE_MISSING_SCOPE
    assert payload["requiredscopes"] == ["kg:read", "kg:write"]


def test_internal_error_from_exposes_cause_message():
    payload = _payload(catalog.internal_error_from(ValueError("boom")))
    assert payload["status"] == 500
    assert payload["type"] == TYPE_INTERNAL_SERVER_ERROR
    assert payload["detail"] == "boom"
    assert payload["error"] == "boom"


def test_missing_resource_describes_issue():
    problem = catalog.missing_resource(
        MissingResource(resource_type="User", resource_value=42, location="path", url="/users/42")
    )
    payload = _payload(problem)
    assert payload["status"] == 404
    assert payload["type"] == TYPE_NOT_FOUND
    assert payload["title"] == "Resource not found"
    assert payload["detail"] == "No resource User:42 found"
    assert payload["instance"] == "/users/42"
    assert payload["issues"] == [
        {
            "type": TYPE_NOT_FOUND,
            "in": "path",
            "name": "User",
            "value": 42,
            "detail": "the User 42 is not assigned",
        }
    ]


def test_missing_resource_without_location_omits_in():
    payload = _payload(catalog.missing_resource(MissingResource("Order", "A-1")))
    assert "in" not in payload["issues"][0]
    assert "instance" not in payload


def test_input_validation_single_issue_becomes_detail():
    problem = catalog.input_validation(
        ValidationParam(location="body", name="state", value="", issue="state is required")
    )
    payload = _payload(problem)
    assert payload["status"] == 400
    assert payload["type"] == TYPE_BAD_REQUEST
    assert payload["title"] == "Bad Request"
    assert payload["detail"] == "state is required"
    assert payload["issues"][0]["type"] == TYPE_SCHEMA_VIOLATION


def test_input_validation_multiple_issues():
    problem = catalog.input_validation(
        ValidationParam(location="query", name="page", value="x", issue="page must be a number"),
        ValidationParam(location="query", name="colour", value="red", issue="unknown", is_unknown=True),
    )
    payload = _payload(problem)
    assert payload["detail"] == "The input message is incorrect; see issues for more information"
    assert [issue["type"] for issue in payload["issues"]] == [
        TYPE_SCHEMA_VIOLATION,
        TYPE_UNKNOWN_PARAMETER,
    ]
    assert payload["issues"][1] == {
        "type": TYPE_UNKNOWN_PARAMETER,
        "in": "query",
        "name": "colour",
        "value": "red",
        "detail": "unknown",
    }


def test_issue_accepts_wire_alias():
    issue = Issue.model_validate({"type": TYPE_NOT_FOUND, "in": "path", "name": "id", "detail": "x"})
    assert issue.location == "path"
    assert issue.model_dump(by_alias=True)["in"] == "path"


def test_input_validation_round_trips():
    prob = catalog.input_validation(ValidationParam("body", "age", "x", "bad age"))
    assert ProblemDetail.parse(prob.marshal_json()) == prob


def test_missing_resource_round_trips():
    prob = catalog.missing_resource(MissingResource("User", 17, "path", "/users/17"))
    assert ProblemDetail.parse(prob.marshal_json()) == prob


def test_missing_resource_without_location_round_trips():
    prob = catalog.missing_resource(MissingResource("User", "abc"))
    assert ProblemDetail.parse(prob.marshal_json()) == prob
