"""Canned problems for common API failures.

Each helper builds a :class:`~http_problems.problem.ProblemDetail` with a
fixed type URI, status and title. Structured extras such as required scopes or
per-field issues are attached as extension attributes.

Examples
--------
    problem = missing_scope(["kg:read"])
    body = problem.marshal_json()

"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from .problem import ProblemDetail, from_error, new, status_text
from .problem_types import (
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

# ==============================================================================
# DATA MODELS
# ==============================================================================


class Issue(BaseModel):
    """Per-field problem embedded in the ``issues`` extension."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    location: str | None = Field(default=None, alias="in")
    name: str
    value: Any = None
    detail: str

    @model_serializer(mode="wrap")
    def _omit_unknown_location(self, handler: Any) -> dict[str, Any]:
        payload = handler(self)
        for key in ("in", "location"):
            if key in payload and payload[key] is None:
                del payload[key]
        return payload


@dataclass(slots=True)
class MissingResource:
    """Describes the resource passed to :func:`missing_resource`.

    Attributes:
        resource_type: Kind of resource that is missing, e.g. ``User``.
        resource_value: Identifier that was requested.
        location: Where the identifier came from (``path``/``body``).
        url: API path that was called, used as the problem instance.
    """

    resource_type: str
    resource_value: Any
    location: str = ""
    url: str = ""


@dataclass(slots=True)
class ValidationParam:
    """One invalid input field passed to :func:`input_validation`."""

    location: str
    name: str
    value: Any
    issue: str
    is_unknown: bool = False


# ==============================================================================
# AUTHENTICATION / AUTHORISATION
# ==============================================================================


def _build(status: int, detail: str, type_: str, title: str) -> ProblemDetail:
    return ProblemDetail(status, detail, type=type_, title=title)


def no_access_token() -> ProblemDetail:
    return _build(
        401,
        "No Bearer access token found in Authorization HTTP header",
        TYPE_NO_ACCESS_TOKEN,
        "No Access Token",
    )


def invalid_access_token() -> ProblemDetail:
    return _build(
        401,
        "The Bearer access token found in the Authorization HTTP header is invalid",
        TYPE_INVALID_TOKEN,
        "Invalid Access Token",
    )


def expired_access_token() -> ProblemDetail:
    return _build(
        401,
        "The Bearer access token found in the Authorization HTTP header has expired",
        TYPE_TOKEN_EXPIRED,
        "Expired Access Token",
    )


def missing_scope(scopes: Sequence[str]) -> ProblemDetail:
    """Problem for a token lacking one of ``scopes``."""
    problem = _build(403, "Forbidden to consult the resource", TYPE_MISSING_SCOPE, "Missing Scope")
    problem.set("requiredScopes", list(scopes))
    return problem


def missing_permission() -> ProblemDetail:
    return _build(
        403,
        "Not permitted to update the details of this resource",
        TYPE_MISSING_PERMISSION,
        "Missing Permission",
    )


# ==============================================================================
# SERVER / RESOURCE STATE
# ==============================================================================


def internal_error(detail: str) -> ProblemDetail:
    return _build(500, detail, TYPE_INTERNAL_SERVER_ERROR, status_text(500))


def internal_error_from(err: BaseException) -> ProblemDetail:
    """Wrap ``err`` as an internal error; its message is rendered under ``error``."""
    problem = from_error(err)
    problem.set("type", TYPE_INTERNAL_SERVER_ERROR)
    return problem


def conflict(detail: str) -> ProblemDetail:
    return _build(409, detail, TYPE_CONFLICT, "Conflict")


def missing_resource(resource: MissingResource) -> ProblemDetail:
    """Problem describing a resource that could not be found."""
    problem = new(404, f"No resource {resource.resource_type}:{resource.resource_value} found")
    problem.set("type", TYPE_NOT_FOUND)
    problem.set("title", "Resource not found")
    if resource.url:
        problem.set("instance", resource.url)

    issue = Issue(
        type=TYPE_NOT_FOUND,
        location=resource.location or None,
        name=resource.resource_type,
        value=resource.resource_value,
        detail=f"the {resource.resource_type} {resource.resource_value} is not assigned",
    )
    problem.set("issues", [issue])
    return problem


# ==============================================================================
# INPUT VALIDATION
# ==============================================================================


def input_validation(*validations: ValidationParam) -> ProblemDetail:
    """Problem listing every invalid input field under ``issues``.

    A single validation also becomes the problem detail.
    """
    problem = new(400, "The input message is incorrect; see issues for more information")
    problem.set("type", TYPE_BAD_REQUEST)
    problem.set("title", "Bad Request")

    if len(validations) == 1:
        problem.set("detail", validations[0].issue)

    issues = [
        Issue(
            type=TYPE_UNKNOWN_PARAMETER if validation.is_unknown else TYPE_SCHEMA_VIOLATION,
            location=validation.location,
            name=validation.name,
            value=validation.value,
            detail=validation.issue,
        )
        for validation in validations
    ]
    problem.set("issues", issues)
    return problem


__all__ = [
    "Issue",
    "MissingResource",
    "ValidationParam",
    "conflict",
    "expired_access_token",
    "input_validation",
    "internal_error",
    "internal_error_from",
    "invalid_access_token",
    "missing_permission",
    "missing_resource",
    "missing_scope",
    "no_access_token",
]
