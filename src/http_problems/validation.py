"""Translate pydantic validation failures into ``badRequest`` problems.

Key Responsibilities:
    - Accept ``pydantic.ValidationError``, FastAPI ``RequestValidationError`` or
      raw pydantic error dictionaries
    - Map each failure onto a :class:`~http_problems.catalog.ValidationParam`
    - Delegate message rendering to an optional translation callable

Collaborators:
    - Upstream: FastAPI exception handlers and request parsing code
    - Downstream: :func:`http_problems.catalog.input_validation`

Side Effects:
    - None
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from .catalog import ValidationParam, input_validation
from .config import get_settings
from .problem import ProblemDetail

Translator = Callable[[Mapping[str, Any]], str]

REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})
UNKNOWN_FIELD_ERROR = "extra_forbidden"


def _error_entries(errors: Any) -> list[Mapping[str, Any]]:
    collect = getattr(errors, "errors", None)
    if callable(collect):
        return list(collect())
    return list(errors)


def _split_location(loc: Sequence[Any], default: str) -> tuple[str, str]:
    parts = list(loc)
    location = default
    if parts and parts[0] in REQUEST_LOCATIONS:
        location = str(parts.pop(0))
    name = ".".join(str(part) for part in parts)
    return location, name or location


def to_validation_params(
    errors: Any,
    *,
    location: str | None = None,
    translate: Translator | None = None,
) -> list[ValidationParam]:
    """Convert pydantic error entries into validation parameters.

    Args:
        errors: A ``ValidationError``/``RequestValidationError`` or an iterable
            of pydantic error dictionaries.
        location: Location reported for every issue. When omitted it is taken
            from the leading ``loc`` element or the configured default.
        translate: Callable producing the human readable message of one error;
            defaults to pydantic's ``msg``.
    """
    default_location = location or get_settings().validation_location
    params: list[ValidationParam] = []
    for entry in _error_entries(errors):
        loc: Iterable[Any] = entry.get("loc", ())
        param_location, name = _split_location(tuple(loc), default_location)
        if location is not None:
            param_location = location
        params.append(
            ValidationParam(
                location=param_location,
                name=name,
                value=entry.get("input"),
                issue=translate(entry) if translate is not None else str(entry.get("msg", "")),
                is_unknown=entry.get("type") == UNKNOWN_FIELD_ERROR,
            )
        )
    return params


def from_validation_errors(
    errors: Any,
    *,
    location: str | None = None,
    translate: Translator | None = None,
) -> ProblemDetail | None:
    """Build a ``badRequest`` problem, or ``None`` when there are no errors."""
    params = to_validation_params(errors, location=location, translate=translate)
    if not params:
        return None
    return input_validation(*params)


__all__ = ["Translator", "from_validation_errors", "to_validation_params"]
