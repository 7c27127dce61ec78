"""FastAPI wiring that renders problems as HTTP responses.

This module writes :class:`~http_problems.problem.ProblemDetail` instances to
Starlette responses and registers exception handlers so routes can simply
``raise`` a problem.

Architecture:
- Bodies are produced by ``ProblemDetail.marshal`` so HTTP output and the
  standalone codecs never diverge
- ``Accept`` headers asking for ``application/problem+xml`` get the XML form,
  everything else gets ``application/problem+json``
- Encoding failures propagate to the caller as ``ProblemDetail``

Examples
--------
    app = FastAPI()
    install_problem_handlers(app)

    @app.get("/users/{user_id}")
    async def read_user(user_id: str):
        raise missing_resource(MissingResource("User", user_id, "path"))

"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from .catalog import input_validation, internal_error
from .codec import RenderFormat
from .problem import ProblemDetail, new
from .utils.logging import get_logger
from .validation import from_validation_errors

PROBLEM_MEDIA_TYPE = "application/problem+json"
PROBLEM_XML_MEDIA_TYPE = "application/problem+xml"

logger = get_logger(__name__)


def _accept_weights(accept: str) -> dict[str, float]:
    weights: dict[str, float] = {}
    for entry in accept.split(","):
        media_type, *params = (part.strip() for part in entry.split(";"))
        if not media_type:
            continue
        weight = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    weight = float(value)
                except ValueError:
                    weight = 0.0
        weights[media_type.lower()] = weight
    return weights


def _wants_xml(accept: str | None) -> bool:
    """XML wins only when it is weighted strictly above the JSON problem type."""
    if not accept:
        return False
    weights = _accept_weights(accept)
    xml_weight = weights.get(PROBLEM_XML_MEDIA_TYPE, 0.0)
    return xml_weight > 0 and xml_weight > weights.get(PROBLEM_MEDIA_TYPE, 0.0)


def create_problem_response(
    problem: ProblemDetail,
    *,
    accept: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> Response:
    """Create a response carrying ``problem``.

    Args:
        problem: Problem to render.
        accept: Optional ``Accept`` header of the request.
        headers: Extra response headers.

    Returns:
        Response with the problem media type and ``problem.status`` as status
        code (200 when the problem carries no status).

    Raises:
        ProblemDetail: When the problem cannot be encoded.
    """
    if _wants_xml(accept):
        body = problem.marshal(RenderFormat.XML)
        media_type = PROBLEM_XML_MEDIA_TYPE
    else:
        body = problem.marshal(RenderFormat.JSON)
        media_type = PROBLEM_MEDIA_TYPE
    return Response(
        content=body,
        status_code=problem.status or 200,
        media_type=media_type,
        headers=dict(headers) if headers else None,
    )


def _log_problem(event: str, problem: ProblemDetail) -> None:
    level = logging.ERROR if problem.status >= 500 else logging.WARNING
    logger.log(
        level,
        event,
        extra={
            "problem": {
                "type": problem.type,
                "title": problem.get_title(),
                "status": problem.status,
                "detail": problem.detail,
            }
        },
    )


def install_problem_handlers(app: FastAPI) -> None:
    """Register exception handlers that answer with problem documents."""

    @app.exception_handler(ProblemDetail)
    async def handle_problem(request: Request, exc: ProblemDetail) -> Response:
        _log_problem("problem.rendered", exc)
        return create_problem_response(exc, accept=request.headers.get("accept"))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
        problem = from_validation_errors(exc) or input_validation()
        _log_problem("problem.validation_error", problem)
        return create_problem_response(problem, accept=request.headers.get("accept"))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
        problem = new(exc.status_code, str(exc.detail))
        _log_problem("problem.http_error", problem)
        return create_problem_response(
            problem,
            accept=request.headers.get("accept"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> Response:
        logger.exception("problem.unhandled_exception", exc_info=exc)
        problem = internal_error("An unexpected error occurred")
        return create_problem_response(problem, accept=request.headers.get("accept"))


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "PROBLEM_XML_MEDIA_TYPE",
    "create_problem_response",
    "install_problem_handlers",
]
