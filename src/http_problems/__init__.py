"""RFC 7807 problem details for HTTP APIs."""

from .catalog import (
    Issue,
    MissingResource,
    ValidationParam,
    conflict,
    expired_access_token,
    input_validation,
    internal_error,
    internal_error_from,
    invalid_access_token,
    missing_permission,
    missing_resource,
    missing_scope,
    no_access_token,
)
from .codec import RenderFormat
from .presentation import (
    PROBLEM_MEDIA_TYPE,
    PROBLEM_XML_MEDIA_TYPE,
    create_problem_response,
    install_problem_handlers,
)
from .problem import ProblemDetail, from_error, from_error_with_status, new, status_text, wrap
from .problem_types import ABOUT_BLANK
from .validation import from_validation_errors


__all__ = [
    "ABOUT_BLANK",
    "Issue",
    "MissingResource",
    "PROBLEM_MEDIA_TYPE",
    "PROBLEM_XML_MEDIA_TYPE",
    "ProblemDetail",
    "RenderFormat",
    "ValidationParam",
    "conflict",
    "create_problem_response",
    "expired_access_token",
    "from_error",
    "from_error_with_status",
    "from_validation_errors",
    "input_validation",
    "install_problem_handlers",
    "internal_error",
    "internal_error_from",
    "invalid_access_token",
    "missing_permission",
    "missing_resource",
    "missing_scope",
    "new",
    "no_access_token",
    "status_text",
    "wrap",
]
