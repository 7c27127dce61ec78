"""Problem type URIs shared by the core type and the error catalog."""

from __future__ import annotations

ABOUT_BLANK = "about:blank"

TYPE_NO_ACCESS_TOKEN = "urn:problem-type:noAccessToken"
TYPE_INVALID_TOKEN = "urn:problem-type:invalidAccessToken"
TYPE_TOKEN_EXPIRED = "urn:problem-type:expiredAccessToken"
TYPE_MISSING_SCOPE = "urn:problem-type:missingScope"
TYPE_MISSING_PERMISSION = "urn:problem-type:missingPermission"
TYPE_NOT_FOUND = "urn:problem-type:resourceNotFound"
TYPE_BAD_REQUEST = "urn:problem-type:badRequest"
TYPE_SCHEMA_VIOLATION = "urn:problem-type:input-validation:schemaViolation"
TYPE_UNKNOWN_PARAMETER = "urn:problem-type:input-validation:unknownParameter"
TYPE_INTERNAL_SERVER_ERROR = "urn:problem-type:internalServerError"
TYPE_CONFLICT = "urn:problem-type:conflict"


__all__ = [
    "ABOUT_BLANK",
    "TYPE_BAD_REQUEST",
    "TYPE_CONFLICT",
    "TYPE_INTERNAL_SERVER_ERROR",
    "TYPE_INVALID_TOKEN",
    "TYPE_MISSING_PERMISSION",
    "TYPE_MISSING_SCOPE",
    "TYPE_NOT_FOUND",
    "TYPE_NO_ACCESS_TOKEN",
    "TYPE_SCHEMA_VIOLATION",
    "TYPE_TOKEN_EXPIRED",
    "TYPE_UNKNOWN_PARAMETER",
]
