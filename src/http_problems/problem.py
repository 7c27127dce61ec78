"""RFC 7807 problem details value type.

Key Responsibilities:
    - Represent a problem with the five fixed RFC 7807 members plus an open
      mapping of extension attributes
    - Guard extension attributes behind a non-default problem type
    - Flatten fixed members and extensions into one wire mapping and parse that
      mapping back

Collaborators:
    - Upstream: HTTP handlers, :mod:`http_problems.catalog` and
      :mod:`http_problems.validation` build and populate problems
    - Downstream: :mod:`http_problems.codec` encodes the flattened mapping and
      :mod:`http_problems.presentation` writes it to responses

Side Effects:
    - ``marshal``/``to_dict`` fill in a default ``type`` and ``title`` on the
      instance
    - Rejected extension attributes are dumped through the debug logger

Thread Safety:
    - Not thread-safe; an instance belongs to a single request flow and callers
      must synchronise shared mutation

Error Model:
    - Failures are themselves :class:`ProblemDetail` instances with status 500
      and the internal server error type. ``set`` and ``unmarshal`` return them,
      ``marshal`` and ``parse`` raise them.
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

import json
import sys
from http import HTTPStatus
from typing import Any, TextIO
from xml.etree.ElementTree import ParseError

import structlog

from http_problems import codec
from http_problems.codec import RenderFormat
from http_problems.config import get_settings
from http_problems.problem_types import ABOUT_BLANK, TYPE_INTERNAL_SERVER_ERROR

logger = structlog.get_logger(__name__)

# ==============================================================================
# HELPERS
# ==============================================================================


def status_text(status: int) -> str:
    """Return the standard reason phrase for ``status`` or ``""`` when unknown."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_status(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid status value: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return int(str(value).strip())


def _is_default_type(value: str) -> bool:
    return value in ("", ABOUT_BLANK)


def _render_format(fmt: RenderFormat | str) -> RenderFormat | None:
    if isinstance(fmt, RenderFormat):
        return fmt
    try:
        return RenderFormat(str(fmt).lower())
    except ValueError:
        return None


def _internal_failure(detail: str, cause: BaseException | None = None) -> ProblemDetail:
    return ProblemDetail(500, detail, type=TYPE_INTERNAL_SERVER_ERROR, cause=cause)


# ==============================================================================
# TYPE DEFINITIONS
# ==============================================================================


class ProblemDetail(Exception):
    """RFC 7807 representation of an error.

    A problem is an exception so it can be raised from handlers, chained and
    wrapped like any other error. Equality compares the fixed members and the
    extension attributes by their wire (lower-cased) names; the cause is not
    part of the value.

    Attributes:
        type: URI reference identifying the problem type. Empty means
            ``about:blank``.
        title: Short summary of the problem type. Empty means the reason phrase
            of ``status``.
        detail: Explanation specific to this occurrence.
        instance: URI reference identifying this occurrence.
        attributes: Extension members. Populate them through :meth:`set`.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        status: int = 0,
        detail: str = "",
        *,
        type: str = "",
        title: str = "",
        instance: str = "",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(detail)
        self.type = type
        self.title = title
        self._status = status
        self.detail = detail
        self.instance = instance
        self.attributes: dict[str, Any] = {}
        self._cause = cause
        self.__cause__ = cause

    # --------------------------------------------------------------------------
    # Accessors
    # --------------------------------------------------------------------------

    @property
    def status(self) -> int:
        """HTTP status code; fixed at construction."""
        return self._status

    @property
    def status_code(self) -> int:
        return self._status

    @property
    def cause(self) -> BaseException | None:
        """The wrapped underlying error, if any."""
        return self._cause

    def get_title(self) -> str:
        """Return the title or the reason phrase of the status code."""
        if not self.title:
            return status_text(self._status)
        return self.title

    def get(self, key: str, default: Any = None) -> Any:
        """Read a fixed member (case-insensitive) or an extension attribute."""
        match key.lower():
            case "type":
                return self.type
            case "title":
                return self.title
            case "status":
                return self._status
            case "detail":
                return self.detail
            case "instance":
                return self.instance
        return self.attributes.get(key, default)

    # --------------------------------------------------------------------------
    # Mutation
    # --------------------------------------------------------------------------

    def set(self, key: str, value: Any) -> ProblemDetail | None:
        """Set the member identified by ``key`` to ``value``.

        Fixed members are matched case-insensitively and stored as strings.
        Extension attributes keep the key as given and require a type other
        than ``about:blank``.

        Returns:
            ``None`` on success, otherwise a problem describing the failure.
        """
        match key.lower():
            case "status":
                return _internal_failure("Cannot set status with Set")
            case "type":
                self.type = _text(value)
            case "title":
                self.title = _text(value)
            case "detail":
                self.detail = _text(value)
            case "instance":
                self.instance = _text(value)
            case _:
                if _is_default_type(self.type):
                    failure = _internal_failure(
                        "Cannot set extended attributes unless Type is set", cause=self
                    )
                    logger.debug("problem.extension_rejected", key=key, problem=failure.to_dict())
                    return failure
                self.attributes[key] = value
        return None

    # --------------------------------------------------------------------------
    # Serialisation
    # --------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Flatten the problem into its wire mapping.

        Fills in ``type`` and ``title`` on the instance when they are empty.
        Extension attributes are merged last under lower-cased keys and win
        over fixed members of the same name.
        """
        if not self.type:
            self.type = ABOUT_BLANK
        self.title = self.get_title()

        out: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "status": self._status,
            "detail": self.detail,
        }
        if self.instance:
            out["instance"] = self.instance
        if self._cause is not None and self.type != ABOUT_BLANK:
            # nested problems render as their message string as well
            out["error"] = str(self._cause)
        for key, value in self.attributes.items():
            out[key.lower()] = value
        return out

    def marshal(self, fmt: RenderFormat | str = RenderFormat.JSON) -> bytes:
        """Encode the problem as ``json`` or ``xml``.

        Raises:
            ProblemDetail: For unsupported formats or values that cannot be
                encoded.
        """
        render_as = _render_format(fmt)
        if render_as is None:
            raise _internal_failure(f"{fmt} is an invalid type")
        payload = self.to_dict()
        try:
            return codec.encode(payload, render_as)
        except (TypeError, ValueError, RecursionError) as exc:
            raise _internal_failure(str(exc), cause=exc) from exc

    def marshal_json(self) -> bytes:
        return self.marshal(RenderFormat.JSON)

    def marshal_xml(self) -> bytes:
        return self.marshal(RenderFormat.XML)

    def unmarshal(self, fmt: RenderFormat | str, data: bytes | str) -> ProblemDetail | None:
        """Populate the problem from a flat wire document.

        Extension attributes are replaced wholesale and are not subject to the
        type guard. The instance is only updated once the whole document has
        been read; a failure leaves it untouched.

        Returns:
            ``None`` on success, otherwise a problem describing the failure.
        """
        render_as = _render_format(fmt)
        if render_as is None:
            return _internal_failure(f"{fmt} is an invalid type")
        try:
            target = codec.decode(data, render_as)
        except (TypeError, ValueError, ParseError, RecursionError) as exc:
            return _internal_failure(str(exc), cause=exc)

        status = self._status
        fields: dict[str, str] = {}
        attributes: dict[str, Any] = {}
        for key, value in target.items():
            match key.lower():
                case "status":
                    try:
                        status = _parse_status(value)
                    except (TypeError, ValueError) as exc:
                        return _internal_failure(str(exc), cause=exc)
                case "type" | "title" | "detail" | "instance" as name:
                    fields[name] = _text(value)
                case _:
                    attributes[key] = value

        self._status = status
        for name, text in fields.items():
            setattr(self, name, text)
        self.attributes = attributes
        return None

    def unmarshal_json(self, data: bytes | str) -> ProblemDetail | None:
        return self.unmarshal(RenderFormat.JSON, data)

    def unmarshal_xml(self, data: bytes | str) -> ProblemDetail | None:
        return self.unmarshal(RenderFormat.XML, data)

    @classmethod
    def parse(cls, data: bytes | str, fmt: RenderFormat | str = RenderFormat.JSON) -> ProblemDetail:
        """Build a new problem from wire bytes, raising the failure problem."""
        problem = cls()
        failure = problem.unmarshal(fmt, data)
        if failure is not None:
            raise failure
        return problem

    def pretty_print(self, file: TextIO | None = None) -> str:
        """Write an indented JSON dump to ``file`` (stdout by default)."""
        try:
            text = json.dumps(
                codec.to_plain(self.to_dict()),
                indent=get_settings().pretty_indent,
                sort_keys=True,
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError, RecursionError) as exc:
            text = str(exc)
        print(text, file=file if file is not None else sys.stdout)
        return text

    # --------------------------------------------------------------------------
    # Dunder protocol
    # --------------------------------------------------------------------------

    def _value(self) -> tuple[Any, ...]:
        # attributes compare in their wire form so models and tuples equal
        # what parsing gives back
        try:
            attributes = {
                key.lower(): codec.to_plain(value) for key, value in self.attributes.items()
            }
        except (TypeError, ValueError, RecursionError):
            attributes = {key.lower(): value for key, value in self.attributes.items()}
        return (self.type, self.title, self._status, self.detail, self.instance, attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProblemDetail):
            return NotImplemented
        return self._value() == other._value()

    def __str__(self) -> str:
        return f"{self._status}: {self.detail}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status={self._status!r}, type={self.type!r}, "
            f"title={self.title!r}, detail={self.detail!r})"
        )


# ==============================================================================
# CONSTRUCTORS
# ==============================================================================


def new(status: int, message: str) -> ProblemDetail:
    """Create a problem with the given status and detail."""
    return ProblemDetail(status, message)


def from_error_with_status(status: int, err: BaseException) -> ProblemDetail:
    """Create a problem from ``err`` using ``status`` instead of 500."""
    return ProblemDetail(status, str(err), cause=err)


def from_error(err: BaseException) -> ProblemDetail:
    """Create a 500 problem wrapping ``err``."""
    return from_error_with_status(500, err)


def wrap(err: BaseException) -> ProblemDetail:
    """Return ``err`` when it already is a problem, otherwise wrap it."""
    if isinstance(err, ProblemDetail):
        return err
    return from_error(err)


__all__ = [
    "ProblemDetail",
    "from_error",
    "from_error_with_status",
    "new",
    "status_text",
    "wrap",
]
