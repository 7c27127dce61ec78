"""Wire codecs for flat problem documents.

Key Responsibilities:
    - Normalise arbitrary extension values into JSON compatible data
    - Encode and decode flat problem mappings as JSON or RFC 7807 XML

Collaborators:
    - Upstream: :class:`http_problems.problem.ProblemDetail` marshal/unmarshal
    - Downstream: ``json``, ``xml.etree.ElementTree`` and ``pydantic_core``

Side Effects:
    - None; failures surface as ``ValueError``/``TypeError``/``ParseError``
      which callers translate into problem details

Thread Safety:
    - Thread-safe; functions are pure
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from http_problems.config import get_settings

# ==============================================================================
# TYPE DEFINITIONS
# ==============================================================================


class RenderFormat(str, Enum):
    """Wire formats supported by the problem codecs."""

    JSON = "json"
    XML = "xml"


@runtime_checkable
class Flattenable(Protocol):
    """Object that renders itself as a flat problem mapping."""

    def to_dict(self) -> dict[str, Any]: ...


_XML_NAME = re.compile(r"^(?!xml)[A-Za-z_][A-Za-z0-9_.\-]*$", re.IGNORECASE)
_XML_ITEM = "i"

# ==============================================================================
# NORMALISATION
# ==============================================================================


def to_plain(value: Any) -> Any:
    """Convert ``value`` into dicts, lists and JSON scalars.

    Nested problems are flattened through ``to_dict`` and pydantic models are
    dumped by alias. Anything else is handed to pydantic's JSON conversion,
    which raises ``PydanticSerializationError`` for unsupported types.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Flattenable):
        return to_plain(value.to_dict())
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(item) for item in value]
    return to_jsonable_python(value, by_alias=True)


# ==============================================================================
# JSON
# ==============================================================================


def _encode_json(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def _decode_json(data: bytes | str) -> dict[str, Any]:
    payload = json.loads(data)
    if not isinstance(payload, dict):
        raise ValueError("problem document must be a JSON object")
    return payload


# ==============================================================================
# XML
# ==============================================================================


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _append_element(parent: ET.Element, tag: str, value: Any) -> None:
    if not _XML_NAME.match(tag):
        raise ValueError(f"{tag!r} is not a valid XML element name")
    element = ET.SubElement(parent, tag)
    if isinstance(value, Mapping):
        for key, item in sorted(value.items()):
            _append_element(element, key, item)
    elif isinstance(value, list):
        for item in value:
            _append_element(element, _XML_ITEM, item)
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    elif value is not None:
        element.text = str(value)


def _element_value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return element.text or ""
    if all(_local_name(child.tag) == _XML_ITEM for child in children):
        return [_element_value(child) for child in children]
    return {_local_name(child.tag): _element_value(child) for child in children}


def _encode_xml(payload: Mapping[str, Any]) -> bytes:
    namespace = get_settings().xml_namespace
    root = ET.Element("problem", {"xmlns": namespace} if namespace else {})
    for key, value in sorted(payload.items()):
        _append_element(root, key, value)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def _decode_xml(data: bytes | str) -> dict[str, Any]:
    root = ET.fromstring(data)
    return {_local_name(child.tag): _element_value(child) for child in root}


# ==============================================================================
# PUBLIC API
# ==============================================================================


def encode(payload: Mapping[str, Any], fmt: RenderFormat) -> bytes:
    """Encode a flat problem mapping in the requested wire format."""
    plain = to_plain(payload)
    if fmt is RenderFormat.XML:
        return _encode_xml(plain)
    return _encode_json(plain)


def decode(data: bytes | str, fmt: RenderFormat) -> dict[str, Any]:
    """Decode wire bytes into a flat mapping."""
    if fmt is RenderFormat.XML:
        return _decode_xml(data)
    return _decode_json(data)


__all__ = ["Flattenable", "RenderFormat", "decode", "encode", "to_plain"]
