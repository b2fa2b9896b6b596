"""Coercion helpers for the loosely typed JSON returned by the Vultr API.

The API is not consistent about JSON types: the same field can arrive as a
number in one response and as a string (or ``null``, or not at all) in the
next. Every value read from a payload is therefore classified first and then
handed to one coercion helper per target type:

* :func:`text` renders any scalar to a display string.
* :func:`integer` and :func:`number` render the value to text and parse that
  text, so JSON numbers and numeric strings share one code path.
* :func:`boolean` accepts JSON booleans and their common text spellings.

Missing and ``null`` values render as :data:`NIL_TEXT` for text fields and as
zero for numeric fields.
"""

from __future__ import annotations

import json
import math
import re
from enum import Enum
from typing import Any, Mapping

from .exceptions import FieldCoercionError, MalformedPayload

NIL_TEXT = "<nil>"

_INTEGER_RE = re.compile(r"[+-]?\d+", re.ASCII)
_FLOAT_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_TRUE_TEXT = {"true", "1", "yes"}
_FALSE_TEXT = {"false", "0", "no", ""}

_ABSENT = object()


class WireKind(Enum):
    """JSON shape of a single payload entry."""

    ABSENT = "absent"
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    NESTED = "nested"


def classify(value: Any) -> WireKind:
    """Return the :class:`WireKind` of a decoded JSON value."""

    if value is _ABSENT:
        return WireKind.ABSENT
    if value is None:
        return WireKind.NULL
    # bool must be checked before int, it is a subclass.
    if isinstance(value, bool):
        return WireKind.BOOLEAN
    if isinstance(value, (int, float)):
        return WireKind.NUMBER
    if isinstance(value, str):
        return WireKind.STRING
    return WireKind.NESTED


def parse_payload(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    """Parse ``raw`` into a string-keyed mapping or raise :class:`MalformedPayload`."""

    if isinstance(raw, Mapping):
        return dict(raw)
    fields = load_json(raw)
    if not isinstance(fields, dict):
        raise MalformedPayload(
            f"Expected a JSON object, got {type(fields).__name__}"
        )
    return fields


def load_json(raw: bytes | str) -> Any:
    """Decode a JSON document, mapping every parse failure to :class:`MalformedPayload`."""

    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedPayload("Response body is not valid JSON") from exc


def lookup(fields: Mapping[str, Any], key: str) -> Any:
    """Return the raw entry for ``key``, distinguishing a missing key from ``null``."""

    return fields.get(key, _ABSENT)


def render(value: Any) -> str:
    """Render a single raw JSON value as text."""

    kind = classify(value)
    if kind in (WireKind.ABSENT, WireKind.NULL):
        return NIL_TEXT
    if kind is WireKind.STRING:
        return value
    if kind is WireKind.BOOLEAN:
        return "true" if value else "false"
    if kind is WireKind.NUMBER:
        return _render_number(value)
    return json.dumps(value, separators=(",", ":"))


def text(fields: Mapping[str, Any], key: str) -> str:
    """Return ``fields[key]`` as a display string."""

    return render(lookup(fields, key))


def integer(fields: Mapping[str, Any], key: str) -> int:
    """Return ``fields[key]`` coerced to ``int``; missing and ``null`` become ``0``."""

    value = lookup(fields, key)
    source = _numeric_text(value, key, int)
    if not _INTEGER_RE.fullmatch(source):
        raise FieldCoercionError(key, value, int)
    return int(source)


def number(fields: Mapping[str, Any], key: str) -> float:
    """Return ``fields[key]`` coerced to ``float``; missing and ``null`` become ``0.0``."""

    value = lookup(fields, key)
    source = _numeric_text(value, key, float)
    if not _FLOAT_RE.fullmatch(source):
        raise FieldCoercionError(key, value, float)
    result = float(source)
    if not math.isfinite(result):
        raise FieldCoercionError(key, value, float)
    return result


def boolean(fields: Mapping[str, Any], key: str) -> bool:
    """Return ``fields[key]`` coerced to ``bool``; missing and ``null`` become ``False``."""

    value = lookup(fields, key)
    kind = classify(value)
    if kind in (WireKind.ABSENT, WireKind.NULL):
        return False
    if kind is WireKind.BOOLEAN:
        return value
    if kind in (WireKind.NUMBER, WireKind.STRING):
        source = render(value).strip().lower()
        if source in _TRUE_TEXT:
            return True
        if source in _FALSE_TEXT:
            return False
    raise FieldCoercionError(key, value, bool)


def _numeric_text(value: Any, key: str, target: type) -> str:
    kind = classify(value)
    if kind in (WireKind.ABSENT, WireKind.NULL):
        return "0"
    if kind in (WireKind.BOOLEAN, WireKind.NESTED):
        raise FieldCoercionError(key, value, target)
    return render(value) or "0"


def _render_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def keyed_values(payload: Any) -> list[Mapping[str, Any]]:
    """Return the entry objects of a collection keyed by identifier."""

    # An empty collection is sent as ``[]`` instead of ``{}``.
    if isinstance(payload, list) and not payload:
        return []
    if not isinstance(payload, dict):
        raise MalformedPayload(
            f"Expected a JSON object keyed by identifier, got {type(payload).__name__}"
        )
    values = list(payload.values())
    for value in values:
        if not isinstance(value, dict):
            raise MalformedPayload("Collection entries must be JSON objects")
    return values
