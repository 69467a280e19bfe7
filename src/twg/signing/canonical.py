"""Canonical JSON and plain-text renderings of a Teams activity."""

from __future__ import annotations

import json
import math
import re
from decimal import Decimal
from typing import Any

__all__ = [
    "ACTIVITY_FIELDS",
    "canonicalise",
    "canonical_activity",
    "format_number",
    "parse_json",
    "render_plain_text",
]

# Fields kept in the reduced activity, in serialisation order
ACTIVITY_FIELDS: tuple[str, ...] = ("type", "id", "timestamp", "text")

_MENTION_RE = re.compile(r"<at\b[^>]*>(.*?)</at\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")

# &amp; must come last so "&amp;lt;" decodes to "&lt;" and no further
_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
)

# Largest magnitude the sender's serializer still prints without an exponent
_MAX_PLAIN_EXPONENT = 21
# Smallest decimal exponent printed as 0.000ddd rather than d.ddde-N
_MIN_PLAIN_EXPONENT = -6

_LONE_SURROGATE_RE = re.compile(r"[\ud800-\udfff]")


def _parse_number(token: str) -> float:
    """Every JSON number is a double on the signing side, integers included."""
    return float(token)


def _reject_constant(token: str) -> Any:
    msg = f"{token} is not valid JSON"
    raise ValueError(msg)


def parse_json(text: str) -> Any:
    """Strict JSON parse: NaN/Infinity literals are rejected.

    Numbers come back as floats so they re-serialise the way the sender's
    runtime prints them (``12345678901234567890`` loses precision there too).

    Raises:
        ValueError: ``text`` is not a JSON document.
    """
    return json.loads(
        text,
        parse_float=_parse_number,
        parse_int=_parse_number,
        parse_constant=_reject_constant,
    )


def format_number(value: float) -> str:
    """Print a double the way ECMAScript ``Number.prototype.toString`` does.

    Shortest round-trip digits (``repr`` already finds them), laid out as
    ``100``, ``0.00001``, ``1e-7`` or ``1.5e+300``. Non-finite values print
    as ``null``, as they do inside a JSON document.
    """
    if not math.isfinite(value):
        return "null"
    if value == 0:
        return "0"
    if value < 0:
        return "-" + format_number(-value)

    _, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    k = len(digits)
    n = int(exponent) + len(digit_tuple)

    if k <= n <= _MAX_PLAIN_EXPONENT:
        return digits + "0" * (n - k)
    if 0 < n <= _MAX_PLAIN_EXPONENT:
        return f"{digits[:n]}.{digits[n:]}"
    if _MIN_PLAIN_EXPONENT < n <= 0:
        return "0." + "0" * -n + digits

    e = n - 1
    mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def _string(value: str) -> str:
    text = json.dumps(value, ensure_ascii=False)
    return _LONE_SURROGATE_RE.sub(lambda m: f"\\u{ord(m.group()):04x}", text)


def canonicalise(value: Any) -> str:
    """Produce compact JSON: no whitespace, keys in parse order, UTF-8 kept raw.

    Unlike sorted-key canonical forms this preserves member order, because
    the sender serialises the document in the order it built it.

    Raises:
        TypeError: ``value`` holds something JSON cannot represent.
    """
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return _string(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, dict):
        members = []
        for key, member in value.items():
            if not isinstance(key, str):
                msg = f"object key {key!r} is not a string"
                raise TypeError(msg)
            members.append(f"{_string(key)}:{canonicalise(member)}")
        return "{" + ",".join(members) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(canonicalise(item) for item in value) + "]"
    msg = f"{type(value).__name__} is not JSON serialisable"
    raise TypeError(msg)


def render_plain_text(html: str) -> str:
    """Reduce a Teams rich-text body to the plain text the user typed.

    ``<at>Alice</at> hi&nbsp;there`` becomes ``@Alice hi there``.
    """
    text = _MENTION_RE.sub(lambda m: "@" + m.group(1), html)
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    text = _TAG_RE.sub("", text)
    return text.strip()


def canonical_activity(activity: dict[str, Any]) -> dict[str, Any] | None:
    """Select the fixed field subset of an activity, with plain-text ``text``.

    Absent fields are left out rather than filled in. A non-string ``text``
    is dropped. Returns None when none of the fields are present.
    """
    reduced: dict[str, Any] = {}
    for name in ACTIVITY_FIELDS:
        if name not in activity:
            continue
        value = activity[name]
        if name == "text":
            if not isinstance(value, str):
                continue
            value = render_plain_text(value)
        reduced[name] = value
    return reduced or None
