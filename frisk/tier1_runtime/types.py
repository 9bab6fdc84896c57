"""
frisk.tier1_runtime.types
──────────────────────────
The closed set of field types a schema may declare. Each FieldType member
carries its canonical name (used verbatim in error messages) and a pure
checker ``(value) -> bool``. Checkers never raise: a value of the wrong shape
simply fails.
"""
from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any, Callable

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


# ── Coercion helpers ───────────────────────────────────────────────────────

def _to_number(value: Any) -> float | int | None:
    """Best-effort numeric coercion. Returns None when not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return None
    return None


def parse_object(value: Any) -> Mapping | None:
    """
    Return *value* as a mapping, JSON-decoding text first.
    Returns None if it is not (or does not decode to) a mapping.
    """
    if isinstance(value, (str, bytes, bytearray)):
        try:
            value = json.loads(value)
        except (ValueError, RecursionError):
            return None
    if isinstance(value, Mapping):
        return value
    return None


# ── Checkers ───────────────────────────────────────────────────────────────

def is_integer(value: Any) -> bool:
    number = _to_number(value)
    if number is None:
        return False
    if isinstance(number, int):
        return True
    return math.isfinite(number) and number.is_integer()


def is_number(value: Any) -> bool:
    number = _to_number(value)
    if number is None:
        return False
    # ints are always finite; math.isfinite overflows on very large ones
    return isinstance(number, int) or math.isfinite(number)


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and _UUID_RE.match(value) is not None


def is_object(value: Any) -> bool:
    return parse_object(value) is not None


def _is_array_of(element_check: Callable[[Any], bool]) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return isinstance(value, (list, tuple)) and all(
            element_check(element) for element in value
        )
    return check


is_array_of_strings = _is_array_of(is_string)
is_array_of_uuids = _is_array_of(is_uuid)


def is_iso_string(value: Any) -> bool:
    """
    ISO 8601 date or date-time as read by ``datetime.fromisoformat`` on
    Python 3.11+ (the minimum supported): basic and extended calendar,
    ordinal and week dates, fractional seconds, ``Z`` or a numeric offset.
    Durations and intervals are not dates, so they fail.
    """
    if not isinstance(value, str) or not value:
        return False
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        datetime.fromisoformat(text)
    except ValueError:
        return False
    return True


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


# ── Type enumeration ───────────────────────────────────────────────────────

class FieldType(str, Enum):
    """A schema field type. ``value`` is the canonical name."""

    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    UUID = "uuid"
    OBJECT = "object"
    ARRAY_OF_STRINGS = "arrayOfStrings"
    ARRAY_OF_UUID = "arrayOfUUID"
    ISO_STRING = "ISOString"
    BOOLEAN = "boolean"

    @property
    def checker(self) -> Callable[[Any], bool]:
        return _CHECKERS[self]

    def check(self, value: Any) -> bool:
        """Return True if *value* satisfies this type."""
        return _CHECKERS[self](value)

    def __str__(self) -> str:
        return self.value


_CHECKERS: dict[FieldType, Callable[[Any], bool]] = {
    FieldType.INTEGER: is_integer,
    FieldType.NUMBER: is_number,
    FieldType.STRING: is_string,
    FieldType.UUID: is_uuid,
    FieldType.OBJECT: is_object,
    FieldType.ARRAY_OF_STRINGS: is_array_of_strings,
    FieldType.ARRAY_OF_UUID: is_array_of_uuids,
    FieldType.ISO_STRING: is_iso_string,
    FieldType.BOOLEAN: is_boolean,
}


__all__ = ["FieldType", "parse_object"]
