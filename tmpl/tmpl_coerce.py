"""
Total conversions between template values.

None of these functions raise: every input maps to a defined output so
templates stay resilient to missing or malformed data.
"""

import collections.abc
import math
import re
from typing import Any, List

from tmpl.tmpl_datatypes import Kind, kind_of

INT64_MAX = 2**63 - 1
INT64_MIN = -(2**63)

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _clamp64(n: int) -> int:
    if n > INT64_MAX:
        return INT64_MAX
    if n < INT64_MIN:
        return INT64_MIN
    return n


def _parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        return 0
    n = int(text)
    # Out-of-range text is a parse failure, not a clamp
    if n > INT64_MAX or n < INT64_MIN:
        return 0
    return n


def _parse_float(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def to_int64(value: Any) -> int:
    match kind_of(value):
        case Kind.TEXT:
            if isinstance(value, str):
                return _parse_int(value)
            return 0
        case Kind.BOOL:
            return 1 if value else 0
        case Kind.NUMBER:
            if isinstance(value, int):
                return _clamp64(value)
            try:
                f = float(value)
            except (TypeError, ValueError):
                # complex and friends
                return 0
            if math.isnan(f):
                return 0
            if math.isinf(f):
                return INT64_MAX if f > 0 else INT64_MIN
            # int() truncates toward zero
            return _clamp64(int(value))
        case _:
            return 0


def to_int(value: Any) -> int:
    return to_int64(value)


def to_float64(value: Any) -> float:
    match kind_of(value):
        case Kind.TEXT:
            if isinstance(value, str):
                return _parse_float(value)
            return 0.0
        case Kind.BOOL:
            return 1.0 if value else 0.0
        case Kind.NUMBER:
            try:
                return float(value)
            except (TypeError, ValueError):
                return 0.0
        case _:
            return 0.0


def _has_custom_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, BaseException):
        return str(value)
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)
    if _has_custom_str(value):
        return str(value)
    return repr(value)


def to_strings(value: Any) -> List[str]:
    """Coerce any value into a list of strings, dropping None elements."""
    if value is None:
        return []
    if kind_of(value) is Kind.SEQUENCE:
        return [to_string(v) for v in value if v is not None]
    return [to_string(value)]


def is_empty(value: Any) -> bool:
    """
    Report whether a value counts as unset.

    - None is empty
    - text, sequences, mappings and sets are empty when their length is zero
    - booleans are empty when False
    - numbers are empty when zero
    - any other object (records, datetimes, ...) is never empty
    """
    match kind_of(value):
        case Kind.NULL:
            return True
        case Kind.BOOL:
            return not value
        case Kind.NUMBER:
            return value == 0
        case Kind.TEXT | Kind.SEQUENCE | Kind.MAPPING:
            return len(value) == 0
        case _:
            if isinstance(value, collections.abc.Set):
                return len(value) == 0
            return False


def deep_equal(a: Any, b: Any) -> bool:
    ka, kb = kind_of(a), kind_of(b)
    if ka is not kb:
        return False
    match ka:
        case Kind.NULL:
            return True
        case Kind.SEQUENCE:
            if len(a) != len(b):
                return False
            return all(deep_equal(x, y) for x, y in zip(a, b))
        case Kind.MAPPING:
            if len(a) != len(b):
                return False
            for k in a.keys():
                if k not in b:
                    return False
                if not deep_equal(a[k], b[k]):
                    return False
            return True
        case Kind.TEXT:
            # str vs bytes never compare equal
            if isinstance(a, str) != isinstance(b, str):
                return False
            return a == b
        case _:
            try:
                return bool(a == b)
            except Exception:
                return a is b


def in_list(haystack, needle) -> bool:
    for item in haystack:
        if deep_equal(needle, item):
            return True
    return False


__all__ = [
    "INT64_MAX",
    "INT64_MIN",
    "to_int64",
    "to_int",
    "to_float64",
    "to_string",
    "to_strings",
    "is_empty",
    "deep_equal",
    "in_list",
]
