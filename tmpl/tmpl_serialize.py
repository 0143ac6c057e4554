from __future__ import annotations

import base64
import collections.abc
import json
from datetime import date, datetime
from typing import Any

import yaml

from tmpl.tmpl_datatypes import ParseError, TypeMismatch, fallible, aborting, recovering


# --------------------------
# Helpers
# --------------------------

# Characters that are unsafe to embed in HTML and are written as \u escapes
_HTML_ESCAPES = str.maketrans({
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
})


def _json_default(obj: Any) -> Any:
    # Mapping-like and sequence-like objects that json does not know natively
    if isinstance(obj, collections.abc.Mapping):
        return dict(obj)
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, collections.abc.Sequence) and not isinstance(obj, str):
        return list(obj)
    raise TypeError(f"json: unsupported type: {type(obj).__name__}")


def _to_builtin(obj: Any) -> Any:
    # Convert mapping-like and sequence containers to plain dicts/lists recursively
    if isinstance(obj, collections.abc.Mapping):
        return {k: _to_builtin(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_builtin(x) for x in obj]
    return obj


def _dumps(value: Any, *, pretty: bool, escape_html: bool) -> str:
    try:
        text = json.dumps(
            value,
            ensure_ascii=False,
            allow_nan=False,
            sort_keys=True,
            indent=2 if pretty else None,
            separators=(",", ": ") if pretty else (",", ":"),
            default=_json_default,
        )
    except (TypeError, ValueError) as e:
        raise TypeMismatch(str(e)) from e
    return text.translate(_HTML_ESCAPES) if escape_html else text


# --------------------------
# JSON
# --------------------------

@fallible
def must_to_json(value: Any) -> str:
    return _dumps(value, pretty=False, escape_html=True)


@fallible
def must_to_pretty_json(value: Any) -> str:
    return _dumps(value, pretty=True, escape_html=True)


@fallible
def must_to_raw_json(value: Any) -> str:
    return _dumps(value, pretty=False, escape_html=False)


@fallible
def must_from_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise ParseError(str(e)) from e


to_json = recovering(must_to_json, lambda value: "")
to_pretty_json = recovering(must_to_pretty_json, lambda value: "")
to_raw_json = aborting(must_to_raw_json)
from_json = recovering(must_from_json, lambda text: None)


# --------------------------
# YAML
# --------------------------

@fallible
def must_to_yaml(value: Any) -> str:
    try:
        return yaml.safe_dump(_to_builtin(value), sort_keys=True, allow_unicode=True).rstrip("\n")
    except yaml.YAMLError as e:
        raise TypeMismatch(str(e)) from e


@fallible
def must_from_yaml(text: str) -> Any:
    if not isinstance(text, (str, bytes)):
        raise ParseError(f"cannot parse yaml from type {type(text).__name__}")
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ParseError(str(e)) from e


to_yaml = recovering(must_to_yaml, lambda value: "")
from_yaml = recovering(must_from_yaml, lambda text: None)


__all__ = [
    "must_to_json",
    "must_to_pretty_json",
    "must_to_raw_json",
    "must_from_json",
    "to_json",
    "to_pretty_json",
    "to_raw_json",
    "from_json",
    "must_to_yaml",
    "must_from_yaml",
    "to_yaml",
    "from_yaml",
]
