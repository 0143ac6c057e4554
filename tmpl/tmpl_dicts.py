"""
Operations over string-keyed mappings.

`set_` and `unset` mutate the mapping they are given and return that same
instance; callers that need a copy should build one first (e.g. with
`pick` or `omit`). Everything else returns new containers.
"""

import collections.abc
from typing import Any, Dict, List

from tmpl.tmpl_coerce import to_string
from tmpl.tmpl_datatypes import Kind, kind_of, type_name, TypeMismatch, ArityError, aborts


def _require_mapping(value: Any, action: str):
    if kind_of(value) is not Kind.MAPPING:
        raise TypeMismatch(f"cannot {action} on type {type_name(value)}")
    return value


def _require_mutable(value: Any, action: str):
    if not isinstance(value, collections.abc.MutableMapping):
        raise TypeMismatch(f"cannot {action} on type {type_name(value)}")
    return value


def get(d, key) -> Any:
    if kind_of(d) is not Kind.MAPPING:
        return ""
    key = to_string(key)
    if key in d:
        return d[key]
    return ""


@aborts
def set_(d, key, value):
    _require_mutable(d, "set")[to_string(key)] = value
    return d


@aborts
def unset(d, key):
    _require_mutable(d, "unset").pop(to_string(key), None)
    return d


@aborts
def has_key(d, key) -> bool:
    return to_string(key) in _require_mapping(d, "check key")


def pluck(key, *dicts) -> List[Any]:
    key = to_string(key)
    out = []
    for d in dicts:
        if kind_of(d) is Kind.MAPPING and key in d:
            out.append(d[key])
    return out


@aborts
def keys(*dicts) -> List[Any]:
    out = []
    for d in dicts:
        out.extend(_require_mapping(d, "list keys").keys())
    return out


@aborts
def pick(d, *names) -> Dict[str, Any]:
    _require_mapping(d, "pick")
    out = {}
    for name in names:
        k = to_string(name)
        if k in d:
            out[k] = d[k]
    return out


@aborts
def omit(d, *names) -> Dict[str, Any]:
    _require_mapping(d, "omit")
    dropped = {to_string(n) for n in names}
    return {k: v for k, v in d.items() if k not in dropped}


@aborts
def values(d) -> List[Any]:
    return list(_require_mapping(d, "list values").values())


def make_dict(*kv) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for i in range(0, len(kv), 2):
        key = to_string(kv[i])
        out[key] = kv[i + 1] if i + 1 < len(kv) else ""
    return out


@aborts
def dig(*args):
    """
    dig "a" "b" "default" $map

    Walks nested mappings by successive keys. Returns the default as soon as a
    key is missing or a step along the way is not a mapping.
    """
    if len(args) < 3:
        raise ArityError("dig needs at least three arguments")
    node = args[-1]
    default = args[-2]
    path = [to_string(k) for k in args[:-2]]
    for key in path:
        if kind_of(node) is not Kind.MAPPING or key not in node:
            return default
        node = node[key]
    return node
