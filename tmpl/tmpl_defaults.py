from typing import Any

from tmpl.tmpl_coerce import is_empty, to_string
from tmpl.tmpl_datatypes import ErrorKind, TemplateAbort


def default(d, *given) -> Any:
    """
    Return `given` unless it looks unset, in which case return `d`.

    Zero numbers, empty text/lists/mappings, False and None count as unset;
    other objects never do.
    """
    if not given or is_empty(given[0]):
        return d
    return given[0]


def empty(value) -> bool:
    return is_empty(value)


def coalesce(*values) -> Any:
    for v in values:
        if not is_empty(v):
            return v
    return None


def all_(*values) -> bool:
    return all(not is_empty(v) for v in values)


def any_(*values) -> bool:
    return any(not is_empty(v) for v in values)


def ternary(vt, vf, cond) -> Any:
    return vt if cond else vf


def fail(msg):
    raise TemplateAbort(to_string(msg), ErrorKind.FAIL)
