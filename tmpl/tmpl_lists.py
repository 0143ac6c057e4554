"""
Generic operations over ordered, runtime-typed lists.

Each operation is written once as a `must_*` strict form returning an
Outcome; the plain name is the convenience form that aborts the
evaluation when the strict form reports an error. Inputs are never
mutated: every result is a new list.
"""

import math
from typing import Any, List, Optional

from tmpl.tmpl_config import DEFAULT_LIMITS, Limits, _dbg
from tmpl.tmpl_coerce import in_list, is_empty, to_int, to_string, to_strings
from tmpl.tmpl_datatypes import (
    Kind, kind_of, type_name,
    TypeMismatch, ResourceLimitExceeded,
    fallible, aborting, aborts,
)


def _as_list(value: Any, action: str) -> List[Any]:
    if kind_of(value) is not Kind.SEQUENCE:
        raise TypeMismatch(f"cannot {action} on type {type_name(value)}")
    return list(value)


def make_list(*items) -> List[Any]:
    return list(items)


@fallible
def must_push(seq, value) -> List[Any]:
    items = _as_list(seq, "push")
    items.append(value)
    return items


@fallible
def must_prepend(seq, value) -> List[Any]:
    items = _as_list(seq, "prepend")
    return [value] + items


@fallible
def must_chunk(size, seq, *, limits: Limits = DEFAULT_LIMITS) -> List[List[Any]]:
    items = _as_list(seq, "chunk")
    size = to_int(size)
    if size < 1:
        raise TypeMismatch(f"chunk size must be a positive integer, got {size}")
    n = len(items)
    num_chunks = math.ceil(n / size)
    ceiling = min(limits.chunk_count, limits.loop_iterations)
    if num_chunks > ceiling:
        _dbg("chunk", "ceiling", ceiling, "requested", num_chunks)
        raise ResourceLimitExceeded(
            f"number of chunks {num_chunks} exceeds maximum limit of {ceiling}"
        )
    return [items[i:i + size] for i in range(0, n, size)]


@fallible
def must_first(seq) -> Any:
    items = _as_list(seq, "find first")
    if not items:
        return None
    return items[0]


@fallible
def must_last(seq) -> Any:
    items = _as_list(seq, "find last")
    if not items:
        return None
    return items[-1]


@fallible
def must_rest(seq) -> Optional[List[Any]]:
    items = _as_list(seq, "find rest")
    if not items:
        return None
    return items[1:]


@fallible
def must_initial(seq) -> Optional[List[Any]]:
    items = _as_list(seq, "find initial")
    if not items:
        return None
    return items[:-1]


@fallible
def must_reverse(seq) -> List[Any]:
    items = _as_list(seq, "reverse")
    items.reverse()
    return items


@fallible
def must_compact(seq) -> List[Any]:
    items = _as_list(seq, "compact")
    return [item for item in items if not is_empty(item)]


@fallible
def must_uniq(seq) -> List[Any]:
    items = _as_list(seq, "find uniq")
    dest: List[Any] = []
    for item in items:
        if not in_list(dest, item):
            dest.append(item)
    return dest


@fallible
def must_without(seq, *omit) -> List[Any]:
    items = _as_list(seq, "find without")
    return [item for item in items if not in_list(omit, item)]


@fallible
def must_has(needle, haystack) -> bool:
    if haystack is None:
        return False
    return in_list(_as_list(haystack, "find has"), needle)


def _clamp(index: int, length: int) -> int:
    return max(0, min(index, length))


@fallible
def must_slice(seq, *indices) -> Optional[List[Any]]:
    """
    slice $list     -> list[0:len]
    slice $list 3   -> list[3:len]
    slice $list 3 5 -> list[3:5]

    Bounds are clamped into [0, len]; negative bounds do not wrap around.
    """
    if kind_of(seq) is not Kind.SEQUENCE:
        raise TypeMismatch(f"list should be a sequence but got {type_name(seq)}")
    items = list(seq)
    n = len(items)
    if n == 0:
        return None
    start = to_int(indices[0]) if len(indices) > 0 else 0
    end = to_int(indices[1]) if len(indices) > 1 else n
    start, end = _clamp(start, n), _clamp(end, n)
    if start >= end:
        return []
    return items[start:end]


@aborts
def concat(*seqs) -> List[Any]:
    out: List[Any] = []
    for seq in seqs:
        if kind_of(seq) is not Kind.SEQUENCE:
            raise TypeMismatch(f"cannot concat type {type_name(seq)} as list")
        out.extend(seq)
    return out


def sort_alpha(value) -> List[str]:
    if kind_of(value) is Kind.SEQUENCE:
        return sorted(to_strings(value))
    return [to_string(value)]


push = aborting(must_push)
prepend = aborting(must_prepend)
chunk = aborting(must_chunk)
first = aborting(must_first)
last = aborting(must_last)
rest = aborting(must_rest)
initial = aborting(must_initial)
reverse = aborting(must_reverse)
compact = aborting(must_compact)
uniq = aborting(must_uniq)
without = aborting(must_without)
has = aborting(must_has)
slice_ = aborting(must_slice)
