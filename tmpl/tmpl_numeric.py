"""
Integer and float arithmetic over coerced template values, plus the
bounded integer-range generators (`until`, `untilStep`, `seq`).
"""

import math
import random
import re
from typing import List

from tmpl.tmpl_config import DEFAULT_LIMITS, Limits, _dbg
from tmpl.tmpl_coerce import to_float64, to_int64, to_int, to_string
from tmpl.tmpl_datatypes import (
    ErrorKind, TemplateAbort, TypeMismatch, ResourceLimitExceeded, aborts,
)

_OCTAL_RE = re.compile(r"[+-]?[0-7]+")


# --- Arithmetic ---

def add1(i) -> int:
    return to_int64(i) + 1


def add(*values) -> int:
    return sum(to_int64(v) for v in values)


def sub(a, b) -> int:
    return to_int64(a) - to_int64(b)


def mul(a, *values) -> int:
    out = to_int64(a)
    for v in values:
        out *= to_int64(v)
    return out


def _divisor(b, op: str) -> int:
    d = to_int64(b)
    if d == 0:
        raise TemplateAbort(f"integer {op} by zero", ErrorKind.DIVISION_BY_ZERO)
    return d


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def div(a, b) -> int:
    """Integer division truncating toward zero."""
    d = _divisor(b, "divide")
    return _trunc_div(to_int64(a), d)


def mod(a, b) -> int:
    """Remainder carrying the sign of the dividend."""
    d = _divisor(b, "modulo")
    n = to_int64(a)
    return n - d * _trunc_div(n, d)


@aborts
def rand_int(lo, hi) -> int:
    lo, hi = to_int(lo), to_int(hi)
    if hi <= lo:
        raise TypeMismatch(f"randInt needs max > min, got [{lo}, {hi})")
    return random.randrange(lo, hi)


def max_int(a, *values) -> int:
    return max([to_int64(a)] + [to_int64(v) for v in values])


def min_int(a, *values) -> int:
    return min([to_int64(a)] + [to_int64(v) for v in values])


def max_float(a, *values) -> float:
    return max([to_float64(a)] + [to_float64(v) for v in values])


def min_float(a, *values) -> float:
    return min([to_float64(a)] + [to_float64(v) for v in values])


def _whole(x: float, op) -> float:
    # Infinities and NaN pass through unchanged
    if not math.isfinite(x):
        return x
    return float(op(x))


def floor(a) -> float:
    return _whole(to_float64(a), math.floor)


def ceil(a) -> float:
    return _whole(to_float64(a), math.ceil)


def round_(a, places, threshold=0.5) -> float:
    """
    Round to `places` decimals, rounding up only when the fractional part
    at that position is at least `threshold`.

    round 3.14159 2      -> 3.14
    round 2.5 0          -> 3.0
    round 2.5 0 0.6      -> 2.0
    """
    val = to_float64(a)
    try:
        pow10 = 10.0 ** to_float64(places)
    except OverflowError:
        pow10 = math.inf
    if pow10 == 0:
        # 0/0, as IEEE division would give
        return math.nan
    digit = pow10 * val
    frac, _ = math.modf(digit)
    if frac >= to_float64(threshold):
        rounded = _whole(digit, math.ceil)
    else:
        rounded = _whole(digit, math.floor)
    return rounded / pow10


def to_decimal(v) -> int:
    """Read octal text (e.g. a file mode like "0755") as an integer."""
    text = to_string(v)
    if not _OCTAL_RE.fullmatch(text):
        return 0
    n = int(text, 8)
    if n > 2**63 - 1 or n < -(2**63):
        return 0
    return n


def atoi(s) -> int:
    return to_int64(s)


# --- Ranges ---

@aborts
def until_step(start, stop, step, *, limits: Limits = DEFAULT_LIMITS) -> List[int]:
    start, stop, step = to_int(start), to_int(stop), to_int(step)
    if step == 0:
        return []
    iterations = abs(stop - start) / abs(step)
    if iterations > limits.loop_iterations:
        _dbg("untilStep", "ceiling", limits.loop_iterations, "requested", iterations)
        raise ResourceLimitExceeded(
            f"too many iterations in untilStep; max allowed is {limits.loop_iterations}, got {iterations:g}"
        )
    if stop < start:
        if step >= 0:
            return []
        return list(range(start, stop, step))
    if step <= 0:
        return []
    return list(range(start, stop, step))


def until(count, *, limits: Limits = DEFAULT_LIMITS) -> List[int]:
    count = to_int(count)
    step = -1 if count < 0 else 1
    return until_step(0, count, step, limits=limits)


def seq(*params, limits: Limits = DEFAULT_LIMITS) -> str:
    """
    Space-delimited integer sequence, ends inclusive:

    seq 5        -> 1 2 3 4 5
    seq -3       -> 1 0 -1 -2 -3
    seq 2 5      -> 2 3 4 5
    seq 0 2 10   -> 0 2 4 6 8 10
    seq 5 1 1    -> ""   (positive step with a descending range)
    """
    nums = [to_int(p) for p in params]
    increment = 1
    match nums:
        case [end]:
            start = 1
            if end < start:
                increment = -1
            values = until_step(start, end + increment, increment, limits=limits)
        case [start, end]:
            if end < start:
                increment = -1
            values = until_step(start, end + increment, increment, limits=limits)
        case [start, step, end]:
            if end < start:
                increment = -1
                if step > 0:
                    return ""
            values = until_step(start, end + increment, step, limits=limits)
        case _:
            return ""
    return " ".join(str(v) for v in values)
