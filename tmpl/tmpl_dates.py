"""
Date and duration helpers.

Times are `datetime` values (naive ones are read as local time), `date`
values (local midnight), or epoch seconds; anything else stands for "now".
Layouts are strftime/strptime directives. Durations use the compact
"1h30m", "-15m", "1.5s" notation.
"""

import math
import re
from datetime import date as _date, datetime, time as _time, timedelta, timezone, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tmpl.tmpl_coerce import INT64_MAX, INT64_MIN, to_int64, to_string
from tmpl.tmpl_datatypes import Kind, kind_of, type_name, ParseError, TypeMismatch, fallible, recovering

HTML_DATE = "%Y-%m-%d"

# The zero time, returned when text cannot be parsed into a date.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE
DAY = 24 * HOUR
MONTH = 30 * DAY
YEAR = 365 * DAY

_UNITS = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # U+00B5 micro sign
    "μs": MICROSECOND,  # U+03BC greek mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

_PART_RE = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.]+)")


# --- Durations ---

def parse_duration(text: str) -> int:
    """Parse "1h30m", "-1.5h", "300ms" into nanoseconds."""
    s = text
    negative = False
    if s[:1] in ("+", "-"):
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise ParseError(f"invalid duration {text!r}")
    total = Decimal(0)
    pos = 0
    while pos < len(s):
        m = _PART_RE.match(s, pos)
        if not m or m.group(1) in ("", "."):
            raise ParseError(f"invalid duration {text!r}")
        unit = _UNITS.get(m.group(2))
        if unit is None:
            raise ParseError(f"unknown unit {m.group(2)!r} in duration {text!r}")
        try:
            total += Decimal(m.group(1)) * unit
        except InvalidOperation as e:
            raise ParseError(f"invalid duration {text!r}") from e
        pos = m.end()
    ns = int(total)
    # Durations span the signed 64-bit nanosecond range
    if ns > (INT64_MAX if not negative else -INT64_MIN):
        raise ParseError(f"invalid duration {text!r}")
    return -ns if negative else ns


def _fraction(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10 ** precision)
    digits = f"{frac:0{precision}d}".rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def format_duration(ns: int) -> str:
    """Format nanoseconds as "72h3m0.5s", "1.5ms", "0s"."""
    if ns == 0:
        return "0s"
    u = abs(ns)
    if u < SECOND:
        if u < MICROSECOND:
            text = f"{u}ns"
        elif u < MILLISECOND:
            text = _fraction(u, 3) + "µs"
        else:
            text = _fraction(u, 6) + "ms"
    else:
        seconds, rem = divmod(u, SECOND)
        text = _fraction((seconds % 60) * SECOND + rem, 9) + "s"
        minutes = seconds // 60
        if minutes:
            text = f"{minutes % 60}m" + text
            hours = minutes // 60
            if hours:
                text = f"{hours}h" + text
    return "-" + text if ns < 0 else text


# --- Time values ---

def _zone(name: str) -> Optional[tzinfo]:
    """Resolve a zone name; None means the host's local zone."""
    if name == "Local":
        return None
    if name in ("", "UTC"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return timezone.utc


def _to_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, _date):
        return datetime.combine(value, _time())
    if kind_of(value) is Kind.NUMBER:
        try:
            return datetime.fromtimestamp(value, timezone.utc)
        except (OverflowError, OSError, ValueError, TypeError):
            pass
    return now()


def _aware(t: datetime) -> datetime:
    return t if t.tzinfo is not None else t.astimezone()


def now() -> datetime:
    return datetime.now().astimezone()


def date_in_zone(fmt, value, zone) -> str:
    t = _to_time(value)
    return t.astimezone(_zone(to_string(zone))).strftime(to_string(fmt))


def date(fmt, value) -> str:
    return date_in_zone(fmt, value, "Local")


def html_date(value) -> str:
    return date_in_zone(HTML_DATE, value, "Local")


def html_date_in_zone(value, zone) -> str:
    return date_in_zone(HTML_DATE, value, zone)


@fallible
def must_date_modify(spec, value) -> datetime:
    if not isinstance(value, datetime):
        raise TypeMismatch(f"cannot modify date of type {type_name(value)}")
    ns = parse_duration(to_string(spec))
    try:
        return value + timedelta(microseconds=ns / 1000)
    except OverflowError as e:
        raise TypeMismatch(f"date {value.isoformat()} moved by {to_string(spec)} is out of range") from e


# An unparsable duration leaves the time unchanged
date_modify = recovering(must_date_modify, lambda spec, value: value)


def date_ago(value) -> str:
    elapsed = (now() - _aware(_to_time(value))).total_seconds()
    # Round half away from zero to whole seconds
    seconds = math.copysign(math.floor(abs(elapsed) + 0.5), elapsed)
    return format_duration(int(seconds) * SECOND)


def duration(sec) -> str:
    match kind_of(sec):
        case Kind.TEXT | Kind.NUMBER:
            n = to_int64(sec)
        case _:
            n = 0
    return format_duration(n * SECOND)


def duration_round(value) -> str:
    """
    Render a duration using only its largest unit: "2y", "3mo", "5d", "1h".

    Accepts duration text, nanoseconds, or a datetime (time elapsed since).
    Months are 30 days and years 365 days.
    """
    if isinstance(value, datetime):
        d = int((now() - _aware(value)) / timedelta(microseconds=1)) * MICROSECOND
    elif isinstance(value, str):
        try:
            d = parse_duration(value)
        except ParseError:
            d = 0
    elif kind_of(value) is Kind.NUMBER:
        d = to_int64(value)
    else:
        d = 0
    u = abs(d)
    for length, suffix in ((YEAR, "y"), (MONTH, "mo"), (DAY, "d"), (HOUR, "h"), (MINUTE, "m"), (SECOND, "s")):
        if u > length:
            return f"{u // length}{suffix}"
    return "0s"


@fallible
def must_to_date(fmt, text) -> datetime:
    try:
        parsed = datetime.strptime(to_string(text), to_string(fmt))
    except ValueError as e:
        raise ParseError(str(e)) from e
    return _aware(parsed)


to_date = recovering(must_to_date, lambda fmt, text: ZERO_TIME)


def unix_epoch(value) -> str:
    return str(math.floor(_to_time(value).timestamp()))
