import re
from typing import List

from tmpl.tmpl_coerce import to_int, to_string
from tmpl.tmpl_datatypes import ParseError, fallible, aborting


def _compile(pattern) -> re.Pattern:
    try:
        return re.compile(to_string(pattern))
    except re.error as e:
        raise ParseError(f"invalid regular expression {to_string(pattern)!r}: {e}") from e


def _find_all(rx: re.Pattern, s: str, n: int) -> List[re.Match]:
    if n == 0:
        return []
    out = []
    for m in rx.finditer(s):
        out.append(m)
        if 0 < n <= len(out):
            break
    return out


@fallible
def must_regex_match(pattern, s) -> bool:
    return _compile(pattern).search(to_string(s)) is not None


@fallible
def must_regex_find_all(pattern, s, n) -> List[str]:
    return [m.group(0) for m in _find_all(_compile(pattern), to_string(s), to_int(n))]


@fallible
def must_regex_find(pattern, s) -> str:
    m = _compile(pattern).search(to_string(s))
    return m.group(0) if m else ""


@fallible
def must_regex_replace_all(pattern, s, repl) -> str:
    rx = _compile(pattern)
    try:
        return rx.sub(to_string(repl), to_string(s))
    except re.error as e:
        # Bad group reference in the replacement template
        raise ParseError(f"invalid replacement {to_string(repl)!r}: {e}") from e


@fallible
def must_regex_replace_all_literal(pattern, s, repl) -> str:
    literal = to_string(repl)
    return _compile(pattern).sub(lambda _m: literal, to_string(s))


@fallible
def must_regex_split(pattern, s, n) -> List[str]:
    """
    Split `s` around matches of `pattern`, returning at most `n` pieces
    (all pieces when n < 0, none when n == 0). Capture groups are not
    spliced into the result.
    """
    rx = _compile(pattern)
    s = to_string(s)
    n = to_int(n)
    if n == 0:
        return []
    if rx.pattern and not s:
        return [""]
    pieces: List[str] = []
    beg = end = 0
    for m in _find_all(rx, s, n):
        if n > 0 and len(pieces) == n - 1:
            break
        end = m.start()
        if m.end() != 0:
            pieces.append(s[beg:end])
        beg = m.end()
    if end != len(s):
        pieces.append(s[beg:])
    return pieces


def regex_quote_meta(s) -> str:
    return re.escape(to_string(s))


regex_match = aborting(must_regex_match)
regex_find_all = aborting(must_regex_find_all)
regex_find = aborting(must_regex_find)
regex_replace_all = aborting(must_regex_replace_all)
regex_replace_all_literal = aborting(must_regex_replace_all_literal)
regex_split = aborting(must_regex_split)
