"""
Text transforms, base32/64 encoding and checksums.

Argument order follows template conventions: the pattern, count or
separator comes first and the subject string last, so calls read well when
the subject is piped in.
"""

import base64
import binascii
import hashlib
import re
import zlib
from typing import Dict, List

from tmpl.tmpl_config import DEFAULT_LIMITS, Limits, _dbg
from tmpl.tmpl_coerce import to_int, to_string, to_strings
from tmpl.tmpl_datatypes import TypeMismatch, ResourceLimitExceeded, aborts


# --- Case and whitespace ---

def trim(s) -> str:
    return to_string(s).strip()


def upper(s) -> str:
    return to_string(s).upper()


def lower(s) -> str:
    return to_string(s).lower()


# A word is a run of letters/digits, optionally continued by an apostrophe
# contraction ("they're", "o'clock") so the tail stays lowercase.
_WORD_RE = re.compile(r"[^\W_]+(?:['’][^\W_]+)*")


def title(s) -> str:
    return _WORD_RE.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), to_string(s))


# --- Substrings ---

def substr(start, end, s) -> str:
    s = to_string(s)
    start, end = to_int(start), to_int(end)
    if start < 0:
        return s[:max(end, 0)]
    if end < 0 or end > len(s):
        return s[start:]
    return s[start:end]


def trunc(count, s) -> str:
    """Keep the first `count` characters, or the last `-count` when negative."""
    s = to_string(s)
    c = to_int(count)
    if c < 0 and len(s) + c > 0:
        return s[len(s) + c:]
    if c >= 0 and len(s) > c:
        return s[:c]
    return s


@aborts
def repeat(count, s, *, limits: Limits = DEFAULT_LIMITS) -> str:
    s = to_string(s)
    count = to_int(count)
    if count < 0:
        raise TypeMismatch(f"repeat count {count} must not be negative")
    if count > limits.loop_iterations:
        _dbg("repeat", "loop ceiling", limits.loop_iterations, "requested", count)
        raise ResourceLimitExceeded(
            f"repeat count {count} exceeds limit of {limits.loop_iterations}"
        )
    if count * len(s) >= limits.string_length:
        _dbg("repeat", "length ceiling", limits.string_length, "requested", count * len(s))
        raise ResourceLimitExceeded(
            f"repeat count {count} with string length {len(s)} exceeds limit of {limits.string_length}"
        )
    return s * count


# --- Trimming and predicates (pattern first, subject last) ---

def trim_all(cutset, s) -> str:
    return to_string(s).strip(to_string(cutset))


def trim_prefix(prefix, s) -> str:
    return to_string(s).removeprefix(to_string(prefix))


def trim_suffix(suffix, s) -> str:
    return to_string(s).removesuffix(to_string(suffix))


def contains(substr, s) -> bool:
    return to_string(substr) in to_string(s)


def has_prefix(prefix, s) -> bool:
    return to_string(s).startswith(to_string(prefix))


def has_suffix(suffix, s) -> bool:
    return to_string(s).endswith(to_string(suffix))


# --- Quoting and joining ---

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def _escape_char(ch: str) -> str:
    if ch in _ESCAPES:
        return _ESCAPES[ch]
    code = ord(ch)
    if code < 0x20 or code == 0x7F:
        return f"\\x{code:02x}"
    if not ch.isprintable():
        if code <= 0xFFFF:
            return f"\\u{code:04x}"
        return f"\\U{code:08x}"
    return ch


def _double_quote(s: str) -> str:
    return '"' + "".join(_escape_char(ch) for ch in s) + '"'


def quote(*values) -> str:
    return " ".join(_double_quote(to_string(v)) for v in values if v is not None)


def squote(*values) -> str:
    return " ".join(f"'{to_string(v)}'" for v in values if v is not None)


def cat(*values) -> str:
    return " ".join(to_string(v) for v in values if v is not None)


def indent(spaces, s) -> str:
    pad = " " * max(to_int(spaces), 0)
    return pad + to_string(s).replace("\n", "\n" + pad)


def nindent(spaces, s) -> str:
    return "\n" + indent(spaces, s)


def replace(old, new, s) -> str:
    return to_string(s).replace(to_string(old), to_string(new))


def plural(one, many, count) -> str:
    if to_int(count) == 1:
        return to_string(one)
    return to_string(many)


def join(sep, value) -> str:
    return to_string(sep).join(to_strings(value))


# --- Splitting ---

def _positional(parts: List[str]) -> Dict[str, str]:
    return {f"_{i}": part for i, part in enumerate(parts)}


def _split_n(s: str, sep: str, n: int) -> List[str]:
    if n == 0:
        return []
    if sep == "":
        # An empty separator splits after each character
        chars = list(s)
        if n < 0 or n >= len(chars):
            return chars
        return chars[:n - 1] + ["".join(chars[n - 1:])]
    if n < 0:
        return s.split(sep)
    return s.split(sep, n - 1)


def split(sep, s) -> Dict[str, str]:
    return _positional(_split_n(to_string(s), to_string(sep), -1))


def splitn(sep, n, s) -> Dict[str, str]:
    return _positional(_split_n(to_string(s), to_string(sep), to_int(n)))


def split_list(sep, s) -> List[str]:
    return _split_n(to_string(s), to_string(sep), -1)


# --- Encoding ---

def b64enc(s) -> str:
    return base64.b64encode(to_string(s).encode("utf-8")).decode("ascii")


def b64dec(s) -> str:
    # Line breaks from wrapped output are ignored
    text = to_string(s).replace("\r", "").replace("\n", "")
    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        return str(e)
    return data.decode("utf-8", errors="replace")


def b32enc(s) -> str:
    return base64.b32encode(to_string(s).encode("utf-8")).decode("ascii")


def b32dec(s) -> str:
    try:
        data = base64.b32decode(to_string(s).replace("\r", "").replace("\n", ""))
    except (binascii.Error, ValueError) as e:
        return str(e)
    return data.decode("utf-8", errors="replace")


# --- Checksums ---

def sha1sum(s) -> str:
    return hashlib.sha1(to_string(s).encode("utf-8")).hexdigest()


def sha256sum(s) -> str:
    return hashlib.sha256(to_string(s).encode("utf-8")).hexdigest()


def sha512sum(s) -> str:
    return hashlib.sha512(to_string(s).encode("utf-8")).hexdigest()


def adler32sum(s) -> str:
    return str(zlib.adler32(to_string(s).encode("utf-8")))
