"""
Path and URL helpers.

The slash-path functions are purely lexical and behave the same on every
host; the `os_*` variants follow the host's path conventions.
"""

import os.path
import posixpath
from typing import Any, Dict
from urllib.parse import urlsplit, urlunsplit

from tmpl.tmpl_coerce import to_string
from tmpl.tmpl_datatypes import Kind, kind_of, ParseError, TypeMismatch, aborts


# --- Slash paths ---

def clean(p) -> str:
    """Shortest lexically equivalent path: "a//b/./c/.." -> "a/b"."""
    path = to_string(p)
    if not path:
        return "."
    out = posixpath.normpath(path)
    # normpath keeps exactly two leading slashes
    if out.startswith("//"):
        out = "/" + out.lstrip("/")
    return out


def base(p) -> str:
    path = to_string(p)
    if not path:
        return "."
    path = path.rstrip("/")
    if not path:
        return "/"
    return path.rsplit("/", 1)[-1]


def dir_(p) -> str:
    path = to_string(p)
    head = path[:path.rfind("/") + 1]
    return clean(head)


def ext(p) -> str:
    path = to_string(p)
    for i in range(len(path) - 1, -1, -1):
        if path[i] == "/":
            break
        if path[i] == ".":
            return path[i:]
    return ""


def is_abs(p) -> bool:
    return to_string(p).startswith("/")


# --- Host paths ---

def os_base(p) -> str:
    path = to_string(p)
    if not path:
        return "."
    stripped = path.rstrip(os.sep)
    if not stripped:
        return os.sep
    return os.path.basename(stripped)


def os_clean(p) -> str:
    path = to_string(p)
    return os.path.normpath(path) if path else "."


def os_dir(p) -> str:
    path = to_string(p)
    return os_clean(os.path.dirname(path))


def os_ext(p) -> str:
    return ext(to_string(p).replace(os.sep, "/"))


def os_is_abs(p) -> bool:
    return os.path.isabs(to_string(p))


# --- URLs ---

@aborts
def url_parse(v) -> Dict[str, str]:
    text = to_string(v)
    try:
        parts = urlsplit(text)
        hostname = parts.hostname or ""
    except ValueError as e:
        raise ParseError(f"unable to parse url {text!r}: {e}") from e
    userinfo = ""
    if "@" in parts.netloc:
        userinfo = parts.netloc.rsplit("@", 1)[0]
    host = parts.netloc.rsplit("@", 1)[-1]
    path, opaque = parts.path, ""
    # "mailto:user@example.com" has an opaque part instead of a path
    if parts.scheme and not parts.netloc and path and not path.startswith("/"):
        path, opaque = "", path
    return {
        "scheme": parts.scheme,
        "host": host,
        "hostname": hostname,
        "path": path,
        "query": parts.query,
        "opaque": opaque,
        "fragment": parts.fragment,
        "userinfo": userinfo,
    }


@aborts
def url_join(d) -> str:
    if kind_of(d) is not Kind.MAPPING:
        raise TypeMismatch(f"cannot urlJoin on type {type(d).__name__}")

    def field(name: str) -> str:
        value: Any = d.get(name, "")
        return to_string(value)

    scheme = field("scheme")
    opaque = field("opaque")
    if opaque:
        url = f"{scheme}:{opaque}" if scheme else opaque
        query, fragment = field("query"), field("fragment")
        if query:
            url += "?" + query
        if fragment:
            url += "#" + fragment
        return url
    netloc = field("host")
    userinfo = field("userinfo")
    if userinfo:
        netloc = f"{userinfo}@{netloc}"
    path = field("path")
    if netloc and path and not path.startswith("/"):
        path = "/" + path
    return urlunsplit((scheme, netloc, path, field("query"), field("fragment")))
