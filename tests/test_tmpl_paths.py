import os

import pytest
from tmpl.tmpl_datatypes import ErrorKind, TemplateAbort
from tmpl.tmpl_paths import (
    base, dir_, clean, ext, is_abs, os_base, os_clean, os_dir, os_ext, os_is_abs, url_parse, url_join,
)


@pytest.mark.parametrize("path, expected", [
    ("", "."),
    ("a/b/c", "a/b/c"),
    ("a//b", "a/b"),
    ("a/./b/", "a/b"),
    ("a/b/../c", "a/c"),
    ("/../a", "/a"),
    ("../../a", "../../a"),
    ("//a//b", "/a/b"),
    ("/", "/"),
])
def test_clean(path, expected):
    assert clean(path) == expected


@pytest.mark.parametrize("path, expected", [
    ("", "."),
    ("/", "/"),
    ("a/b", "b"),
    ("a/b/", "b"),
    ("file.txt", "file.txt"),
])
def test_base(path, expected):
    assert base(path) == expected


@pytest.mark.parametrize("path, expected", [
    ("", "."),
    ("a", "."),
    ("a/b", "a"),
    ("/a", "/"),
    ("/a/b/", "/a/b"),
    ("a//b/c", "a/b"),
])
def test_dir(path, expected):
    assert dir_(path) == expected


@pytest.mark.parametrize("path, expected", [
    ("a/b.txt", ".txt"),
    ("a.tar.gz", ".gz"),
    (".bashrc", ".bashrc"),
    ("a.d/file", ""),
    ("noext", ""),
])
def test_ext(path, expected):
    assert ext(path) == expected


def test_is_abs():
    assert is_abs("/etc")
    assert not is_abs("etc")


def test_os_paths_follow_host_conventions():
    p = os.path.join("a", "b", "file.txt")
    assert os_base(p) == "file.txt"
    assert os_dir(p) == os.path.join("a", "b")
    assert os_ext(p) == ".txt"
    assert os_clean(os.path.join("a", ".", "b")) == os.path.join("a", "b")
    assert os_clean("") == "."
    assert os_base("") == "."
    assert os_is_abs(os.path.abspath("x"))
    assert not os_is_abs("x")


def test_url_parse():
    parts = url_parse("https://user:pw@example.com:8080/a/b?x=1&y=2#frag")
    assert parts == {
        "scheme": "https",
        "host": "example.com:8080",
        "hostname": "example.com",
        "path": "/a/b",
        "query": "x=1&y=2",
        "opaque": "",
        "fragment": "frag",
        "userinfo": "user:pw",
    }


def test_url_parse_opaque():
    parts = url_parse("mailto:someone@example.com")
    assert parts["scheme"] == "mailto"
    assert parts["opaque"] == "someone@example.com"
    assert parts["path"] == ""


def test_url_parse_malformed_aborts():
    with pytest.raises(TemplateAbort) as excinfo:
        url_parse("http://[::1")
    assert excinfo.value.kind is ErrorKind.PARSE_ERROR


def test_url_join():
    assert url_join({"scheme": "https", "host": "example.com", "path": "/a", "query": "x=1"}) == \
        "https://example.com/a?x=1"
    assert url_join({"scheme": "http", "host": "h", "userinfo": "u", "path": "p", "fragment": "f"}) == \
        "http://u@h/p#f"
    assert url_join({"scheme": "mailto", "opaque": "a@b.c"}) == "mailto:a@b.c"


def test_url_join_inverts_url_parse():
    url = "https://user:pw@example.com:8080/a/b?x=1#frag"
    assert url_join(url_parse(url)) == url


def test_url_join_requires_mapping():
    with pytest.raises(TemplateAbort):
        url_join("https://example.com")
