import datetime
from collections import OrderedDict
from decimal import Decimal

import pytest
from tmpl.tmpl_datatypes import (
    Kind, kind_of, type_name,
    ErrorKind, TemplateFuncError, TypeMismatch, ResourceLimitExceeded, ParseError, ArityError,
    TemplateAbort, Outcome, fallible, aborting, recovering, aborts,
)


@pytest.mark.parametrize("value, kind", [
    (None, Kind.NULL),
    (True, Kind.BOOL),
    (False, Kind.BOOL),
    (0, Kind.NUMBER),
    (1.5, Kind.NUMBER),
    (Decimal("2"), Kind.NUMBER),
    ("abc", Kind.TEXT),
    (b"abc", Kind.TEXT),
    ([1, 2], Kind.SEQUENCE),
    ((1, 2), Kind.SEQUENCE),
    (range(3), Kind.SEQUENCE),
    ({"a": 1}, Kind.MAPPING),
    (OrderedDict(a=1), Kind.MAPPING),
    ({1, 2}, Kind.OPAQUE),
    (datetime.datetime(2020, 1, 1), Kind.OPAQUE),
    (object(), Kind.OPAQUE),
])
def test_kind_of(value, kind):
    assert kind_of(value) is kind


def test_type_name():
    assert type_name([]) == "list"
    assert type_name(None) == "NoneType"


def test_error_kinds_on_exceptions():
    assert TypeMismatch("x").kind is ErrorKind.TYPE_MISMATCH
    assert ResourceLimitExceeded("x").kind is ErrorKind.RESOURCE_LIMIT_EXCEEDED
    assert ParseError("x").kind is ErrorKind.PARSE_ERROR
    assert ArityError("x").kind is ErrorKind.ARITY_ERROR
    assert issubclass(ParseError, TemplateFuncError)


def test_outcome_unpacks_and_unwraps():
    value, err = Outcome([1, 2])
    assert value == [1, 2]
    assert err is None
    assert Outcome(3).ok
    assert Outcome(3).unwrap() == 3


def test_outcome_unwrap_raises_abort_chained_from_error():
    err = TypeMismatch("cannot push on type int")
    with pytest.raises(TemplateAbort) as excinfo:
        Outcome(None, err).unwrap()
    assert excinfo.value.kind is ErrorKind.TYPE_MISMATCH
    assert excinfo.value.error is err
    assert excinfo.value.__cause__ is err
    assert str(excinfo.value) == "cannot push on type int"


@fallible
def _halve(n):
    if n % 2:
        raise TypeMismatch(f"{n} is odd")
    return n // 2


def test_fallible_returns_outcome():
    assert _halve(4) == Outcome(2)
    out = _halve(3)
    assert not out.ok
    assert out.value is None
    assert isinstance(out.error, TypeMismatch)


def test_aborting_agrees_with_strict_form():
    halve = aborting(_halve)
    assert halve(10) == _halve(10).value
    with pytest.raises(TemplateAbort):
        halve(3)


def test_recovering_uses_fallback_with_original_args():
    halve = recovering(_halve, lambda n: -n)
    assert halve(8) == 4
    assert halve(3) == -3


def test_aborts_only_wraps_template_errors():
    @aborts
    def boom(kind):
        if kind == "template":
            raise ArityError("needs more")
        raise KeyError("other")

    with pytest.raises(TemplateAbort) as excinfo:
        boom("template")
    assert excinfo.value.kind is ErrorKind.ARITY_ERROR
    # Programming errors are not turned into aborts
    with pytest.raises(KeyError):
        boom("other")


def test_wrappers_keep_names():
    assert _halve.__name__ == "_halve"
    assert aborting(_halve).__name__ == "_halve"
