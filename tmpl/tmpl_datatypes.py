"""
Defines the core data types for the tmpl function library.

This module provides the runtime value categories every operation
dispatches on, the error kinds an operation can report, and the
Outcome type plus the adapters that derive the strict (Outcome-returning)
and convenience (abort-on-error) form of each operation from one core.
"""

import collections.abc
import enum
import functools
import numbers
from dataclasses import dataclass
from typing import Any, Callable, Optional


# =================================================================
# Runtime value categories
# =================================================================

class Kind(enum.Enum):
    """The closed set of categories a template value can fall into."""
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    TEXT = "text"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OPAQUE = "opaque"


def kind_of(value: Any) -> Kind:
    match value:
        case None:
            return Kind.NULL
        # bool is a subclass of int, so check it before Number
        case bool():
            return Kind.BOOL
        case numbers.Number():
            return Kind.NUMBER
        case str() | bytes() | bytearray():
            return Kind.TEXT
        case collections.abc.Mapping():
            return Kind.MAPPING
        case collections.abc.Sequence():
            return Kind.SEQUENCE
        case _:
            return Kind.OPAQUE


def type_name(value: Any) -> str:
    return type(value).__name__


# =================================================================
# Errors
# =================================================================

class ErrorKind(enum.Enum):
    TYPE_MISMATCH = "TypeMismatch"
    RESOURCE_LIMIT_EXCEEDED = "ResourceLimitExceeded"
    PARSE_ERROR = "ParseError"
    ARITY_ERROR = "ArityError"
    DIVISION_BY_ZERO = "DivisionByZero"
    # raised on purpose by the template author via `fail`
    FAIL = "Fail"


class TemplateFuncError(Exception):
    """Base class for recoverable failures reported by a strict form."""
    kind: ErrorKind = ErrorKind.TYPE_MISMATCH

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TypeMismatch(TemplateFuncError):
    kind = ErrorKind.TYPE_MISMATCH


class ResourceLimitExceeded(TemplateFuncError):
    kind = ErrorKind.RESOURCE_LIMIT_EXCEEDED


class ParseError(TemplateFuncError):
    kind = ErrorKind.PARSE_ERROR


class ArityError(TemplateFuncError):
    kind = ErrorKind.ARITY_ERROR


class TemplateAbort(Exception):
    """
    The fatal signal raised by convenience forms.

    The host is expected to stop the enclosing template evaluation when it
    sees this; the originating TemplateFuncError (if any) is chained as
    __cause__ and mirrored in `error`.
    """
    def __init__(self, message: str, kind: ErrorKind, error: Optional[TemplateFuncError] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.error = error

    @classmethod
    def from_error(cls, error: TemplateFuncError) -> "TemplateAbort":
        return cls(str(error), error.kind, error)


# =================================================================
# Dual-result contract
# =================================================================

@dataclass(frozen=True)
class Outcome:
    """The result of a strict form: a value, or the error that prevented one."""
    value: Any = None
    error: Optional[TemplateFuncError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise TemplateAbort.from_error(self.error) from self.error
        return self.value

    def __iter__(self):
        # Allows `value, err = must_push(...)`
        yield self.value
        yield self.error


def fallible(func: Callable) -> Callable[..., Outcome]:
    """Turn an operation that raises TemplateFuncError into a strict form."""
    @functools.wraps(func)
    def strict(*args, **kwargs) -> Outcome:
        try:
            return Outcome(func(*args, **kwargs))
        except TemplateFuncError as e:
            return Outcome(None, e)
    return strict


def aborting(strict: Callable[..., Outcome]) -> Callable:
    """Derive the convenience form: same result, but errors abort the evaluation."""
    @functools.wraps(strict)
    def convenience(*args, **kwargs):
        return strict(*args, **kwargs).unwrap()
    return convenience


def recovering(strict: Callable[..., Outcome], fallback: Callable) -> Callable:
    """
    Derive a convenience form that never aborts.

    On error, `fallback` is called with the original arguments and its
    return value is used instead.
    """
    @functools.wraps(strict)
    def convenience(*args, **kwargs):
        out = strict(*args, **kwargs)
        if out.ok:
            return out.value
        return fallback(*args, **kwargs)
    return convenience


def aborts(func: Callable) -> Callable:
    """Convenience form for operations that have no registered strict form."""
    return aborting(fallible(func))


__all__ = [
    "Kind",
    "kind_of",
    "type_name",
    "ErrorKind",
    "TemplateFuncError",
    "TypeMismatch",
    "ResourceLimitExceeded",
    "ParseError",
    "ArityError",
    "TemplateAbort",
    "Outcome",
    "fallible",
    "aborting",
    "recovering",
    "aborts",
]
