from tmpl.tmpl_coerce import to_string
from tmpl.tmpl_datatypes import kind_of, type_name


def type_of(value) -> str:
    return type_name(value)


def type_is(name, value) -> bool:
    return to_string(name) == type_name(value)


def type_is_like(name, value) -> bool:
    # Matches the type itself or any of its base classes
    target = to_string(name)
    return any(cls.__name__ == target for cls in type(value).__mro__)


def kind_of_name(value) -> str:
    return kind_of(value).value


def kind_is(name, value) -> bool:
    return to_string(name) == kind_of_name(value)
