"""
The function registry and the Mustache host binding.

`func_map` builds the name -> callable table a template host resolves
function calls through. `TemplateRunner` is a thin host: it renders
Mustache text with pystache and exposes the unary text functions as
section lambdas, turning a `TemplateAbort` into an error result.
"""

import functools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Optional

import pystache
from pystache.parser import ParsingError

from tmpl import (
    tmpl_coerce as coerce,
    tmpl_dates as dates,
    tmpl_defaults as defaults,
    tmpl_dicts as dicts,
    tmpl_lists as lists,
    tmpl_numeric as numeric,
    tmpl_paths as paths,
    tmpl_reflect as reflect,
    tmpl_regex as regex,
    tmpl_serialize as serialize,
    tmpl_strings as strings,
)
from tmpl.tmpl_config import Limits, _dbg
from tmpl.tmpl_datatypes import ErrorKind, TemplateAbort


def func_map(limits: Optional[Limits] = None) -> Dict[str, Callable]:
    """
    Produce a fresh function table.

    Plain names are convenience forms; `must`-prefixed names are the strict
    forms returning an Outcome. Operations that do bounded work are bound
    to `limits` (read from the environment when omitted).
    """
    if limits is None:
        limits = Limits.from_env()

    def bounded(func: Callable) -> Callable:
        return functools.partial(func, limits=limits)

    table: Dict[str, Callable] = {
        # Dates
        "ago": dates.date_ago,
        "dateAgo": dates.date_ago,
        "date": dates.date,
        "dateInZone": dates.date_in_zone,
        "dateModify": dates.date_modify,
        "duration": dates.duration,
        "durationRound": dates.duration_round,
        "htmlDate": dates.html_date,
        "htmlDateInZone": dates.html_date_in_zone,
        "mustDateModify": dates.must_date_modify,
        "mustToDate": dates.must_to_date,
        "now": dates.now,
        "toDate": dates.to_date,
        "unixEpoch": dates.unix_epoch,

        # Strings
        "trunc": strings.trunc,
        "trim": strings.trim,
        "upper": strings.upper,
        "lower": strings.lower,
        "title": strings.title,
        "substr": strings.substr,
        "repeat": bounded(strings.repeat),
        "trimAll": strings.trim_all,
        "trimPrefix": strings.trim_prefix,
        "trimSuffix": strings.trim_suffix,
        "contains": strings.contains,
        "hasPrefix": strings.has_prefix,
        "hasSuffix": strings.has_suffix,
        "quote": strings.quote,
        "squote": strings.squote,
        "cat": strings.cat,
        "indent": strings.indent,
        "nindent": strings.nindent,
        "replace": strings.replace,
        "plural": strings.plural,
        "sha1sum": strings.sha1sum,
        "sha256sum": strings.sha256sum,
        "sha512sum": strings.sha512sum,
        "adler32sum": strings.adler32sum,
        "toString": coerce.to_string,
        "atoi": numeric.atoi,
        "seq": bounded(numeric.seq),
        "toDecimal": numeric.to_decimal,
        "split": strings.split,
        "splitList": strings.split_list,
        "splitn": strings.splitn,
        "toStrings": coerce.to_strings,
        "until": bounded(numeric.until),
        "untilStep": bounded(numeric.until_step),

        # Arithmetic
        "add1": numeric.add1,
        "add": numeric.add,
        "sub": numeric.sub,
        "div": numeric.div,
        "mod": numeric.mod,
        "mul": numeric.mul,
        "randInt": numeric.rand_int,
        "biggest": numeric.max_int,
        "max": numeric.max_int,
        "min": numeric.min_int,
        "maxf": numeric.max_float,
        "minf": numeric.min_float,
        "ceil": numeric.ceil,
        "floor": numeric.floor,
        "round": numeric.round_,

        # String lists
        "join": strings.join,
        "sortAlpha": lists.sort_alpha,

        # Defaults
        "default": defaults.default,
        "empty": defaults.empty,
        "coalesce": defaults.coalesce,
        "all": defaults.all_,
        "any": defaults.any_,
        "compact": lists.compact,
        "mustCompact": lists.must_compact,
        "ternary": defaults.ternary,

        # Serialization
        "fromJSON": serialize.from_json,
        "toJSON": serialize.to_json,
        "toPrettyJSON": serialize.to_pretty_json,
        "toRawJSON": serialize.to_raw_json,
        "mustFromJSON": serialize.must_from_json,
        "mustToJSON": serialize.must_to_json,
        "mustToPrettyJSON": serialize.must_to_pretty_json,
        "mustToRawJSON": serialize.must_to_raw_json,
        "fromYAML": serialize.from_yaml,
        "toYAML": serialize.to_yaml,
        "mustFromYAML": serialize.must_from_yaml,
        "mustToYAML": serialize.must_to_yaml,

        # Reflection
        "typeOf": reflect.type_of,
        "typeIs": reflect.type_is,
        "typeIsLike": reflect.type_is_like,
        "kindOf": reflect.kind_of_name,
        "kindIs": reflect.kind_is,
        "deepEqual": coerce.deep_equal,

        # Paths
        "base": paths.base,
        "dir": paths.dir_,
        "clean": paths.clean,
        "ext": paths.ext,
        "isAbs": paths.is_abs,
        "osBase": paths.os_base,
        "osClean": paths.os_clean,
        "osDir": paths.os_dir,
        "osExt": paths.os_ext,
        "osIsAbs": paths.os_is_abs,

        # Encoding
        "b64enc": strings.b64enc,
        "b64dec": strings.b64dec,
        "b32enc": strings.b32enc,
        "b32dec": strings.b32dec,

        # Data structures
        "tuple": lists.make_list,
        "list": lists.make_list,
        "dict": dicts.make_dict,
        "get": dicts.get,
        "set": dicts.set_,
        "unset": dicts.unset,
        "hasKey": dicts.has_key,
        "pluck": dicts.pluck,
        "keys": dicts.keys,
        "pick": dicts.pick,
        "omit": dicts.omit,
        "values": dicts.values,

        "append": lists.push,
        "push": lists.push,
        "mustAppend": lists.must_push,
        "mustPush": lists.must_push,
        "prepend": lists.prepend,
        "mustPrepend": lists.must_prepend,
        "first": lists.first,
        "mustFirst": lists.must_first,
        "rest": lists.rest,
        "mustRest": lists.must_rest,
        "last": lists.last,
        "mustLast": lists.must_last,
        "initial": lists.initial,
        "mustInitial": lists.must_initial,
        "reverse": lists.reverse,
        "mustReverse": lists.must_reverse,
        "uniq": lists.uniq,
        "mustUniq": lists.must_uniq,
        "without": lists.without,
        "mustWithout": lists.must_without,
        "has": lists.has,
        "mustHas": lists.must_has,
        "slice": lists.slice_,
        "mustSlice": lists.must_slice,
        "concat": lists.concat,
        "dig": dicts.dig,
        "chunk": bounded(lists.chunk),
        "mustChunk": bounded(lists.must_chunk),

        # Flow control
        "fail": defaults.fail,

        # Regular expressions
        "regexMatch": regex.regex_match,
        "mustRegexMatch": regex.must_regex_match,
        "regexFindAll": regex.regex_find_all,
        "mustRegexFindAll": regex.must_regex_find_all,
        "regexFind": regex.regex_find,
        "mustRegexFind": regex.must_regex_find,
        "regexReplaceAll": regex.regex_replace_all,
        "mustRegexReplaceAll": regex.must_regex_replace_all,
        "regexReplaceAllLiteral": regex.regex_replace_all_literal,
        "mustRegexReplaceAllLiteral": regex.must_regex_replace_all_literal,
        "regexSplit": regex.regex_split,
        "mustRegexSplit": regex.must_regex_split,
        "regexQuoteMeta": regex.regex_quote_meta,

        # URLs
        "urlParse": paths.url_parse,
        "urlJoin": paths.url_join,
    }
    _dbg("func_map", len(table), "functions", limits)
    return table


# Functions of one text argument that read naturally as Mustache sections
SECTION_FUNCTIONS = (
    "upper", "lower", "title", "trim", "quote", "squote",
    "b64enc", "b64dec", "b32enc", "b32dec",
    "sha1sum", "sha256sum", "sha512sum", "adler32sum",
    "regexQuoteMeta", "toString", "fail",
)


@dataclass
class ExecutionResult:
    """The structured result of a template rendering."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        if self.error_kind is not None and not msg.startswith(f"{self.error_kind.value}:"):
            return f"{self.error_kind.value}: {msg}"
        return msg


class TemplateRunner:
    """Renders Mustache templates with the function library bound in."""

    def __init__(self, limits: Optional[Limits] = None):
        self.limits = limits if limits is not None else Limits.from_env()
        self.functions = func_map(self.limits)
        self.renderer = pystache.Renderer(escape=lambda u: u)

    def _section_lambdas(self, context: Dict[str, Any], outputs: Dict[str, str]) -> Dict[str, Callable]:
        # pystache hands a section lambda the raw section text and renders
        # whatever it returns as a template. The function result is parked in
        # `outputs` and only a triple-stache reference to it is returned, so
        # it reaches the page verbatim.
        def bind(func: Callable) -> Callable[[str], str]:
            def section(text: str) -> str:
                rendered = self.renderer.render(text, lambdas, context, outputs)
                key = f"_tmpl_section_{len(outputs)}"
                outputs[key] = coerce.to_string(func(rendered))
                return "{{{" + key + "}}}"
            return section

        lambdas = {name: bind(self.functions[name]) for name in SECTION_FUNCTIONS}
        return lambdas

    def render(self, source: str, context: Optional[Dict[str, Any]] = None) -> str:
        """Render `source`, letting TemplateAbort and parse errors propagate."""
        context = context if context is not None else {}
        outputs: Dict[str, str] = {}
        return self.renderer.render(source, self._section_lambdas(context, outputs), context, outputs)

    def handle_template(self, source: str, context: Optional[Dict[str, Any]] = None) -> ExecutionResult:
        try:
            return ExecutionResult('success', self.render(source, context))
        except TemplateAbort as e:
            _dbg("abort", e.kind.value, e.message)
            return ExecutionResult('error', error_message=f"{e.kind.value}: {e.message}", error_kind=e.kind)
        except ParsingError as e:
            _dbg("template parse error", e)
            return ExecutionResult('error', error_message=f"{ErrorKind.PARSE_ERROR.value}: {e}", error_kind=ErrorKind.PARSE_ERROR)


__all__ = [
    "func_map",
    "SECTION_FUNCTIONS",
    "ExecutionResult",
    "TemplateRunner",
]
