"""
Built-in functions available in Dataview expressions.

Functions receive already evaluated arguments. Missing arguments arrive as
None and extra arguments are dropped. Names are case-insensitive; unknown
names evaluate to null.
"""

import inspect
import math
import re
from functools import cmp_to_key
from typing import Any, Callable

from loguru import logger

from vault_query.dataview.types import (
    Date,
    Duration,
    Link,
    compare,
    equals,
    to_number,
    to_string,
    truthy,
    typename,
)

FUNCTIONS: dict[str, Callable[..., Any]] = {}
_ARITY: dict[str, int | None] = {}


def register(*names: str):
    """Register a function under one or more names."""

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        params = inspect.signature(fn).parameters.values()
        variadic = any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in params)
        for name in names:
            FUNCTIONS[name] = fn
            _ARITY[name] = None if variadic else len(params)
        return fn

    return decorator


def call_function(name: str, args: list[Any]) -> Any:
    """Call a built-in by name. Unknown functions return None."""
    key = name.lower()
    fn = FUNCTIONS.get(key)
    if fn is None:
        logger.debug(f"Unknown function '{name}', evaluating to null")
        return None

    arity = _ARITY[key]
    if arity is not None:
        args = args[:arity]
    return fn(*args)


# Membership helpers shared with the CONTAINS operator


def contains_value(container: Any, needle: Any) -> bool:
    """List element membership, substring search, or object key membership.

    Lists get a second, link-aware pass: a Link needle matches by path and a
    string needle matches a link path exactly or as a regular expression.
    """
    if isinstance(container, list):
        if any(equals(item, needle) for item in container):
            return True
        for item in container:
            if not isinstance(item, Link):
                continue
            if isinstance(needle, Link) and item.path == needle.path:
                return True
            if isinstance(needle, str) and (item.path == needle or _safe_search(needle, item.path)):
                return True
        return False
    if isinstance(container, str):
        return to_string(needle) in container
    if isinstance(container, dict):
        return to_string(needle) in container
    return False


def _safe_search(pattern: str, text: str) -> bool:
    try:
        return re.search(pattern, text) is not None
    except re.error:
        return pattern in text


@register("contains")
def _contains(container=None, needle=None):
    return contains_value(container, needle)


@register("icontains")
def _icontains(container=None, needle=None):
    if isinstance(container, list):
        lowered = to_string(needle).lower()
        return any(to_string(item).lower() == lowered for item in container)
    if isinstance(container, str):
        return to_string(needle).lower() in container.lower()
    return contains_value(container, needle)


@register("econtains")
def _econtains(container=None, needle=None):
    """Exact containment: list elements must be equal, no link pattern matching."""
    if isinstance(container, list):
        return any(equals(item, needle) for item in container)
    return contains_value(container, needle)


@register("containsword")
def _containsword(container=None, word=None):
    if isinstance(container, list):
        return any(_containsword(item, word) for item in container)
    if not isinstance(container, str) or word is None:
        return False
    pattern = r"\b" + re.escape(to_string(word)) + r"\b"
    return re.search(pattern, container, re.IGNORECASE) is not None


# Constructors and conversions


@register("link")
def _link(path=None, display=None):
    if isinstance(path, Link):
        return Link(path.path, to_string(display) if display is not None else path.display)
    return Link(to_string(path), to_string(display) if display is not None else None)


@register("embed")
def _embed(link=None, embed=True):
    if isinstance(link, Link):
        return Link(link.path, link.display, truthy(embed))
    return Link(to_string(link), None, truthy(embed))


@register("list", "array")
def _list(*values):
    return list(values)


@register("date")
def _date(value=None):
    if isinstance(value, Date):
        return value
    return Date.parse(to_string(value))


@register("dur")
def _dur(value=None):
    if isinstance(value, Duration):
        return value
    return Duration.parse(to_string(value))


@register("number")
def _number(value=None):
    return to_number(value)


@register("string")
def _string(value=None):
    return to_string(value)


@register("typeof")
def _typeof(value=None):
    return typename(value)


@register("default")
def _default(value=None, fallback=None):
    return fallback if value is None else value


@register("choice")
def _choice(condition=None, if_true=None, if_false=None):
    return if_true if truthy(condition) else if_false


# Dates


@register("dateformat")
def _dateformat(value=None, fmt=None):
    if isinstance(value, Date):
        return value.format(fmt or "%Y-%m-%d")
    return to_string(value)


@register("striptime")
def _striptime(value=None):
    if isinstance(value, Date):
        return Date(value.year, value.month, value.day)
    return value


# Numbers


def _numbers(values) -> list[int | float]:
    return [n for n in (to_number(v) for v in values) if n is not None]


@register("round")
def _round(value=None, digits=None):
    number = to_number(value) or 0
    places = int(to_number(digits) or 0)
    multiplier = 10**places
    rounded = math.floor(number * multiplier + 0.5) / multiplier
    return int(rounded) if places <= 0 else rounded


@register("floor")
def _floor(value=None):
    number = to_number(value)
    return None if number is None else math.floor(number)


@register("ceil")
def _ceil(value=None):
    number = to_number(value)
    return None if number is None else math.ceil(number)


@register("min")
def _min(*values):
    if len(values) == 1 and isinstance(values[0], list):
        values = values[0]
    numbers = _numbers(values)
    return min(numbers) if numbers else None


@register("max")
def _max(*values):
    if len(values) == 1 and isinstance(values[0], list):
        values = values[0]
    numbers = _numbers(values)
    return max(numbers) if numbers else None


@register("sum")
def _sum(values=None):
    if not isinstance(values, list):
        return to_number(values) or 0
    return sum(to_number(v) or 0 for v in values)


@register("product")
def _product(values=None):
    if not isinstance(values, list):
        return to_number(values) or 0
    return math.prod(to_number(v) or 0 for v in values)


@register("average")
def _average(values=None):
    if not isinstance(values, list) or not values:
        return 0
    return sum(to_number(v) or 0 for v in values) / len(values)


# Lists


@register("length")
def _length(value=None):
    if isinstance(value, (str, list, dict)):
        return len(value)
    return 0


@register("flat")
def _flat(values=None):
    if not isinstance(values, list):
        return values
    flattened = []
    for item in values:
        if isinstance(item, list) and item:
            flattened.extend(item)
        else:
            flattened.append(item)
    return flattened


@register("reverse")
def _reverse(values=None):
    if isinstance(values, list):
        return list(reversed(values))
    return values


@register("sort")
def _sort(values=None):
    if isinstance(values, list):
        return sorted(values, key=cmp_to_key(compare))
    return values


@register("unique")
def _unique(values=None):
    if not isinstance(values, list):
        return values
    seen: list[Any] = []
    for item in values:
        if not any(equals(item, other) for other in seen):
            seen.append(item)
    return seen


@register("join")
def _join(values=None, separator=None):
    if not isinstance(values, list):
        return to_string(values)
    sep = ", " if separator is None else to_string(separator)
    return sep.join(to_string(v) for v in values)


@register("filter")
def _filter(values=None):
    """Keeps the truthy elements."""
    if not isinstance(values, list):
        return values
    return [v for v in values if truthy(v)]


@register("nonnull")
def _nonnull(values=None):
    if not isinstance(values, list):
        return values
    return [v for v in values if v is not None]


@register("all")
def _all(values=None):
    if not isinstance(values, list):
        return truthy(values)
    return all(truthy(v) for v in values)


@register("any")
def _any(values=None):
    if not isinstance(values, list):
        return truthy(values)
    return any(truthy(v) for v in values)


@register("none")
def _none(values=None):
    if not isinstance(values, list):
        return not truthy(values)
    return not any(truthy(v) for v in values)


# Strings


@register("lower")
def _lower(value=None):
    return to_string(value).lower()


@register("upper")
def _upper(value=None):
    return to_string(value).upper()


@register("trim")
def _trim(value=None):
    return value.strip() if isinstance(value, str) else value


@register("split")
def _split(value=None, separator=None):
    """Split on a literal separator (default ","), dropping empty parts."""
    if not isinstance(value, str):
        return []
    sep = "," if separator is None else to_string(separator)
    if not sep:
        return list(value)
    return [part for part in value.split(sep) if part]


@register("replace")
def _replace(value=None, old=None, new=None):
    """Literal replacement of every occurrence."""
    if not isinstance(value, str):
        return value
    old = to_string(old)
    if not old:
        return value
    return value.replace(old, to_string(new))


@register("regexreplace")
def _regexreplace(value=None, pattern=None, replacement=None):
    if not isinstance(value, str):
        return value
    return re.sub(to_string(pattern), to_string(replacement), value)


@register("regexmatch")
def _regexmatch(value=None, pattern=None):
    """True when pattern matches somewhere in value. Note the (string, pattern) order."""
    if not isinstance(value, str) or not isinstance(pattern, str):
        return False
    return re.search(pattern, value) is not None


@register("regextest")
def _regextest(pattern=None, value=None):
    if not isinstance(value, str) or not isinstance(pattern, str):
        return False
    return re.search(pattern, value) is not None


@register("startswith")
def _startswith(value=None, prefix=None):
    return isinstance(value, str) and value.startswith(to_string(prefix))


@register("endswith")
def _endswith(value=None, suffix=None):
    return isinstance(value, str) and value.endswith(to_string(suffix))


@register("padleft")
def _padleft(value=None, length=None, padding=None):
    text = to_string(value)
    fill = to_string(padding) or " "
    width = int(to_number(length) or 0)
    if len(text) >= width:
        return text
    return (fill * width)[: width - len(text)] + text


@register("padright")
def _padright(value=None, length=None, padding=None):
    text = to_string(value)
    fill = to_string(padding) or " "
    width = int(to_number(length) or 0)
    if len(text) >= width:
        return text
    return text + (fill * width)[: width - len(text)]


@register("substring")
def _substring(value=None, start=None, end=None):
    if not isinstance(value, str):
        return value
    begin = int(to_number(start) or 0)
    stop = to_number(end)
    return value[begin:] if stop is None else value[begin : int(stop)]


@register("truncate")
def _truncate(value=None, length=None, suffix=None):
    """Cut to at most `length` characters, the suffix ("..." by default) included."""
    if not isinstance(value, str):
        return value
    width = int(to_number(length) or 0)
    tail = "..." if suffix is None else to_string(suffix)
    if len(value) <= width:
        return value
    return value[: max(width - len(tail), 0)] + tail
