"""Pattern operators -> case-insensitive Regex equality, $regex, $not."""

from __future__ import annotations

import re
from typing import Any

from bson.regex import Regex

from ..expressions import Expression, FieldEquals, FieldOp

LIKE_OPERATORS = frozenset({"like", "ilike"})
NOT_LIKE_OPERATORS = frozenset({"not like", "not ilike"})
REGEX_OPERATORS = frozenset({"regex", "regexp", "not regex", "not regexp"})

_UNESCAPED_WILDCARD = re.compile(r"(^|[^\\])%")
_DELIMITED_REGEX = re.compile(r"^/(.*)/([A-Za-z]*)$", re.DOTALL)


def like_to_regex(value: str) -> Regex[Any]:
    """Translate a ``%`` wildcard pattern to an anchored, case-insensitive Regex."""
    pattern = _UNESCAPED_WILDCARD.sub(r"\1.*", re.escape(value))
    if not value.startswith("%"):
        pattern = "^" + pattern
    if not value.endswith("%"):
        pattern = pattern + "$"
    return Regex(pattern, "i")


def parse_regex(value: Any) -> Any:
    """Parse ``/pattern/flags`` into a Regex; other values pass through."""
    if isinstance(value, Regex):
        return value
    if isinstance(value, re.Pattern):
        return Regex.from_native(value)
    if isinstance(value, str):
        match = _DELIMITED_REGEX.match(value)
        if match:
            return Regex(match.group(1), match.group(2))
    return value


def compile_string(column: str, operator: str | None, value: Any) -> Expression | None:
    """Compile pattern operators. Returns None if ``operator`` is not one.

    Non-string ``like`` operands are matched on their string form.
    """
    if operator in LIKE_OPERATORS or operator in NOT_LIKE_OPERATORS:
        regex = like_to_regex(value if isinstance(value, str) else str(value))
        if operator in NOT_LIKE_OPERATORS:
            return FieldOp(column, {"$not": regex})
        return FieldEquals(column, regex)
    if operator is not None and operator in REGEX_OPERATORS:
        pattern = parse_regex(value)
        if operator.startswith("not"):
            # $not only accepts a regex object or an operator document.
            if isinstance(pattern, str):
                pattern = Regex(pattern)
            return FieldOp(column, {"$not": pattern})
        return FieldOp(column, {"$regex": pattern})
    return None
