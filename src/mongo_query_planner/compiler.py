"""Predicate compiler: an ordered predicate list -> one MongoDB filter document.

Every predicate is normalized (operator case and spelling, identifier and
temporal values), compiled by the function registered for its variant, then
wrapped by its combinator and merged into the accumulated expression:

    [status = "active", age > 18 (or)]
        -> {"$or": [{"status": "active"}, {"age": {"$gt": 18}}]}

The first predicate of a multi-predicate list takes the combinator of the
second one, so the example above becomes a pure disjunction.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from typing import Any

from .canonical import convert_datetime, convert_key, is_id_column
from .exceptions import MalformedPredicateError
from .expressions import EMPTY, And, Document, Expression, Or, Raw, merge
from .operators import (
    compile_between,
    compile_set,
    compile_standard,
    compile_string,
    normalize_operator,
)
from .predicates import Predicate, PredicateType

_COLUMNLESS = frozenset({PredicateType.NESTED, PredicateType.RAW})


def _predicate_type(predicate: Predicate) -> PredicateType:
    try:
        return PredicateType(predicate.type)
    except ValueError:
        raise MalformedPredicateError(
            f"Unknown predicate type: {predicate.type!r}"
        ) from None


def _normalize(predicate: Predicate, kind: PredicateType) -> Predicate:
    if kind not in _COLUMNLESS and not predicate.column:
        raise MalformedPredicateError(f"Predicate missing 'column': {predicate!r}")

    changes: dict[str, Any] = {}
    value = predicate.value
    values = predicate.values

    if predicate.operator is not None:
        changes["operator"] = normalize_operator(predicate.operator)

    if is_id_column(predicate.column):
        if values is not None:
            values = [convert_key(v) for v in values]
        else:
            value = convert_key(value)

    value = convert_datetime(value)
    if values:
        values = [convert_datetime(v) for v in values]

    if value is not predicate.value:
        changes["value"] = value
    if values is not predicate.values:
        changes["values"] = values
    return dataclasses.replace(predicate, **changes) if changes else predicate


def _compile_basic(predicate: Predicate) -> Expression:
    column = predicate.column or ""
    pattern = compile_string(column, predicate.operator, predicate.value)
    if pattern is not None:
        return pattern
    return compile_standard(column, predicate.operator, predicate.value)


def _required_values(predicate: Predicate) -> Sequence[Any]:
    if predicate.values is None:
        raise MalformedPredicateError(f"Predicate missing 'values': {predicate!r}")
    return predicate.values


def _compile_in(predicate: Predicate) -> Expression:
    values = _required_values(predicate)
    return compile_set(predicate.column or "", values, negated=False)


def _compile_not_in(predicate: Predicate) -> Expression:
    values = _required_values(predicate)
    return compile_set(predicate.column or "", values, negated=True)


def _compile_null(predicate: Predicate) -> Expression:
    return _compile_basic(dataclasses.replace(predicate, operator="=", value=None))


def _compile_not_null(predicate: Predicate) -> Expression:
    return _compile_basic(dataclasses.replace(predicate, operator="!=", value=None))


def _compile_between(predicate: Predicate) -> Expression:
    return compile_between(
        predicate.column or "", predicate.values, negated=predicate.negated
    )


def _compile_nested(predicate: Predicate) -> Expression:
    return compile_expression(predicate.predicates)


def _compile_raw(predicate: Predicate) -> Expression:
    if predicate.document is None:
        raise MalformedPredicateError(f"Predicate missing 'document': {predicate!r}")
    return Raw(predicate.document)


_COMPILERS: dict[PredicateType, Callable[[Predicate], Expression]] = {
    PredicateType.BASIC: _compile_basic,
    PredicateType.IN: _compile_in,
    PredicateType.NOT_IN: _compile_not_in,
    PredicateType.NULL: _compile_null,
    PredicateType.NOT_NULL: _compile_not_null,
    PredicateType.BETWEEN: _compile_between,
    PredicateType.NESTED: _compile_nested,
    PredicateType.RAW: _compile_raw,
}


def compile_expression(predicates: Sequence[Predicate]) -> Document:
    """Compile ``predicates`` to a typed expression tree."""
    compiled: Document = EMPTY
    multiple = len(predicates) > 1

    for index, original in enumerate(predicates):
        kind = _predicate_type(original)
        predicate = _normalize(original, kind)

        is_or = predicate.is_or
        if index == 0 and multiple and not is_or:
            is_or = predicates[1].is_or

        result = _COMPILERS[kind](predicate)

        if is_or:
            result = Or((result,))
        elif multiple:
            result = And((result,))

        compiled = merge(compiled, result)

    return compiled


def compile_predicates(predicates: Sequence[Predicate]) -> dict[str, Any]:
    """Compile ``predicates`` to a MongoDB filter document."""
    return compile_expression(predicates).to_document()


class PredicateCompiler:
    """Stateless facade over :func:`compile_predicates`."""

    def compile(self, predicates: Sequence[Predicate]) -> dict[str, Any]:
        return compile_predicates(predicates)

    def compile_expression(self, predicates: Sequence[Predicate]) -> Document:
        return compile_expression(predicates)
