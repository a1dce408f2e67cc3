"""Predicate model: one filter clause and its boolean combinator."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PredicateType(str, Enum):
    """Tagged variants of a filter clause."""

    BASIC = "basic"
    IN = "in"
    NOT_IN = "not_in"
    NULL = "null"
    NOT_NULL = "not_null"
    BETWEEN = "between"
    NESTED = "nested"
    RAW = "raw"


class Boolean(str, Enum):
    """How a predicate joins its siblings."""

    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class Predicate:
    """
    One filter clause.

    Attributes:
        type: Variant tag, selects the compiler.
        column: Field path, dot-separated for sub-documents.
        operator: Basic only; ``None`` means equality.
        value: Scalar operand (Basic).
        values: Ordered operands (In, NotIn, Between).
        boolean: Combinator relative to the previous sibling.
        negated: Between only; ``True`` for "not between".
        predicates: Nested only; the owned sub-list.
        document: Raw only; a pre-built filter document.
    """

    type: PredicateType | str
    column: str | None = None
    operator: str | None = None
    value: Any = None
    values: Sequence[Any] | None = None
    boolean: Boolean | str = Boolean.AND
    negated: bool = False
    predicates: tuple[Predicate, ...] = field(default_factory=tuple)
    document: dict[str, Any] | None = None

    @classmethod
    def basic(
        cls,
        column: str,
        operator: str | None,
        value: Any,
        boolean: Boolean | str = Boolean.AND,
    ) -> Predicate:
        return cls(
            PredicateType.BASIC,
            column=column,
            operator=operator,
            value=value,
            boolean=boolean,
        )

    @classmethod
    def in_(
        cls,
        column: str,
        values: Sequence[Any],
        boolean: Boolean | str = Boolean.AND,
        *,
        negated: bool = False,
    ) -> Predicate:
        kind = PredicateType.NOT_IN if negated else PredicateType.IN
        return cls(kind, column=column, values=list(values), boolean=boolean)

    @classmethod
    def null(
        cls,
        column: str,
        boolean: Boolean | str = Boolean.AND,
        *,
        negated: bool = False,
    ) -> Predicate:
        kind = PredicateType.NOT_NULL if negated else PredicateType.NULL
        return cls(kind, column=column, boolean=boolean)

    @classmethod
    def between(
        cls,
        column: str,
        values: Sequence[Any],
        boolean: Boolean | str = Boolean.AND,
        *,
        negated: bool = False,
    ) -> Predicate:
        return cls(
            PredicateType.BETWEEN,
            column=column,
            values=list(values),
            boolean=boolean,
            negated=negated,
        )

    @classmethod
    def nested(
        cls,
        predicates: Sequence[Predicate],
        boolean: Boolean | str = Boolean.AND,
    ) -> Predicate:
        return cls(PredicateType.NESTED, predicates=tuple(predicates), boolean=boolean)

    @classmethod
    def raw(
        cls,
        document: dict[str, Any],
        boolean: Boolean | str = Boolean.AND,
    ) -> Predicate:
        return cls(PredicateType.RAW, document=document, boolean=boolean)

    @property
    def is_or(self) -> bool:
        return str(getattr(self.boolean, "value", self.boolean)).lower() == "or"
