"""Typed filter-expression tree.

Compiled predicates are kept as a small tree of nodes until the very end,
when :meth:`Expression.to_document` renders the MongoDB filter document.

    FieldEquals("status", "active")          -> {"status": "active"}
    FieldOp("age", {"$gte": 18})             -> {"age": {"$gte": 18}}
    And([a, b])                              -> {"$and": [a, b]}
    Or([a])                                  -> {"$or": [a]}
    Raw({"$where": "..."})                   -> {"$where": "..."}
    Document([And([a]), Or([b])])            -> {"$and": [a], "$or": [b]}

:func:`merge` combines an accumulator with the next compiled clause. Logical
arrays under the same combinator concatenate instead of replacing each other,
operator mappings on the same field are unioned, and keys keep the position
of their first appearance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class Expression:
    """Base class for filter-expression nodes."""

    def to_document(self) -> dict[str, Any]:
        raise NotImplementedError

    def keys(self) -> tuple[str, ...]:
        return tuple(self.to_document())


@dataclass(frozen=True)
class FieldEquals(Expression):
    field: str
    value: Any

    def to_document(self) -> dict[str, Any]:
        return {self.field: self.value}

    def keys(self) -> tuple[str, ...]:
        return (self.field,)


@dataclass(frozen=True)
class FieldOp(Expression):
    field: str
    operators: dict[str, Any]

    def to_document(self) -> dict[str, Any]:
        return {self.field: dict(self.operators)}

    def keys(self) -> tuple[str, ...]:
        return (self.field,)


@dataclass(frozen=True)
class And(Expression):
    items: tuple[Expression, ...] = ()

    def to_document(self) -> dict[str, Any]:
        return {"$and": [item.to_document() for item in self.items]}

    def keys(self) -> tuple[str, ...]:
        return ("$and",)


@dataclass(frozen=True)
class Or(Expression):
    items: tuple[Expression, ...] = ()

    def to_document(self) -> dict[str, Any]:
        return {"$or": [item.to_document() for item in self.items]}

    def keys(self) -> tuple[str, ...]:
        return ("$or",)


@dataclass(frozen=True)
class Raw(Expression):
    document: dict[str, Any]

    def to_document(self) -> dict[str, Any]:
        return dict(self.document)


@dataclass(frozen=True)
class Document(Expression):
    """Union of clauses rendered side by side in one filter document."""

    clauses: tuple[Expression, ...] = field(default_factory=tuple)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        for clause in self.clauses:
            doc.update(clause.to_document())
        return doc

    def keys(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for clause in self.clauses:
            seen.update(dict.fromkeys(clause.keys()))
        return tuple(seen)

    def __bool__(self) -> bool:
        return bool(self.clauses)


EMPTY = Document()


def _combine(left: Expression, right: Expression) -> Expression | None:
    """Merge two clauses that render under the same key, or return None."""
    if isinstance(left, And) and isinstance(right, And):
        return And(left.items + right.items)
    if isinstance(left, Or) and isinstance(right, Or):
        return Or(left.items + right.items)
    if (
        isinstance(left, FieldOp)
        and isinstance(right, FieldOp)
        and left.field == right.field
    ):
        return FieldOp(left.field, {**left.operators, **right.operators})
    return None


def merge(left: Expression, right: Expression) -> Document:
    """Merge ``right`` into ``left``; both sides are left untouched."""
    clauses = list(left.clauses) if isinstance(left, Document) else [left]
    incoming = right.clauses if isinstance(right, Document) else (right,)

    for clause in incoming:
        for index, existing in enumerate(clauses):
            if existing.keys() != clause.keys():
                continue
            combined = _combine(existing, clause)
            if combined is not None:
                clauses[index] = combined
                break
        else:
            clauses.append(clause)
    return Document(tuple(clauses))
