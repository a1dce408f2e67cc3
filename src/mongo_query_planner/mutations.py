"""Mutation compiler: update intents -> MongoDB update-operator documents."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .predicates import Boolean, Predicate

OPERATOR_SIGIL = "$"


def is_dense_sequence(value: Any) -> bool:
    """True for a non-empty list/tuple, or a mapping keyed exactly ``0..n-1``."""
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    if isinstance(value, Mapping):
        return len(value) > 0 and list(value.keys()) == list(range(len(value)))
    return False


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, Mapping):
        return list(value.values())
    return list(value)


def build_update(values: Mapping[str, Any]) -> dict[str, Any]:
    """Wrap ``values`` under ``$set`` unless it already holds update operators."""
    if any(str(key).startswith(OPERATOR_SIGIL) for key in values):
        return dict(values)
    return {"$set": dict(values)}


@dataclass(frozen=True)
class Increment:
    """An ``$inc`` update plus the predicate that must guard it.

    ``guard`` matches documents where the field is missing or not null, so
    the increment never runs against an explicit null.
    """

    update: dict[str, Any]
    guard: Predicate

    def apply_guard(self, predicates: Sequence[Predicate]) -> list[Predicate]:
        """Return ``predicates`` with the guard appended (AND)."""
        return [*predicates, self.guard]


def build_increment(
    column: str, amount: int | float = 1, extra: Mapping[str, Any] | None = None
) -> Increment:
    update: dict[str, Any] = {"$inc": {column: amount}}
    if extra:
        update["$set"] = dict(extra)

    guard = Predicate.nested(
        [
            Predicate.basic(column, "exists", False),
            Predicate.null(column, Boolean.OR, negated=True),
        ]
    )
    return Increment(update, guard)


def build_decrement(
    column: str, amount: int | float = 1, extra: Mapping[str, Any] | None = None
) -> Increment:
    return build_increment(column, -1 * amount, extra)


def build_array_insert(
    column: str | Mapping[str, Any], value: Any = None, unique: bool = False
) -> dict[str, Any]:
    """``$push`` (or ``$addToSet`` when ``unique``) one or many values.

    A mapping ``column`` is a multi-field spec used as the operator document
    as is. A dense sequence ``value`` is inserted element-wise via ``$each``.
    """
    operator = "$addToSet" if unique else "$push"

    if isinstance(column, Mapping):
        return {operator: dict(column)}
    if is_dense_sequence(value):
        return {operator: {column: {"$each": _as_list(value)}}}
    return {operator: {column: value}}


def build_array_remove(
    column: str | Mapping[str, Any], value: Any = None
) -> dict[str, Any]:
    """``$pullAll`` for a dense sequence ``value``, otherwise ``$pull``."""
    batch = is_dense_sequence(value)
    operator = "$pullAll" if batch else "$pull"

    if isinstance(column, Mapping):
        return {operator: dict(column)}
    if batch:
        return {operator: {column: _as_list(value)}}
    return {operator: {column: value}}


def build_unset(columns: str | Sequence[str]) -> dict[str, Any]:
    """``$unset`` every listed field."""
    if isinstance(columns, str):
        columns = [columns]
    return {"$unset": dict.fromkeys(columns, 1)}


def resolve_multiplicity(
    options: Mapping[str, Any] | None = None,
) -> tuple[bool, dict[str, Any]]:
    """Split the ``multiple`` flag off driver options.

    Mutations apply to every matching document unless ``multiple=False``.
    """
    remaining = dict(options or {})
    multiple = bool(remaining.pop("multiple", True))
    return multiple, remaining
