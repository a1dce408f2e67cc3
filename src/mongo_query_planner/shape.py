"""
Query shape: everything besides the filter that decides how a query runs.

``QueryShape`` is built by :class:`~mongo_query_planner.builder.QueryBuilder`
(or by hand) and consumed once by the planner. The predicates define *what*
to match; the shape defines *how* results are fetched and returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UNWIND_MARKER = ".*."
NATURAL_ORDER = "$natural"


class AggregateFunction(str, Enum):
    """Aggregate functions with a MongoDB ``$group`` accumulator."""

    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    COUNT = "count"


@dataclass(frozen=True)
class AggregateSpec:
    """
    An aggregate function request.

    Attributes:
        function: One of sum/avg/min/max/count.
        columns: Field paths. ``items.*.price`` means "unwind ``items`` and
            aggregate ``items.price``".
    """

    function: AggregateFunction | str
    columns: tuple[str, ...] = ()

    @property
    def function_name(self) -> str:
        return str(getattr(self.function, "value", self.function)).lower()


@dataclass(frozen=True)
class QueryShape:
    """
    Immutable result-shaping state consumed by the planner.

    Attributes:
        columns: Selected fields (projection list).
        groups: Group-by fields, in order.
        aggregate: Aggregate function request, if any.
        orders: Ordered mapping field -> 1 | -1 (``$natural`` allowed).
        offset: Documents to skip.
        limit: Maximum documents to return.
        distinct: Return the distinct values of one field.
        projections: Explicit projection overrides.
        options: Opaque driver options merged last.
        paginating: Set by page-based limiting; forces the aggregation path.
        timeout: Maximum server-side execution time in milliseconds.
    """

    columns: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()
    aggregate: AggregateSpec | None = None
    orders: dict[str, int] = field(default_factory=dict)
    offset: int | None = None
    limit: int | None = None
    distinct: bool = False
    projections: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)
    paginating: bool = False
    timeout: int | None = None

    @property
    def needs_aggregation(self) -> bool:
        return bool(self.groups or self.aggregate or self.paginating)
