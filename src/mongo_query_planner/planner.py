"""
Pipeline planner: choose between find, distinct and aggregate.

================================================================================
STRATEGY
================================================================================

    groups / aggregate / paginating  -> AggregatePlan
    distinct                         -> DistinctPlan
    otherwise                        -> FindPlan

================================================================================
AGGREGATION PIPELINE
================================================================================

Stage order is fixed:

    $match -> $unwind* -> $group -> $sort -> $skip -> $limit -> $project

$group emulates a relational GROUP BY over an unordered cursor: every group
column and every selected column keeps the last value seen ($last). Aggregate
functions land under the synthetic ``aggregate`` key:

    sum("items.*.price")
        [{"$unwind": "$items"},
         {"$group": {"aggregate": {"$sum": "$items.price"}, "_id": None}}]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from .exceptions import MongoQueryError
from .shape import UNWIND_MARKER, AggregateFunction, QueryShape

AGGREGATE_FIELD = "aggregate"
WILDCARD = "*"


@dataclass(frozen=True)
class FindPlan:
    """Plain filtered fetch: ``collection.find(filter, **options)``."""

    kind: ClassVar[str] = "find"

    filter: dict[str, Any]
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DistinctPlan:
    """Distinct values of one field: ``collection.distinct(key, filter)``."""

    kind: ClassVar[str] = "distinct"

    key: str
    filter: dict[str, Any] | None = None


@dataclass(frozen=True)
class AggregatePlan:
    """Multi-stage aggregation: ``collection.aggregate(pipeline, **options)``."""

    kind: ClassVar[str] = "aggregate"

    pipeline: list[dict[str, Any]]
    options: dict[str, Any] = field(default_factory=dict)


ExecutionPlan = Union[FindPlan, DistinctPlan, AggregatePlan]


def _selected_columns(shape: QueryShape) -> list[str]:
    # MongoDB has no wildcard projection; "*" means every field.
    if WILDCARD in shape.columns:
        return []
    return list(shape.columns)


def _build_group(
    shape: QueryShape, columns: list[str]
) -> tuple[dict[str, Any], list[str]]:
    group: dict[str, Any] = {}
    unwinds: list[str] = []

    if shape.groups:
        for column in shape.groups:
            group.setdefault("_id", {})[column] = f"${column}"
            group[column] = {"$last": f"${column}"}

        for column in columns:
            group[column.replace(".", "_")] = {"$last": f"${column}"}

    if shape.aggregate is not None:
        function = shape.aggregate.function_name
        aggregate_columns = shape.aggregate.columns

        if not aggregate_columns:
            if function != AggregateFunction.COUNT.value:
                raise MongoQueryError(f"Aggregate {function!r} requires a column")
            group[AGGREGATE_FIELD] = {"$sum": 1}

        for column in aggregate_columns:
            parts = column.split(UNWIND_MARKER)
            if len(parts) == 2:
                unwinds.append(parts[0])
                column = ".".join(parts)

            if function == AggregateFunction.COUNT.value:
                group[AGGREGATE_FIELD] = {"$sum": 1}
            else:
                group[AGGREGATE_FIELD] = {f"${function}": f"${column}"}

    if group and not group.get("_id"):
        group["_id"] = None

    return group, unwinds


def build_pipeline(shape: QueryShape, filter: dict[str, Any]) -> list[dict[str, Any]]:
    """Build the aggregation pipeline for ``shape``."""
    columns = _selected_columns(shape)
    group, unwinds = _build_group(shape, columns)

    projections = dict(shape.projections)
    if shape.paginating:
        for column in columns:
            projections[column] = 1

    pipeline: list[dict[str, Any]] = []
    if filter:
        pipeline.append({"$match": filter})
    for path in unwinds:
        pipeline.append({"$unwind": f"${path}"})
    if group:
        pipeline.append({"$group": group})
    if shape.orders:
        pipeline.append({"$sort": dict(shape.orders)})
    if shape.offset:
        pipeline.append({"$skip": shape.offset})
    if shape.limit:
        pipeline.append({"$limit": shape.limit})
    if projections:
        pipeline.append({"$project": projections})
    return pipeline


def build_find_options(shape: QueryShape) -> dict[str, Any]:
    """Build ``find()`` keyword options; only the set ones are present."""
    projection: dict[str, Any] = dict.fromkeys(_selected_columns(shape), True)
    projection.update(shape.projections)

    options: dict[str, Any] = {}
    if shape.timeout:
        options["max_time_ms"] = shape.timeout
    if shape.orders:
        options["sort"] = list(shape.orders.items())
    if shape.offset:
        options["skip"] = shape.offset
    if shape.limit:
        options["limit"] = shape.limit
    if projection:
        options["projection"] = projection

    options.update(shape.options)
    return options


def plan_query(shape: QueryShape, filter: dict[str, Any]) -> ExecutionPlan:
    """Choose the execution strategy for ``shape`` and ``filter``."""
    if shape.needs_aggregation:
        return AggregatePlan(build_pipeline(shape, filter), dict(shape.options))

    if shape.distinct:
        columns = _selected_columns(shape)
        key = columns[0] if columns else "_id"
        return DistinctPlan(key, filter or None)

    return FindPlan(filter, build_find_options(shape))


class PipelinePlanner:
    """Stateless facade over :func:`plan_query`."""

    def plan(self, shape: QueryShape, filter: dict[str, Any]) -> ExecutionPlan:
        return plan_query(shape, filter)
