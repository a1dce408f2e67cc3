"""Query compilation and execution planning for MongoDB.

Turns relational-style query descriptions (predicates, groupings, aggregates,
ordering, pagination) into MongoDB filter, pipeline and update documents, and
dispatches them against a Motor collection.
"""

from __future__ import annotations

from .builder import QueryBuilder
from .canonical import convert_datetime, convert_key
from .compiler import PredicateCompiler, compile_expression, compile_predicates
from .connection import MongoConnectionManager
from .exceptions import (
    MalformedPredicateError,
    MongoConnectionError,
    MongoQueryError,
    MongoQueryPlannerError,
)
from .fingerprint import fingerprint
from .mutations import (
    Increment,
    build_array_insert,
    build_array_remove,
    build_decrement,
    build_increment,
    build_unset,
    build_update,
    resolve_multiplicity,
)
from .planner import (
    AggregatePlan,
    DistinctPlan,
    ExecutionPlan,
    FindPlan,
    PipelinePlanner,
    plan_query,
)
from .predicates import Boolean, Predicate, PredicateType
from .shape import AggregateFunction, AggregateSpec, QueryShape

__all__ = [
    # Model
    "Boolean",
    "Predicate",
    "PredicateType",
    "AggregateFunction",
    "AggregateSpec",
    "QueryShape",
    # Compilation
    "PredicateCompiler",
    "compile_expression",
    "compile_predicates",
    "convert_key",
    "convert_datetime",
    # Planning
    "PipelinePlanner",
    "plan_query",
    "ExecutionPlan",
    "FindPlan",
    "DistinctPlan",
    "AggregatePlan",
    # Mutations
    "Increment",
    "build_update",
    "build_increment",
    "build_decrement",
    "build_array_insert",
    "build_array_remove",
    "build_unset",
    "resolve_multiplicity",
    # Cache keys
    "fingerprint",
    # Front-end
    "MongoConnectionManager",
    "QueryBuilder",
    # Exceptions
    "MongoQueryPlannerError",
    "MongoQueryError",
    "MalformedPredicateError",
    "MongoConnectionError",
]
