"""Query planner exceptions."""

from __future__ import annotations


class MongoQueryPlannerError(Exception):
    """Root exception for the query planner."""


class MongoQueryError(MongoQueryPlannerError):
    """Raised when a query cannot be compiled or planned."""


class MalformedPredicateError(MongoQueryError):
    """Raised for an unknown predicate type or a predicate missing a field.

    This is a programming error in the caller and is never retried.
    """


class MongoConnectionError(MongoQueryPlannerError):
    """Raised when the Motor client is unavailable or not connected."""
