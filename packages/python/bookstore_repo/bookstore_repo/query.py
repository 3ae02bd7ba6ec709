"""Filter expressions and aggregation stages compiled into MongoDB documents.

Every expression validates its arguments on construction so that a malformed
query is rejected with ``InvalidQueryError`` before anything is sent to the
store. ``to_mongo()`` returns the plain dict the driver expects.

    query = And(Compare("rating", "gte", 4.5), Eq("in_stock", True))
    collection.find(query.to_mongo())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union

from db_core import Pipeline

from .errors import InvalidQueryError

_COMPARE_OPS = {"gt", "gte", "lt", "lte"}


# ---------------------------------------------------------
# Filters
# ---------------------------------------------------------


@dataclass(frozen=True)
class MatchAll:
    def to_mongo(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class Eq:
    """``field`` equals ``value`` (or, for array fields, contains it)."""

    field: str
    value: Any

    def to_mongo(self) -> dict[str, Any]:
        return {self.field: self.value}


@dataclass(frozen=True)
class Compare:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _COMPARE_OPS:
            raise InvalidQueryError(f"Unknown comparison operator '{self.op}'")

    def to_mongo(self) -> dict[str, Any]:
        return {self.field: {f"${self.op}": self.value}}


@dataclass(frozen=True)
class Range:
    """Inclusive range. Inverted bounds are allowed and simply match nothing."""

    field: str
    low: Any
    high: Any

    def to_mongo(self) -> dict[str, Any]:
        return {self.field: {"$gte": self.low, "$lte": self.high}}


@dataclass(frozen=True, init=False)
class And:
    clauses: Tuple["Filter", ...]

    def __init__(self, *clauses: "Filter"):
        if not clauses:
            raise InvalidQueryError("And() needs at least one clause")
        object.__setattr__(self, "clauses", tuple(clauses))

    def to_mongo(self) -> dict[str, Any]:
        return {"$and": [clause.to_mongo() for clause in self.clauses]}


@dataclass(frozen=True, init=False)
class Or:
    clauses: Tuple["Filter", ...]

    def __init__(self, *clauses: "Filter"):
        if not clauses:
            raise InvalidQueryError("Or() needs at least one clause")
        object.__setattr__(self, "clauses", tuple(clauses))

    def to_mongo(self) -> dict[str, Any]:
        return {"$or": [clause.to_mongo() for clause in self.clauses]}


@dataclass(frozen=True)
class MinSize:
    """Array ``field`` holds at least ``size`` elements."""

    field: str
    size: int

    def __post_init__(self) -> None:
        if self.size < 0:
            raise InvalidQueryError(f"MinSize needs a non-negative size, got {self.size}")

    def to_mongo(self) -> dict[str, Any]:
        return {"$expr": {"$gte": [{"$size": f"${self.field}"}, self.size]}}


@dataclass(frozen=True)
class Pattern:
    """Regular expression match on a string field.

    The pattern is PCRE, compiled by the store; a syntax error comes back from
    the server as ``OperationFailure``.
    """

    field: str
    pattern: str
    ignore_case: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.pattern, str):
            raise InvalidQueryError(f"Pattern must be a string, got {self.pattern!r}")

    def to_mongo(self) -> dict[str, Any]:
        clause: dict[str, Any] = {"$regex": self.pattern}
        if self.ignore_case:
            clause["$options"] = "i"
        return {self.field: clause}


Filter = Union[MatchAll, Eq, Compare, Range, And, Or, MinSize, Pattern]


# ---------------------------------------------------------
# Group accumulators
# ---------------------------------------------------------


@dataclass(frozen=True)
class Count:
    def to_mongo(self) -> dict[str, Any]:
        return {"$sum": 1}


@dataclass(frozen=True)
class Avg:
    field: str

    def to_mongo(self) -> dict[str, Any]:
        return {"$avg": f"${self.field}"}


@dataclass(frozen=True)
class Max:
    field: str

    def to_mongo(self) -> dict[str, Any]:
        return {"$max": f"${self.field}"}


@dataclass(frozen=True)
class Min:
    field: str

    def to_mongo(self) -> dict[str, Any]:
        return {"$min": f"${self.field}"}


@dataclass(frozen=True)
class SumOfSizes:
    """Sum of the lengths of an array field across the group."""

    field: str

    def to_mongo(self) -> dict[str, Any]:
        return {"$sum": {"$size": f"${self.field}"}}


Accumulator = Union[Count, Avg, Max, Min, SumOfSizes]


# ---------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------


@dataclass(frozen=True)
class Match:
    filter: Filter

    def to_mongo(self) -> dict[str, Any]:
        return {"$match": self.filter.to_mongo()}


@dataclass(frozen=True)
class Unwind:
    field: str

    def to_mongo(self) -> dict[str, Any]:
        return {"$unwind": f"${self.field}"}


@dataclass(frozen=True, init=False)
class Group:
    """Group by ``key`` (a field name, or ``None`` for a single group)."""

    key: Union[str, None]
    accumulators: Tuple[Tuple[str, Accumulator], ...]

    def __init__(self, key: Union[str, None], accumulators: Mapping[str, Accumulator]):
        if not accumulators:
            raise InvalidQueryError("Group() needs at least one accumulator")
        if "_id" in accumulators:
            raise InvalidQueryError("'_id' is reserved for the group key")
        object.__setattr__(self, "key", key)
        object.__setattr__(self, "accumulators", tuple(accumulators.items()))

    def to_mongo(self) -> dict[str, Any]:
        group: dict[str, Any] = {"_id": None if self.key is None else f"${self.key}"}
        for name, accumulator in self.accumulators:
            group[name] = accumulator.to_mongo()
        return {"$group": group}


@dataclass(frozen=True, init=False)
class Sort:
    """Multi-key sort; keys are ``(field, direction)`` with direction 1 or -1."""

    keys: Tuple[Tuple[str, int], ...]

    def __init__(self, *keys: Tuple[str, int]):
        if not keys:
            raise InvalidQueryError("Sort() needs at least one key")
        for field, direction in keys:
            if direction not in (1, -1):
                raise InvalidQueryError(
                    f"Sort direction for '{field}' must be 1 or -1, got {direction}"
                )
        object.__setattr__(self, "keys", tuple(keys))

    def to_mongo(self) -> dict[str, Any]:
        return {"$sort": dict(self.keys)}


@dataclass(frozen=True)
class Limit:
    count: int

    def __post_init__(self) -> None:
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count < 1:
            raise InvalidQueryError(f"Limit must be a positive integer, got {self.count!r}")

    def to_mongo(self) -> dict[str, Any]:
        return {"$limit": self.count}


@dataclass(frozen=True, init=False)
class Project:
    fields: Tuple[str, ...]

    def __init__(self, *fields: str):
        if not fields:
            raise InvalidQueryError("Project() needs at least one field")
        object.__setattr__(self, "fields", tuple(fields))

    def to_mongo(self) -> dict[str, Any]:
        return {"$project": {field: 1 for field in self.fields}}


Stage = Union[Match, Unwind, Group, Sort, Limit, Project]


def build_pipeline(*stages: Stage) -> Pipeline:
    """Compile ``stages`` into the list handed to ``collection.aggregate``."""

    if not stages:
        raise InvalidQueryError("A pipeline needs at least one stage")
    return [stage.to_mongo() for stage in stages]
